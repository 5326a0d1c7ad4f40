"""Drag-and-drop allocation board for daily reports (일보 배정 보드).

State is a normalized store: items by id, plus one ordered id list per
container (a team's unassigned pool or a site card). An item's site is
whichever container holds it, and every move goes through `_place`, which
also keeps `is_confirmed` equal to "has a site".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, Optional, Sequence, Union

from ..core.constants import BOARD_COLUMN_COUNT, DEFAULT_MAN_DAY, DEFAULT_REPORT_ROLE
from ..core.enums import AttendanceStatus, SalaryModel, TeamType
from ..core.exceptions import NotFoundError, ValidationError
from ..sites.model import Site
from ..teams.model import Team
from ..workers.model import Worker
from .model import DailyReport, ReportWorker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeamPool:
    """Container key for a team's unassigned workers."""

    team_id: str


Container = Union[str, TeamPool]


@dataclass(frozen=True)
class WorkerItem:
    temp_id: str
    worker: Worker
    team_id: str
    current_site_id: Optional[str] = None
    man_day: float = DEFAULT_MAN_DAY
    status: AttendanceStatus = AttendanceStatus.ATTENDANCE
    work_content: str = ""
    is_confirmed: bool = False

    @property
    def is_assigned(self) -> bool:
        return self.current_site_id is not None


@dataclass(frozen=True)
class DropTarget:
    """Where a drag ended: the pool, a site card, or another worker."""

    pool: bool = False
    site_id: Optional[str] = None
    worker_id: Optional[str] = None

    @classmethod
    def to_pool(cls) -> "DropTarget":
        return cls(pool=True)

    @classmethod
    def to_site(cls, site_id: str) -> "DropTarget":
        return cls(site_id=site_id)

    @classmethod
    def onto_worker(cls, temp_id: str) -> "DropTarget":
        return cls(worker_id=temp_id)


def snapshot_salary_model(worker: Worker) -> str:
    if worker.team_type == TeamType.SUPPORT.value:
        return SalaryModel.SUPPORT.value
    if worker.team_type == TeamType.SERVICE.value:
        return SalaryModel.SERVICE.value
    return worker.salary_model or SalaryModel.DAILY.value


class AllocationBoard:
    def __init__(
        self,
        *,
        day: date,
        teams: Sequence[Team],
        sites: Sequence[Site],
        workers: Iterable[Worker],
        column_count: int = BOARD_COLUMN_COUNT,
    ):
        self.day = day
        self.weather = ""
        self.site_work_content: dict[str, str] = {}
        self.target_site_id: Optional[str] = None

        self._teams = {t.id: t for t in teams}
        self._sites = {s.id: s for s in sites}
        self._items: dict[str, WorkerItem] = {}
        self._order: dict[Container, list[str]] = {}
        self._selected: set[str] = set()

        self.columns: list[list[str]] = [[] for _ in range(column_count)]
        for index, site in enumerate(sites):
            self.columns[index % column_count].append(site.id)
            self._order[site.id] = []
        for team in teams:
            self._order[TeamPool(team.id)] = []

        for worker in workers:
            if not worker.team_id or worker.team_id not in self._teams:
                continue
            item = WorkerItem(temp_id=worker.id, worker=worker, team_id=worker.team_id)
            self._items[item.temp_id] = item
            self._order[TeamPool(worker.team_id)].append(item.temp_id)

    # ----- reads -----

    def item(self, temp_id: str) -> WorkerItem:
        try:
            return self._items[temp_id]
        except KeyError:
            raise NotFoundError(f"작업자를 찾을 수 없습니다: {temp_id}")

    @property
    def items(self) -> list[WorkerItem]:
        return [self._items[i] for ids in self._order.values() for i in ids]

    @property
    def selected(self) -> set[str]:
        return set(self._selected)

    def items_in(self, container: Container) -> list[WorkerItem]:
        return [self._items[i] for i in self._order.get(container, [])]

    def unassigned(self, team_id: str) -> list[WorkerItem]:
        return self.items_in(TeamPool(team_id))

    def assigned_to(self, site_id: str) -> list[WorkerItem]:
        return self.items_in(site_id)

    def _container_of(self, temp_id: str) -> Container:
        item = self._items[temp_id]
        return item.current_site_id if item.is_assigned else TeamPool(item.team_id)

    def _ordered(self, ids: Iterable[str]) -> list[str]:
        wanted = set(ids)
        return [i for i in (x for lst in self._order.values() for x in lst) if i in wanted]

    # ----- single mutation point -----

    def _place(
        self,
        temp_id: str,
        site_id: Optional[str],
        *,
        before: Optional[str] = None,
        keep_man_day: bool = False,
    ) -> None:
        item = self._items[temp_id]
        if site_id is not None and site_id not in self._sites:
            raise NotFoundError(f"현장을 찾을 수 없습니다: {site_id}")

        source = self._container_of(temp_id)
        site_changed = item.current_site_id != site_id
        self._items[temp_id] = replace(
            item,
            current_site_id=site_id,
            man_day=DEFAULT_MAN_DAY if site_changed and not keep_man_day else item.man_day,
            is_confirmed=site_id is not None,
        )

        target = self._container_of(temp_id)
        if source == target and (before is None or before == temp_id):
            return

        self._order[source].remove(temp_id)
        ids = self._order[target]
        if before is not None and before in ids:
            ids.insert(ids.index(before), temp_id)
        else:
            ids.append(temp_id)

    # ----- selection -----

    def toggle_select(self, temp_id: str) -> None:
        """Selecting across assigned/unassigned contexts restarts the selection."""
        target = self.item(temp_id)
        mixed = any(self._items[s].is_assigned != target.is_assigned for s in self._selected if s in self._items)
        if mixed:
            self._selected = {temp_id}
        elif temp_id in self._selected:
            self._selected.discard(temp_id)
        else:
            self._selected.add(temp_id)

    def select_all_unassigned(self, team_id: str) -> None:
        ids = [i.temp_id for i in self.unassigned(team_id)]
        if all(i in self._selected for i in ids):
            self._selected.difference_update(ids)
        else:
            self._selected.update(ids)

    def clear_selection(self) -> None:
        self._selected.clear()

    # ----- assignment -----

    def quick_assign(self, site_id: Optional[str] = None) -> int:
        site_id = site_id or self.target_site_id
        if not site_id:
            raise ValidationError("배정할 현장을 선택해주세요.")
        if not self._selected:
            raise ValidationError("배정할 인원을 선택해주세요.")

        moved = self._ordered(self._selected)
        for temp_id in moved:
            self._place(temp_id, site_id)
        self._selected.clear()
        return len(moved)

    def double_click(self, temp_id: str) -> None:
        item = self.item(temp_id)
        if item.is_assigned:
            self._place(temp_id, None)
            return
        if not self.target_site_id:
            raise ValidationError("먼저 '빠른 배정'에서 현장을 선택해주세요.")
        self._place(temp_id, self.target_site_id)

    def drag_start(self, temp_id: str) -> None:
        self.item(temp_id)
        if temp_id not in self._selected:
            self._selected = {temp_id}

    def drag_end(self, temp_id: str, target: DropTarget) -> int:
        self.item(temp_id)
        before: Optional[str] = None
        if target.pool:
            site_id = None
        elif target.site_id is not None:
            site_id = target.site_id
        elif target.worker_id is not None:
            over = self.item(target.worker_id)
            site_id = over.current_site_id
            before = over.temp_id
        else:
            return 0

        to_move = self._ordered(self._selected) if temp_id in self._selected else [temp_id]
        if before in to_move:
            before = None
        for moving_id in to_move:
            self._place(moving_id, site_id, before=before)

        if len(to_move) > 1:
            self._selected.clear()
        return len(to_move)

    def update_item(
        self,
        temp_id: str,
        *,
        man_day: Optional[float] = None,
        status: Optional[AttendanceStatus] = None,
        work_content: Optional[str] = None,
    ) -> None:
        item = self.item(temp_id)
        if man_day is not None:
            try:
                man_day = float(man_day)
            except (TypeError, ValueError):
                raise ValidationError("공수는 숫자여야 합니다.")
            if man_day < 0:
                raise ValidationError("공수는 0 이상이어야 합니다.")
        self._items[temp_id] = replace(
            item,
            man_day=item.man_day if man_day is None else man_day,
            status=status or item.status,
            work_content=item.work_content if work_content is None else work_content,
        )

    def assign_worker(
        self,
        worker_id: str,
        site_id: Optional[str],
        *,
        man_day: Optional[float] = None,
        status: Optional[AttendanceStatus] = None,
        work_content: Optional[str] = None,
    ) -> None:
        """Set one worker's final placement, as submitted by a client board."""
        temp_id = next((i.temp_id for i in self.items if i.worker.id == worker_id), None)
        if temp_id is None:
            raise NotFoundError(f"작업자를 찾을 수 없습니다: {worker_id}")
        self._place(temp_id, site_id)
        self.update_item(temp_id, man_day=man_day, status=status, work_content=work_content)

    def apply_previous_assignments(self, worker_sites: dict[str, str]) -> int:
        """Replay a worker→site map; everyone not in it goes back to the pool. man_day is kept."""
        if not worker_sites:
            raise ValidationError("이전 일보 내역을 찾을 수 없습니다.")

        applied = 0
        for temp_id in [i.temp_id for i in self.items]:
            site_id = worker_sites.get(self._items[temp_id].worker.id)
            if site_id and site_id in self._sites:
                self._place(temp_id, site_id, keep_man_day=True)
                applied += 1
            else:
                self._place(temp_id, None, keep_man_day=True)
        self._selected.clear()
        return applied

    def reset_all(self) -> None:
        for temp_id in [i.temp_id for i in self.items if i.is_assigned]:
            self._place(temp_id, None, keep_man_day=True)
        self._selected.clear()

    # ----- site cards -----

    def _column_of(self, site_id: str) -> int:
        for index, column in enumerate(self.columns):
            if site_id in column:
                return index
        raise NotFoundError(f"현장을 찾을 수 없습니다: {site_id}")

    def move_site_card(self, site_id: str, *, column: int, index: Optional[int] = None) -> None:
        if column < 0 or column >= len(self.columns):
            raise ValidationError("잘못된 열 위치입니다.")
        self.columns[self._column_of(site_id)].remove(site_id)
        target = self.columns[column]
        if index is None or index > len(target):
            target.append(site_id)
        else:
            target.insert(max(index, 0), site_id)

    # ----- load / save -----

    def load_reports(self, reports: Iterable[DailyReport]) -> None:
        """Workers already in the day's reports start assigned and confirmed."""
        by_worker = {item.worker.id: item.temp_id for item in self.items}
        for report in reports:
            if report.site_id not in self._sites:
                continue
            if report.work_content:
                self.site_work_content[report.site_id] = report.work_content
            if report.weather and not self.weather:
                self.weather = report.weather
            for rw in report.workers:
                temp_id = by_worker.get(rw.worker_id)
                if not temp_id:
                    continue
                self._place(temp_id, report.site_id)
                self._items[temp_id] = replace(
                    self._items[temp_id],
                    man_day=rw.man_day,
                    status=rw.status,
                    work_content=rw.work_content,
                )

    def build_reports(self, *, writer_id: str = "") -> list[DailyReport]:
        """Regroup confirmed, assigned workers by (site, team)."""
        groups: dict[tuple[str, str], list[WorkerItem]] = {}
        for item in self.items:
            if not (item.is_confirmed and item.is_assigned):
                continue
            groups.setdefault((item.current_site_id, item.team_id), []).append(item)

        reports: list[DailyReport] = []
        for (site_id, team_id), members in groups.items():
            site = self._sites.get(site_id)
            team = self._teams.get(team_id)
            if not site or not team:
                logger.warning("Skipping report group with missing site/team: site=%s team=%s", site_id, team_id)
                continue

            workers = tuple(
                ReportWorker(
                    worker_id=m.worker.id,
                    name=m.worker.name,
                    role=m.worker.role or DEFAULT_REPORT_ROLE,
                    status=m.status,
                    man_day=m.man_day,
                    work_content=m.work_content,
                    team_id=m.team_id,
                    unit_price=m.worker.unit_price or 0,
                    salary_model=snapshot_salary_model(m.worker),
                )
                for m in members
            )
            reports.append(
                DailyReport(
                    id="",
                    date=self.day,
                    team_id=team.id,
                    team_name=team.name,
                    site_id=site.id,
                    site_name=site.name,
                    responsible_team_id=site.responsible_team_id,
                    responsible_team_name=site.responsible_team_name,
                    writer_id=writer_id or "unknown",
                    workers=workers,
                    total_man_day=sum(w.man_day for w in workers),
                    total_amount=sum(w.amount for w in workers),
                    work_content=self.site_work_content.get(site.id, ""),
                    weather=self.weather,
                )
            )
        return reports

    @property
    def team_ids(self) -> list[str]:
        return list(self._teams)

    def as_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "weather": self.weather,
            "target_site_id": self.target_site_id,
            "columns": [list(c) for c in self.columns],
            "pools": {t: [i.temp_id for i in self.unassigned(t)] for t in self._teams},
            "sites": {s: [i.temp_id for i in self.assigned_to(s)] for s in self._sites},
            "items": {
                i.temp_id: {
                    "worker_id": i.worker.id,
                    "name": i.worker.name,
                    "team_id": i.team_id,
                    "current_site_id": i.current_site_id,
                    "man_day": i.man_day,
                    "status": i.status.value,
                    "work_content": i.work_content,
                    "is_confirmed": i.is_confirmed,
                }
                for i in self.items
            },
            "selected": sorted(self._selected),
        }
