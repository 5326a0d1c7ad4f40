from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..core.enums import WorkerStatus
from ..core.exceptions import ValidationError
from ..sites.repository import SiteRepository
from ..teams.repository import TeamRepository
from ..workers.repository import WorkerRepository
from .allocator import AllocationBoard
from .service import DailyReportService

logger = logging.getLogger(__name__)


class AllocationService:
    """Use case: build, replay and save the daily allocation board."""

    def __init__(
        self,
        reports: DailyReportService,
        workers: WorkerRepository,
        teams: TeamRepository,
        sites: SiteRepository,
    ):
        self._reports = reports
        self._workers = workers
        self._teams = teams
        self._sites = sites

    def load_board(self, day: date, *, team_ids: Optional[Sequence[str]] = None) -> AllocationBoard:
        teams = list(self._teams.list_all())
        if team_ids:
            wanted = set(team_ids)
            teams = [t for t in teams if t.id in wanted]
        team_set = {t.id for t in teams}

        workers = [
            w
            for w in self._workers.list_all()
            if w.team_id in team_set and w.status != WorkerStatus.RETIRED.value
        ]
        board = AllocationBoard(day=day, teams=teams, sites=list(self._sites.list_all()), workers=workers)
        board.load_reports(self._reports.get_reports(day))
        return board

    def previous_assignments(self, team_ids: Sequence[str]) -> dict[str, str]:
        """worker id → site id from each team's most recent report day."""
        if not team_ids:
            raise ValidationError("팀을 먼저 선택해주세요.")

        worker_sites: dict[str, str] = {}
        for team_id in team_ids:
            last_date = self._reports.last_report_date(team_id)
            if not last_date:
                continue
            for report in self._reports.get_reports(last_date, team_id=team_id):
                for w in report.workers:
                    worker_sites[w.worker_id] = report.site_id
        return worker_sites

    def copy_previous_day(self, board: AllocationBoard, team_ids: Sequence[str]) -> int:
        applied = board.apply_previous_assignments(self.previous_assignments(team_ids))
        logger.info("Copied previous assignments for %s: %d workers", board.day, applied)
        return applied

    def save(self, board: AllocationBoard, *, writer_id: str = "") -> int:
        """Full replace of the day's reports for every team on the board."""
        reports = board.build_reports(writer_id=writer_id)
        return self._reports.overwrite_reports(board.day, reports, board.team_ids)
