from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional, Sequence

from ..companies.repository import CompanyRepository
from ..sites.repository import SiteRepository
from ..teams.repository import TeamRepository
from ..workers.repository import WorkerRepository
from .model import DailyReport
from .repository import DailyReportRepository

logger = logging.getLogger(__name__)

_EPSILON = 1e-9


class ManDayDeltas:
    """Accumulates +/- man-day changes per worker, team and site."""

    def __init__(self):
        self.workers: dict[str, float] = defaultdict(float)
        self.teams: dict[str, float] = defaultdict(float)
        self.sites: dict[str, float] = defaultdict(float)

    def add(self, reports: Iterable[DailyReport], sign: int) -> None:
        for report in reports:
            if report.total_man_day > 0:
                self.teams[report.team_id] += sign * report.total_man_day
                self.sites[report.site_id] += sign * report.total_man_day
            for w in report.workers:
                if w.man_day > 0:
                    self.workers[w.worker_id] += sign * w.man_day

    @staticmethod
    def non_zero(values: dict[str, float]) -> dict[str, float]:
        return {k: v for k, v in values.items() if k and abs(v) > _EPSILON}


class DailyReportService:
    """Use case: daily reports (작업일보) and their cumulative man-day counters."""

    def __init__(
        self,
        reports: DailyReportRepository,
        workers: WorkerRepository,
        teams: TeamRepository,
        sites: SiteRepository,
        companies: CompanyRepository,
    ):
        self._reports = reports
        self._workers = workers
        self._teams = teams
        self._sites = sites
        self._companies = companies

    def get_reports(self, day: date, *, team_id: Optional[str] = None) -> Sequence[DailyReport]:
        return self._reports.list_by_date(day, team_id=team_id)

    def get_reports_by_range(
        self,
        start: date,
        end: date,
        *,
        team_id: Optional[str] = None,
        site_id: Optional[str] = None,
    ) -> Sequence[DailyReport]:
        return self._reports.list_by_range(start, end, team_id=team_id, site_id=site_id)

    def last_report_date(self, team_id: Optional[str] = None) -> Optional[date]:
        return self._reports.last_report_date(team_id)

    def report_exists(self, day: date, team_id: str, site_id: str) -> bool:
        return self._reports.exists(day, team_id, site_id)

    def add_report(self, report: DailyReport) -> str:
        report_id = self._reports.create(report)
        deltas = ManDayDeltas()
        deltas.add([report], +1)
        self._apply(deltas)
        return report_id

    def overwrite_reports(self, day: date, reports: Sequence[DailyReport], team_ids: Sequence[str]) -> int:
        """Replace every report of `day` for `team_ids` with `reports`.

        Counters are adjusted after the reports are committed; a failure there
        leaves the reports saved and the counters stale.
        """
        deleted = self._reports.replace_for_date(day, list(team_ids), list(reports))
        logger.info("Overwrote reports for %s: deleted=%d created=%d", day, len(deleted), len(reports))

        deltas = ManDayDeltas()
        deltas.add(deleted, -1)
        deltas.add(reports, +1)
        self._apply(deltas)
        return len(reports)

    def _apply(self, deltas: ManDayDeltas) -> None:
        for worker_id, amount in ManDayDeltas.non_zero(deltas.workers).items():
            self._workers.increment_man_day(worker_id, amount)

        for team_id, amount in ManDayDeltas.non_zero(deltas.teams).items():
            self._teams.increment_man_day(team_id, amount)
            team = self._teams.get_by_id(team_id)
            if team and team.company_id:
                self._companies.increment_man_day(team.company_id, amount)

        for site_id, amount in ManDayDeltas.non_zero(deltas.sites).items():
            self._sites.increment_man_day(site_id, amount)
