from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import DailyReport


class DailyReportRepository(Protocol):
    def list_by_date(self, day: date, *, team_id: Optional[str] = None) -> Sequence[DailyReport]:
        raise NotImplementedError

    def list_by_range(
        self,
        start: date,
        end: date,
        *,
        team_id: Optional[str] = None,
        site_id: Optional[str] = None,
    ) -> Sequence[DailyReport]:
        """Newest first."""
        raise NotImplementedError

    def last_report_date(self, team_id: Optional[str] = None) -> Optional[date]:
        raise NotImplementedError

    def exists(self, day: date, team_id: str, site_id: str) -> bool:
        raise NotImplementedError

    def create(self, report: DailyReport) -> str:
        raise NotImplementedError

    def replace_for_date(self, day: date, team_ids: Sequence[str], reports: Sequence[DailyReport]) -> list[DailyReport]:
        """Delete the day's reports of `team_ids`, insert `reports`, in one write.

        Returns the deleted reports.
        """
        raise NotImplementedError
