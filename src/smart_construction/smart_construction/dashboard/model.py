from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from ..reports.model import DailyReport


@dataclass(frozen=True)
class CountPair:
    total: int = 0
    active: int = 0


@dataclass(frozen=True)
class ReportStats:
    today: int = 0
    this_month: int = 0
    today_man_day: float = 0.0
    this_month_man_day: float = 0.0


@dataclass(frozen=True)
class SupportStats:
    """This month's support man-days seen from the primary company.

    inbound: other companies' teams on our sites. outbound: our teams on theirs.
    """

    inbound: float = 0.0
    outbound: float = 0.0

    @property
    def total(self) -> float:
        return self.inbound + self.outbound


@dataclass(frozen=True)
class DashboardSummary:
    companies: CountPair
    teams: CountPair
    sites: CountPair
    workers: CountPair
    reports: ReportStats
    support: SupportStats
    recent_reports: tuple[DailyReport, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ManDayBucket:
    """Man-days and amount grouped under one key (site, team or day)."""

    key: str
    name: str
    man_day: float = 0.0
    amount: float = 0.0
    report_count: int = 0


@dataclass(frozen=True)
class DailyTrendPoint:
    date: date
    man_day: float = 0.0
    report_count: int = 0
