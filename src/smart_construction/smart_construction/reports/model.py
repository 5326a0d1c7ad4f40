from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.constants import DEFAULT_MAN_DAY, DEFAULT_REPORT_ROLE
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class ReportWorker:
    """일보에 기록된 작업자 한 줄.

    unit_price/salary_model are snapshots taken when the report was saved.
    """

    worker_id: str
    name: str
    role: str = DEFAULT_REPORT_ROLE
    status: AttendanceStatus = AttendanceStatus.ATTENDANCE
    man_day: float = DEFAULT_MAN_DAY
    work_content: str = ""
    team_id: Optional[str] = None
    unit_price: Optional[float] = None
    salary_model: str = ""
    pay_type: str = ""

    @property
    def amount(self) -> float:
        return self.man_day * (self.unit_price or 0)


@dataclass(frozen=True)
class DailyReport:
    """작업일보: one team's workers on one site for one day."""

    id: str
    date: date
    team_id: str
    team_name: str
    site_id: str
    site_name: str
    workers: tuple[ReportWorker, ...] = field(default_factory=tuple)
    responsible_team_id: Optional[str] = None
    responsible_team_name: str = ""
    writer_id: str = ""
    total_man_day: float = 0.0
    total_amount: float = 0.0
    work_content: str = ""
    weather: str = ""
