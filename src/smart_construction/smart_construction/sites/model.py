from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import SiteStatus


@dataclass(frozen=True)
class Site:
    """현장."""

    id: str
    name: str
    code: str = ""
    address: str = ""
    company_id: Optional[str] = None
    company_name: str = ""
    responsible_team_id: Optional[str] = None
    responsible_team_name: str = ""
    status: SiteStatus = SiteStatus.ACTIVE
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_man_day: float = 0.0
