from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.enums import SalaryModel, TeamStatus, TeamType


@dataclass(frozen=True)
class Team:
    """팀. company/leader/member names are denormalized copies."""

    id: str
    name: str
    type: TeamType = TeamType.CONSTRUCTION
    company_id: Optional[str] = None
    company_name: str = ""
    leader_id: Optional[str] = None
    leader_name: str = ""
    member_ids: tuple[str, ...] = field(default_factory=tuple)
    member_names: tuple[str, ...] = field(default_factory=tuple)
    status: TeamStatus = TeamStatus.ACTIVE
    default_salary_model: SalaryModel = SalaryModel.DAILY
    total_man_day: float = 0.0
