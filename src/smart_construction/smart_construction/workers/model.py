from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Worker:
    """작업자.

    team/company/site names are denormalized copies of the master records;
    `integrity` finds the ones that drifted.
    salary_model and status stay plain strings: older records carry values
    outside today's enums (e.g. 주급제).
    """

    id: str
    name: str
    id_number: str = ""
    contact: str = ""
    role: str = ""
    team_type: str = ""
    team_id: Optional[str] = None
    team_name: str = ""
    company_id: Optional[str] = None
    company_name: str = ""
    site_id: Optional[str] = None
    site_name: str = ""
    leader_name: str = ""
    salary_model: str = ""
    pay_type: str = ""
    unit_price: float = 0.0
    status: str = "재직"
    bank_name: str = ""
    account_number: str = ""
    account_holder: str = ""
    total_man_day: float = 0.0
