from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import CompanyStatus, CompanyType


@dataclass(frozen=True)
class Company:
    """회사 (시공사/협력사/건설사...).

    Plain data object, no DB access here.
    """

    id: str
    name: str
    code: str = ""
    business_number: str = ""
    ceo_name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    type: CompanyType = CompanyType.UNSPECIFIED
    status: CompanyStatus = CompanyStatus.ACTIVE
    bank_name: str = ""
    account_number: str = ""
    account_holder: str = ""
    total_man_day: float = 0.0

    @property
    def is_active(self) -> bool:
        return self.status == CompanyStatus.ACTIVE
