from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _text(data: dict, key: str, default: str = "") -> str:
    value = data.get(key)
    return default if value is None else str(value)


@dataclass
class WorkerForm:
    """작업자 빠른 등록. unit_price stays raw until validated."""

    name: str = ""
    id_number: str = ""
    team_type: str = "시공팀"
    company_id: str = ""
    support_team_id: str = ""
    unit_price: Any = 0
    salary_model: str = "일급제"
    role: str = "신규"
    bank_name: str = ""
    account_number: str = ""
    account_holder: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "WorkerForm":
        return cls(
            name=_text(data, "name"),
            id_number=_text(data, "id_number"),
            team_type=_text(data, "team_type", "시공팀"),
            company_id=_text(data, "company_id"),
            support_team_id=_text(data, "support_team_id"),
            unit_price=data.get("unit_price", 0),
            salary_model=_text(data, "salary_model", "일급제"),
            role=_text(data, "role"),
            bank_name=_text(data, "bank_name"),
            account_number=_text(data, "account_number"),
            account_holder=_text(data, "account_holder"),
        )


@dataclass
class TeamForm:
    name: str = ""
    type: str = "시공팀"
    company_id: str = ""
    leader_worker_id: str = ""
    selected_worker_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "TeamForm":
        return cls(
            name=_text(data, "name"),
            type=_text(data, "type", "시공팀"),
            company_id=_text(data, "company_id"),
            leader_worker_id=_text(data, "leader_worker_id").strip(),
            selected_worker_ids=[str(x) for x in data.get("selected_worker_ids") or [] if x],
        )


@dataclass
class SiteForm:
    name: str = ""
    start_date: str = ""
    end_date: str = ""
    company_id: str = ""
    responsible_team_id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "SiteForm":
        return cls(
            name=_text(data, "name"),
            start_date=_text(data, "start_date"),
            end_date=_text(data, "end_date"),
            company_id=_text(data, "company_id"),
            responsible_team_id=_text(data, "responsible_team_id"),
        )


@dataclass
class CompanyForm:
    name: str = ""
    business_number: str = ""
    ceo_name: str = ""
    phone: str = ""
    bank_name: str = ""
    account_number: str = ""
    account_holder: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "CompanyForm":
        return cls(**{f: _text(data, f).strip() for f in cls.__dataclass_fields__})


@dataclass
class PartnerCompanyForm:
    """협력사 등록 also creates the partner's 지원팀 named `team_name`."""

    company: CompanyForm = field(default_factory=CompanyForm)
    team_name: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "PartnerCompanyForm":
        return cls(company=CompanyForm.from_dict(data), team_name=_text(data, "team_name"))
