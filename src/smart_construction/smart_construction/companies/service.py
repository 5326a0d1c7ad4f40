from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.constants import PRIMARY_COMPANY_KEYWORD
from ..core.enums import CompanyStatus, CompanyType
from ..core.exceptions import NotFoundError, ValidationError
from ..teams.repository import TeamRepository
from ..workers.repository import WorkerRepository
from .model import Company
from .repository import CompanyRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "code",
    "business_number",
    "ceo_name",
    "address",
    "phone",
    "email",
    "type",
    "status",
    "bank_name",
    "account_number",
    "account_holder",
)


class CompanyService:
    """Use case: manage companies (회사 관리)."""

    def __init__(
        self,
        companies: CompanyRepository,
        teams: TeamRepository,
        workers: WorkerRepository,
        *,
        primary_keyword: str = PRIMARY_COMPANY_KEYWORD,
    ):
        self._companies = companies
        self._teams = teams
        self._workers = workers
        self._primary_keyword = primary_keyword

    def list_companies(self) -> Sequence[Company]:
        return self._companies.list_all()

    def list_active(self) -> list[Company]:
        return [c for c in self._companies.list_all() if c.is_active]

    def list_by_type(self, company_type: CompanyType) -> list[Company]:
        return [c for c in self._companies.list_all() if c.type == company_type]

    def get(self, company_id: str) -> Company:
        company = self._companies.get_by_id(company_id)
        if not company:
            raise NotFoundError("회사를 찾을 수 없습니다.")
        return company

    def find_by_name(self, name: str) -> Optional[Company]:
        name = (name or "").strip()
        return next((c for c in self._companies.list_all() if c.name == name), None)

    def find_primary_contractor(self) -> Optional[Company]:
        """The in-house construction company every 시공팀 is pinned to."""
        return next((c for c in self._companies.list_all() if self._primary_keyword in c.name), None)

    def create(self, company: Company) -> str:
        name = require_non_empty(company.name, "회사명을 입력해주세요.")
        status = company.status or CompanyStatus.ACTIVE
        return self._companies.create(replace(company, name=name, status=status, total_man_day=0.0))

    def update(self, company_id: str, patch: dict) -> None:
        current = self.get(company_id)
        patch = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS}
        if "name" in patch:
            patch["name"] = require_non_empty(patch["name"], "회사명을 입력해주세요.")
        try:
            if "type" in patch:
                patch["type"] = CompanyType(patch["type"])
            if "status" in patch:
                patch["status"] = CompanyStatus(patch["status"])
        except ValueError:
            raise ValidationError("회사 구분 또는 상태가 올바르지 않습니다.")
        self._companies.update(company_id, patch)

        new_name = patch.get("name")
        if new_name and new_name != current.name:
            # Denormalized copies; drift left behind here is repaired by the integrity scan.
            moved_workers = self._workers.update_by_reference("company_id", company_id, {"company_name": new_name})
            moved_teams = self._teams.update_by_company(company_id, {"company_name": new_name})
            logger.info(
                "Company %s renamed: synced %d workers, %d teams", company_id, moved_workers, moved_teams
            )

    def delete(self, company_id: str) -> None:
        if not self._companies.delete(company_id):
            raise NotFoundError("회사를 찾을 수 없습니다.")
        logger.info("Company %s deleted", company_id)
