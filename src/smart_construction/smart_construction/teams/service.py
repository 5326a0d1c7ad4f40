from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from ..common.validators import require_non_empty
from ..companies.repository import CompanyRepository
from ..core.enums import CompanyType, SalaryModel, TeamStatus, TeamType
from ..core.exceptions import NotFoundError, ValidationError
from ..sites.repository import SiteRepository
from ..workers.model import Worker
from ..workers.repository import WorkerRepository
from .model import Team
from .repository import TeamRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "type",
    "company_id",
    "company_name",
    "leader_id",
    "leader_name",
    "status",
    "default_salary_model",
)


class TeamService:
    """Use case: manage teams (팀 관리)."""

    def __init__(
        self,
        teams: TeamRepository,
        companies: CompanyRepository,
        workers: WorkerRepository,
        sites: SiteRepository,
    ):
        self._teams = teams
        self._companies = companies
        self._workers = workers
        self._sites = sites

    def list_teams(self) -> Sequence[Team]:
        return self._teams.list_all()

    def get(self, team_id: str) -> Team:
        team = self._teams.get_by_id(team_id)
        if not team:
            raise NotFoundError("팀을 찾을 수 없습니다.")
        return team

    def list_members(self, team_id: str) -> list[Worker]:
        return [w for w in self._workers.list_all() if w.team_id == team_id]

    def list_payroll_teams(self) -> list[Team]:
        """Teams that belong to a 시공사-type company (노무비 명세서 대상)."""
        contractor_ids = {c.id for c in self._companies.list_all() if c.type == CompanyType.CONTRACTOR}
        return [t for t in self._teams.list_all() if t.company_id in contractor_ids]

    def create(self, team: Team) -> str:
        name = require_non_empty(team.name, "팀명을 입력해주세요.")
        company_name = team.company_name
        if team.company_id:
            company = self._companies.get_by_id(team.company_id)
            if not company:
                raise ValidationError("선택한 회사가 유효하지 않습니다.")
            company_name = company.name
        return self._teams.create(replace(team, name=name, company_name=company_name, total_man_day=0.0))

    def update(self, team_id: str, patch: dict) -> None:
        current = self.get(team_id)
        patch = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS}
        if "name" in patch:
            patch["name"] = require_non_empty(patch["name"], "팀명을 입력해주세요.")
        try:
            if "type" in patch:
                patch["type"] = TeamType(patch["type"])
            if "status" in patch:
                patch["status"] = TeamStatus(patch["status"])
            if "default_salary_model" in patch:
                patch["default_salary_model"] = SalaryModel(patch["default_salary_model"])
        except ValueError:
            raise ValidationError("팀 구분, 상태 또는 급여방식이 올바르지 않습니다.")
        self._teams.update(team_id, patch)

        new_name = patch.get("name")
        if new_name and new_name != current.name:
            synced_workers = self._workers.update_by_reference("team_id", team_id, {"team_name": new_name})
            synced_sites = self._sites.update_by_team(team_id, {"responsible_team_name": new_name})
            logger.info("Team %s renamed: synced %d workers, %d sites", team_id, synced_workers, synced_sites)

    def change_status(self, team_id: str, status: TeamStatus) -> None:
        self.get(team_id)
        self._teams.update(team_id, {"status": status})
