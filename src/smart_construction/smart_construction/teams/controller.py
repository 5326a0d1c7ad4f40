from __future__ import annotations

import logging

from flask import Flask, request

from ..common.responses import domain_error, fail, ok
from ..core.constants import GENERIC_LOAD_ERROR, GENERIC_SAVE_ERROR
from ..core.enums import SalaryModel, TeamStatus, TeamType
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .model import Team

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.team_service

    @app.route("/api/teams", methods=["GET"], endpoint="list_teams")
    def list_teams():
        try:
            if request.args.get("payroll") == "1":
                return ok(service.list_payroll_teams())
            return ok(service.list_teams())
        except Exception:
            logger.exception("Failed to list teams")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/teams/<team_id>", methods=["GET"], endpoint="get_team")
    def get_team(team_id: str):
        try:
            return ok({"team": service.get(team_id), "members": service.list_members(team_id)})
        except DomainError as e:
            return domain_error(e)

    @app.route("/api/teams", methods=["POST"], endpoint="create_team")
    def create_team():
        data = request.get_json(silent=True) or {}
        try:
            try:
                team = Team(
                    id="",
                    name=data.get("name", ""),
                    type=TeamType(data.get("type") or TeamType.CONSTRUCTION.value),
                    company_id=data.get("company_id") or None,
                    leader_id=data.get("leader_id") or None,
                    leader_name=data.get("leader_name", ""),
                    status=TeamStatus(data.get("status") or TeamStatus.ACTIVE.value),
                    default_salary_model=SalaryModel(data.get("default_salary_model") or SalaryModel.DAILY.value),
                )
            except ValueError:
                raise ValidationError("팀 구분, 상태 또는 급여방식이 올바르지 않습니다.")
            return ok({"id": service.create(team)}, status=201)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to create team")
            return fail(GENERIC_SAVE_ERROR, 500)

    @app.route("/api/teams/<team_id>", methods=["PATCH"], endpoint="update_team")
    def update_team(team_id: str):
        try:
            service.update(team_id, request.get_json(silent=True) or {})
            return ok(message="수정되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to update team %s", team_id)
            return fail(GENERIC_SAVE_ERROR, 500)
