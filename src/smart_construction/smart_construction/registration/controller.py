from __future__ import annotations

import logging

from flask import Flask, request

from ..common.responses import domain_error, fail, ok
from ..core.constants import GENERIC_SAVE_ERROR
from ..core.exceptions import DomainError
from ..container import Container
from .forms import CompanyForm, PartnerCompanyForm, SiteForm, TeamForm, WorkerForm

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.quick_register_service

    def _submit(action, message: str):
        try:
            result = action(request.get_json(silent=True) or {})
            return ok(result, message=message, status=201)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Quick register failed")
            return fail(GENERIC_SAVE_ERROR, 500)

    @app.route("/api/quick-register/worker", methods=["POST"], endpoint="quick_register_worker")
    def quick_register_worker():
        return _submit(
            lambda data: {"id": service.register_worker(WorkerForm.from_dict(data))},
            "작업자가 등록되었습니다.",
        )

    @app.route("/api/quick-register/team", methods=["POST"], endpoint="quick_register_team")
    def quick_register_team():
        return _submit(
            lambda data: {"id": service.register_team(TeamForm.from_dict(data))},
            "팀이 등록되었습니다.",
        )

    @app.route("/api/quick-register/site", methods=["POST"], endpoint="quick_register_site")
    def quick_register_site():
        return _submit(
            lambda data: {"id": service.register_site(SiteForm.from_dict(data))},
            "현장이 등록되었습니다.",
        )

    @app.route(
        "/api/quick-register/construction-company",
        methods=["POST"],
        endpoint="quick_register_construction_company",
    )
    def quick_register_construction_company():
        return _submit(
            lambda data: {"id": service.register_construction_company(CompanyForm.from_dict(data))},
            "회사가 등록되었습니다.",
        )

    @app.route("/api/quick-register/partner-company", methods=["POST"], endpoint="quick_register_partner_company")
    def quick_register_partner_company():
        return _submit(
            lambda data: service.register_partner_company(PartnerCompanyForm.from_dict(data)),
            "협력사와 팀이 등록되었습니다.",
        )
