from __future__ import annotations

import logging

from flask import Flask, request

from ..common.responses import domain_error, fail, ok
from ..core.constants import GENERIC_LOAD_ERROR, GENERIC_SAVE_ERROR
from ..core.enums import CompanyStatus, CompanyType
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .model import Company

logger = logging.getLogger(__name__)


def _company_from_json(data: dict) -> Company:
    try:
        company_type = CompanyType(data.get("type") or CompanyType.UNSPECIFIED.value)
        status = CompanyStatus(data.get("status") or CompanyStatus.ACTIVE.value)
    except ValueError:
        raise ValidationError("회사 구분 또는 상태가 올바르지 않습니다.")
    return Company(
        id="",
        name=data.get("name", ""),
        code=data.get("code", ""),
        business_number=data.get("business_number", ""),
        ceo_name=data.get("ceo_name", ""),
        address=data.get("address", ""),
        phone=data.get("phone", ""),
        email=data.get("email", ""),
        type=company_type,
        status=status,
        bank_name=data.get("bank_name", ""),
        account_number=data.get("account_number", ""),
        account_holder=data.get("account_holder", ""),
    )


def register(app: Flask, container: Container) -> None:
    service = container.company_service

    @app.route("/api/companies", methods=["GET"], endpoint="list_companies")
    def list_companies():
        try:
            company_type = request.args.get("type")
            if company_type:
                companies = service.list_by_type(CompanyType(company_type))
            elif request.args.get("active") == "1":
                companies = service.list_active()
            else:
                companies = service.list_companies()
            return ok(companies)
        except ValueError:
            return fail("회사 구분이 올바르지 않습니다.")
        except Exception:
            logger.exception("Failed to list companies")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/companies/<company_id>", methods=["GET"], endpoint="get_company")
    def get_company(company_id: str):
        try:
            return ok(service.get(company_id))
        except DomainError as e:
            return domain_error(e)

    @app.route("/api/companies", methods=["POST"], endpoint="create_company")
    def create_company():
        try:
            company_id = service.create(_company_from_json(request.get_json(silent=True) or {}))
            return ok({"id": company_id}, status=201)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to create company")
            return fail(GENERIC_SAVE_ERROR, 500)

    @app.route("/api/companies/<company_id>", methods=["PATCH"], endpoint="update_company")
    def update_company(company_id: str):
        try:
            service.update(company_id, request.get_json(silent=True) or {})
            return ok(message="수정되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to update company %s", company_id)
            return fail(GENERIC_SAVE_ERROR, 500)

    @app.route("/api/companies/<company_id>", methods=["DELETE"], endpoint="delete_company")
    def delete_company(company_id: str):
        try:
            service.delete(company_id)
            return ok(message="삭제되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to delete company %s", company_id)
            return fail("삭제 중 오류가 발생했습니다.", 500)
