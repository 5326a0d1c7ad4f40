from __future__ import annotations

import logging

from flask import Flask, request

from ..common.responses import domain_error, fail, ok
from ..core.constants import GENERIC_LOAD_ERROR, GENERIC_SAVE_ERROR
from ..core.enums import SiteStatus
from ..core.exceptions import DomainError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.site_service

    @app.route("/api/sites", methods=["GET"], endpoint="list_sites")
    def list_sites():
        try:
            status = request.args.get("status")
            return ok(service.list_sites(status=SiteStatus(status) if status else None))
        except ValueError:
            return fail("현장 상태가 올바르지 않습니다.")
        except Exception:
            logger.exception("Failed to list sites")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/sites/<site_id>", methods=["GET"], endpoint="get_site")
    def get_site(site_id: str):
        try:
            return ok(service.get(site_id))
        except DomainError as e:
            return domain_error(e)

    @app.route("/api/sites/<site_id>", methods=["PATCH"], endpoint="update_site")
    def update_site(site_id: str):
        try:
            service.update(site_id, request.get_json(silent=True) or {})
            return ok(message="수정되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to update site %s", site_id)
            return fail(GENERIC_SAVE_ERROR, 500)

    @app.route("/api/sites/<site_id>/status", methods=["POST"], endpoint="change_site_status")
    def change_site_status(site_id: str):
        data = request.get_json(silent=True) or {}
        try:
            try:
                status = SiteStatus(data.get("status", ""))
            except ValueError:
                raise ValidationError("현장 상태가 올바르지 않습니다.")
            service.change_status(site_id, status)
            return ok(message="상태가 변경되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to change status of site %s", site_id)
            return fail(GENERIC_SAVE_ERROR, 500)
