from __future__ import annotations

import logging

from flask import Flask, request

from ..common.responses import domain_error, fail, ok
from ..core.constants import GENERIC_LOAD_ERROR, GENERIC_SAVE_ERROR
from ..core.exceptions import DomainError
from ..container import Container
from .bulk_edit import BulkWorkerEdit

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.worker_service

    @app.route("/api/workers", methods=["GET"], endpoint="list_workers")
    def list_workers():
        try:
            workers = service.list_workers(
                team_id=request.args.get("team_id") or None,
                site_id=request.args.get("site_id") or None,
                status=request.args.get("status") or None,
            )
            return ok(workers)
        except Exception:
            logger.exception("Failed to list workers")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/workers/<worker_id>", methods=["GET"], endpoint="get_worker")
    def get_worker(worker_id: str):
        try:
            return ok(service.get(worker_id))
        except DomainError as e:
            return domain_error(e)

    @app.route("/api/workers/<worker_id>", methods=["PATCH"], endpoint="update_worker")
    def update_worker(worker_id: str):
        try:
            service.update(worker_id, request.get_json(silent=True) or {})
            return ok(message="수정되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to update worker %s", worker_id)
            return fail(GENERIC_SAVE_ERROR, 500)

    @app.route("/api/workers/<worker_id>/retire", methods=["POST"], endpoint="retire_worker")
    def retire_worker(worker_id: str):
        try:
            service.retire(worker_id)
            return ok(message="퇴사 처리되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to retire worker %s", worker_id)
            return fail(GENERIC_SAVE_ERROR, 500)

    @app.route("/api/workers/bulk", methods=["PATCH"], endpoint="bulk_update_workers")
    def bulk_update_workers():
        """Body: {"worker_ids": [...], "fields": {"team_id": "...", "unit_price": 150000}}."""
        data = request.get_json(silent=True) or {}
        try:
            form = BulkWorkerEdit.from_dict(data.get("fields") or {})
            updated = service.bulk_update(data.get("worker_ids") or [], form)
            return ok({"updated": updated}, message=f"{updated}명의 작업자 정보가 수정되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Bulk worker update failed")
            return fail("일괄 수정 중 오류가 발생했습니다.", 500)
