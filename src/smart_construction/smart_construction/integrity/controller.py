from __future__ import annotations

import logging

from flask import Flask, request

from ..common.responses import domain_error, fail, ok
from ..core.enums import DiscrepancyType
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .scanner import ScanResult

logger = logging.getLogger(__name__)


def _result_json(result: ScanResult) -> dict:
    return {
        "discrepancies": result.discrepancies,
        "stats": result.stats,
        "fixable": len(result.fixable),
    }


def register(app: Flask, container: Container) -> None:
    service = container.data_integrity_service

    @app.route("/api/admin/integrity", methods=["GET"], endpoint="integrity_scan")
    def integrity_scan():
        try:
            result = service.scan()
            message = (
                "데이터 불일치가 발견되지 않았습니다."
                if not result.discrepancies
                else f"{len(result.discrepancies)}건의 데이터 불일치가 발견되었습니다."
            )
            return ok(_result_json(result), message=message)
        except Exception:
            logger.exception("Integrity scan failed")
            return fail("데이터 스캔 중 오류가 발생했습니다.", 500)

    @app.route("/api/admin/integrity/fix", methods=["POST"], endpoint="integrity_fix_one")
    def integrity_fix_one():
        data = request.get_json(silent=True) or {}
        try:
            try:
                kind = DiscrepancyType(data.get("type"))
            except ValueError:
                raise ValidationError("항목 구분이 올바르지 않습니다.")
            result = service.fix_by_key(str(data.get("worker_id") or ""), kind)
            return ok(_result_json(result), message="수정되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Integrity fix failed")
            return fail("수정 중 오류가 발생했습니다.", 500)

    @app.route("/api/admin/integrity/fix-all", methods=["POST"], endpoint="integrity_fix_all")
    def integrity_fix_all():
        try:
            fixed, result = service.fix_all()
            return ok(_result_json(result), message=f"{fixed}건이 수정되었습니다.")
        except Exception:
            logger.exception("Integrity batch fix failed")
            return fail("일괄 수정 중 오류가 발생했습니다.", 500)
