from __future__ import annotations

import logging

from flask import Flask, request

from ..common.responses import domain_error, fail, ok
from ..core.constants import DEFAULT_INVOICE_LIST_LIMIT, GENERIC_LOAD_ERROR
from ..core.exceptions import DomainError
from ..container import Container
from .service import build_invoice_request

logger = logging.getLogger(__name__)


def _limit(value) -> int:
    try:
        return max(1, int(value))
    except (TypeError, ValueError):
        return DEFAULT_INVOICE_LIST_LIMIT


def register(app: Flask, container: Container) -> None:
    service = container.invoice_service

    @app.route("/api/tax-invoices", methods=["POST"], endpoint="issue_tax_invoice")
    def issue_tax_invoice():
        data = request.get_json(silent=True) or {}
        try:
            req = build_invoice_request(data)
            response, record_id = service.issue(req, site_id=str(data.get("site_id") or ""))
            return ok(
                {
                    "id": record_id,
                    "invoice_num": response.invoice_num,
                    "send_key": response.send_key,
                    "supply_cost_total": req.supply_cost_total,
                    "tax_total": req.tax_total,
                    "total_amount": req.total_amount,
                },
                message=response.message or "세금계산서가 발행되었습니다.",
                status=201,
            )
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to issue tax invoice")
            return fail("세금계산서 발행 중 오류가 발생했습니다.", 500)

    @app.route("/api/tax-invoices", methods=["GET"], endpoint="list_tax_invoices")
    def list_tax_invoices():
        try:
            return ok(service.history(_limit(request.args.get("limit"))))
        except Exception:
            logger.exception("Failed to load tax invoices")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/tax-invoices/remote", methods=["GET"], endpoint="list_remote_tax_invoices")
    def list_remote_tax_invoices():
        try:
            return ok(service.remote_list(_limit(request.args.get("limit"))))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to load remote tax invoices")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/tax-invoices/status/<send_key>", methods=["GET"], endpoint="tax_invoice_status")
    def tax_invoice_status(send_key: str):
        try:
            return ok(service.status(send_key))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to check tax invoice status")
            return fail("상태 조회 중 오류가 발생했습니다.", 500)
