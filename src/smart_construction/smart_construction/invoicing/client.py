from __future__ import annotations

import logging
import math
from typing import Any, Optional

import requests

from ..core.constants import DEFAULT_INVOICE_GATEWAY_URL, DEFAULT_INVOICE_LIST_LIMIT, VAT_RATE
from ..core.exceptions import ExternalServiceError
from .model import InvoiceResponse, InvoiceStatusResult, TaxInvoiceRequest

logger = logging.getLogger(__name__)

GATEWAY_ERROR_MESSAGES = {
    -1: "인증 실패",
    -2: "필수 항목 누락",
    -3: "잘못된 사업자번호",
    -4: "중복된 문서번호",
    -99: "시스템 오류",
}

NETWORK_ERROR_MESSAGE = "세금계산서 서버에 연결할 수 없습니다."


def gateway_error_message(code: Optional[int]) -> str:
    if code in GATEWAY_ERROR_MESSAGES:
        return GATEWAY_ERROR_MESSAGES[code]
    return f"오류 발생 (코드: {code})"


def calculate_tax(supply_cost: float) -> int:
    """부가세 = floor(공급가액 × 10%)."""
    return math.floor(supply_cost * VAT_RATE)


def request_to_payload(req: TaxInvoiceRequest) -> dict[str, Any]:
    """Body for the gateway; it expects camelCase keys."""
    payload: dict[str, Any] = {}
    for prefix, party in (("invoicer", req.invoicer), ("invoicee", req.invoicee)):
        payload.update(
            {
                f"{prefix}CorpNum": party.corp_num,
                f"{prefix}CorpName": party.corp_name,
                f"{prefix}CEOName": party.ceo_name,
                f"{prefix}Addr": party.addr,
                f"{prefix}BizType": party.biz_type,
                f"{prefix}BizClass": party.biz_class,
                f"{prefix}Email": party.email,
            }
        )
    payload.update(
        {
            "writeDate": req.write_date,
            "supplyCostTotal": req.supply_cost_total,
            "taxTotal": req.tax_total,
            "totalAmount": req.total_amount,
            "remark": req.remark,
            "purposeType": req.purpose_type.value,
            "items": [
                {
                    "serialNum": item.serial_num,
                    "purchaseDT": item.purchase_dt,
                    "itemName": item.item_name,
                    "spec": item.spec,
                    "qty": item.qty,
                    "unitCost": item.unit_cost,
                    "supplyCost": item.supply_cost,
                    "tax": item.tax,
                    "remark": item.remark,
                }
                for item in req.items
            ],
        }
    )
    return payload


class TaxInvoiceClient:
    """HTTP client for the tax invoice relay server."""

    def __init__(
        self,
        base_url: str = DEFAULT_INVOICE_GATEWAY_URL,
        *,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def _call(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
            body = response.json()
        except requests.RequestException as e:
            logger.error("Invoice gateway request failed: %s %s (%s)", method, url, e)
            raise ExternalServiceError(NETWORK_ERROR_MESSAGE) from e
        except ValueError as e:
            logger.error("Invoice gateway returned non-JSON body: %s %s", method, url)
            raise ExternalServiceError(NETWORK_ERROR_MESSAGE) from e

        if not isinstance(body, dict) or not body.get("success"):
            body = body if isinstance(body, dict) else {}
            code = body.get("code")
            message = body.get("message") or gateway_error_message(code)
            logger.warning("Invoice gateway rejected %s %s: %s", method, path, message)
            raise ExternalServiceError(message, code=code)
        return body

    def issue(self, req: TaxInvoiceRequest) -> InvoiceResponse:
        body = self._call("POST", "/tax-invoice/issue", json=request_to_payload(req))
        return InvoiceResponse(
            success=True,
            message=body.get("message") or "",
            invoice_num=str(body.get("invoiceNum") or ""),
            send_key=str(body.get("sendKey") or ""),
        )

    def status(self, send_key: str) -> InvoiceStatusResult:
        body = self._call("GET", f"/tax-invoice/status/{send_key}")
        return InvoiceStatusResult(
            status=str(body.get("status") or ""),
            nts_result=str(body.get("ntsResult") or ""),
            message=body.get("message") or "",
        )

    def list_remote(self, limit: int = DEFAULT_INVOICE_LIST_LIMIT) -> list[dict]:
        body = self._call("GET", "/tax-invoice/list", params={"limit": limit})
        return list(body.get("invoices") or [])
