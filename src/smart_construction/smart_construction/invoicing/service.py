from __future__ import annotations

import logging
import math
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import format_write_date
from ..common.validators import is_blank
from ..core.constants import DEFAULT_INVOICE_LIST_LIMIT
from ..core.enums import InvoiceStatus, InvoiceType, PurposeType
from ..core.exceptions import PartialWriteError, ValidationError
from ..database.mysql_base import new_id
from .client import TaxInvoiceClient, calculate_tax
from .model import InvoiceRecord, InvoiceResponse, InvoiceStatusResult, Party, TaxInvoiceItem, TaxInvoiceRequest
from .repository import InvoiceRepository

logger = logging.getLogger(__name__)

CORP_NUM_REQUIRED = "사업자번호를 입력해주세요."
ITEMS_REQUIRED = "품목을 최소 1개 이상 입력해주세요."
RECORD_SAVE_FAILED = "세금계산서는 발행되었으나 발행 이력 저장에 실패했습니다."


def _number(value, default: float = 0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def party_from_dict(data: Optional[dict]) -> Party:
    data = data or {}
    return Party(
        corp_num=str(data.get("corp_num") or "").replace("-", ""),
        corp_name=str(data.get("corp_name") or ""),
        ceo_name=str(data.get("ceo_name") or ""),
        addr=str(data.get("addr") or ""),
        biz_type=str(data.get("biz_type") or ""),
        biz_class=str(data.get("biz_class") or ""),
        email=str(data.get("email") or ""),
    )


def item_from_dict(data: dict, serial_num: int) -> TaxInvoiceItem:
    """공급가액 defaults to qty × unit cost, 세액 to floor(10%)."""
    qty = 1.0 if data.get("qty") in (None, "") else _number(data.get("qty"), math.nan)
    if not math.isfinite(qty) or qty < 0:
        raise ValidationError(f"{serial_num}번 품목의 수량을 확인해주세요.")
    unit_cost = int(_number(data.get("unit_cost")))
    if data.get("supply_cost") is None:
        supply_cost = int(qty * unit_cost)
    else:
        supply_cost = int(_number(data.get("supply_cost")))
    tax = data.get("tax")
    return TaxInvoiceItem(
        serial_num=serial_num,
        item_name=str(data.get("item_name") or ""),
        supply_cost=supply_cost,
        tax=calculate_tax(supply_cost) if tax is None else int(_number(tax)),
        purchase_dt=str(data.get("purchase_dt") or ""),
        spec=str(data.get("spec") or ""),
        qty=qty,
        unit_cost=unit_cost,
        remark=str(data.get("remark") or ""),
    )


def build_invoice_request(data: dict, *, today: Optional[date] = None) -> TaxInvoiceRequest:
    """Validate the issue form and derive totals from the named items."""
    invoicer = party_from_dict(data.get("invoicer"))
    invoicee = party_from_dict(data.get("invoicee"))
    if is_blank(invoicer.corp_num) or is_blank(invoicee.corp_num):
        raise ValidationError(CORP_NUM_REQUIRED)

    named = [i for i in data.get("items") or [] if isinstance(i, dict) and not is_blank(i.get("item_name"))]
    if not named:
        raise ValidationError(ITEMS_REQUIRED)
    items = tuple(item_from_dict(raw, index) for index, raw in enumerate(named, start=1))

    supply_total = sum(i.supply_cost for i in items)
    tax_total = sum(i.tax for i in items)
    try:
        purpose = PurposeType(data.get("purpose_type") or PurposeType.CLAIM.value)
    except ValueError:
        raise ValidationError("영수/청구 구분을 확인해주세요.")
    try:
        write_date = format_write_date(data.get("write_date") or today or date.today())
    except ValueError:
        raise ValidationError("작성일자를 확인해주세요 (YYYY-MM-DD).")

    return TaxInvoiceRequest(
        invoicer=invoicer,
        invoicee=invoicee,
        write_date=write_date,
        supply_cost_total=supply_total,
        tax_total=tax_total,
        total_amount=supply_total + tax_total,
        items=items,
        remark=str(data.get("remark") or ""),
        purpose_type=purpose,
    )


class InvoiceService:
    """Issues electronic tax invoices through the gateway and keeps a local history."""

    def __init__(self, client: TaxInvoiceClient, invoices: InvoiceRepository):
        self._client = client
        self._invoices = invoices

    def issue(self, req: TaxInvoiceRequest, *, site_id: str = "") -> tuple[InvoiceResponse, str]:
        response = self._client.issue(req)
        record = InvoiceRecord(
            id=new_id(),
            invoice_num=response.invoice_num,
            write_date=req.write_date,
            invoicer_corp_num=req.invoicer.corp_num,
            invoicer_corp_name=req.invoicer.corp_name,
            invoicee_corp_num=req.invoicee.corp_num,
            invoicee_corp_name=req.invoicee.corp_name,
            supply_cost_total=req.supply_cost_total,
            tax_total=req.tax_total,
            total_amount=req.total_amount,
            type=InvoiceType.SALES,
            status=InvoiceStatus.ISSUED,
            purpose_type=req.purpose_type,
            send_key=response.send_key,
            site_id=site_id,
            items=req.items,
            remark=req.remark,
        )
        try:
            record_id = self._invoices.create(record)
        except Exception as e:
            logger.warning("Invoice %s issued but local record failed", response.send_key)
            raise PartialWriteError(RECORD_SAVE_FAILED, written_id=response.send_key) from e
        logger.info("Issued tax invoice %s (%s)", response.invoice_num, response.send_key)
        return response, record_id

    def status(self, send_key: str) -> InvoiceStatusResult:
        return self._client.status(send_key)

    def history(self, limit: int = DEFAULT_INVOICE_LIST_LIMIT) -> Sequence[InvoiceRecord]:
        return self._invoices.list_recent(limit)

    def remote_list(self, limit: int = DEFAULT_INVOICE_LIST_LIMIT) -> list[dict]:
        return self._client.list_remote(limit)
