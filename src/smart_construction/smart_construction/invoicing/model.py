from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import InvoiceStatus, InvoiceType, PurposeType


@dataclass(frozen=True)
class TaxInvoiceItem:
    """세금계산서 품목 한 줄."""

    serial_num: int
    item_name: str
    supply_cost: int
    tax: int
    purchase_dt: str = ""
    spec: str = ""
    qty: float = 1
    unit_cost: int = 0
    remark: str = ""


@dataclass(frozen=True)
class Party:
    """공급자(invoicer) or 공급받는자(invoicee)."""

    corp_num: str
    corp_name: str
    ceo_name: str = ""
    addr: str = ""
    biz_type: str = ""
    biz_class: str = ""
    email: str = ""


@dataclass(frozen=True)
class TaxInvoiceRequest:
    invoicer: Party
    invoicee: Party
    write_date: str
    supply_cost_total: int
    tax_total: int
    total_amount: int
    items: tuple[TaxInvoiceItem, ...] = ()
    remark: str = ""
    purpose_type: PurposeType = PurposeType.CLAIM


@dataclass(frozen=True)
class InvoiceResponse:
    success: bool
    message: str = ""
    invoice_num: str = ""
    send_key: str = ""
    code: Optional[int] = None


@dataclass(frozen=True)
class InvoiceStatusResult:
    status: str
    nts_result: str = ""
    message: str = ""


@dataclass(frozen=True)
class InvoiceRecord:
    """Local copy of an issued invoice."""

    id: str
    invoice_num: str
    write_date: str
    invoicer_corp_num: str
    invoicer_corp_name: str
    invoicee_corp_num: str
    invoicee_corp_name: str
    supply_cost_total: int
    tax_total: int
    total_amount: int
    type: InvoiceType = InvoiceType.SALES
    status: InvoiceStatus = InvoiceStatus.ISSUED
    purpose_type: PurposeType = PurposeType.CLAIM
    send_key: str = ""
    source: str = "barobill"
    site_id: str = ""
    items: tuple[TaxInvoiceItem, ...] = field(default_factory=tuple)
    remark: str = ""
    issued_at: Optional[datetime] = None
