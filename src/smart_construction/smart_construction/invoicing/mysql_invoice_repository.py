from __future__ import annotations

from dataclasses import asdict
from typing import Optional, Sequence

from ..core.enums import InvoiceStatus, InvoiceType, PurposeType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dumps_json, fetchall, fetchone, loads_json, new_id
from .model import InvoiceRecord, TaxInvoiceItem
from .repository import InvoiceRepository

_COLUMNS = (
    "invoice_num",
    "write_date",
    "invoicer_corp_num",
    "invoicer_corp_name",
    "invoicee_corp_num",
    "invoicee_corp_name",
    "supply_cost_total",
    "tax_total",
    "total_amount",
    "type",
    "status",
    "purpose_type",
    "send_key",
    "source",
    "site_id",
    "items",
    "remark",
)


def _item_from_dict(data: dict) -> TaxInvoiceItem:
    return TaxInvoiceItem(
        serial_num=int(data.get("serial_num") or 0),
        item_name=data.get("item_name") or "",
        supply_cost=int(data.get("supply_cost") or 0),
        tax=int(data.get("tax") or 0),
        purchase_dt=data.get("purchase_dt") or "",
        spec=data.get("spec") or "",
        qty=data.get("qty") or 1,
        unit_cost=int(data.get("unit_cost") or 0),
        remark=data.get("remark") or "",
    )


def _row_to_record(row: dict) -> InvoiceRecord:
    return InvoiceRecord(
        id=row["id"],
        invoice_num=row.get("invoice_num") or "",
        write_date=row.get("write_date") or "",
        invoicer_corp_num=row.get("invoicer_corp_num") or "",
        invoicer_corp_name=row.get("invoicer_corp_name") or "",
        invoicee_corp_num=row.get("invoicee_corp_num") or "",
        invoicee_corp_name=row.get("invoicee_corp_name") or "",
        supply_cost_total=int(row.get("supply_cost_total") or 0),
        tax_total=int(row.get("tax_total") or 0),
        total_amount=int(row.get("total_amount") or 0),
        type=InvoiceType(row.get("type") or InvoiceType.SALES.value),
        status=InvoiceStatus(row.get("status") or InvoiceStatus.ISSUED.value),
        purpose_type=PurposeType(row.get("purpose_type") or PurposeType.CLAIM.value),
        send_key=row.get("send_key") or "",
        source=row.get("source") or "",
        site_id=row.get("site_id") or "",
        items=tuple(_item_from_dict(i) for i in loads_json(row.get("items"), []) or []),
        remark=row.get("remark") or "",
        issued_at=row.get("issued_at"),
    )


class MySQLInvoiceRepository(InvoiceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_recent(self, limit: int) -> Sequence[InvoiceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT id, {', '.join(_COLUMNS)}, issued_at FROM tax_invoices ORDER BY issued_at DESC LIMIT %s",
                (int(limit),),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def get_by_send_key(self, send_key: str) -> Optional[InvoiceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT id, {', '.join(_COLUMNS)}, issued_at FROM tax_invoices WHERE send_key=%s",
                (send_key,),
            )
            row = fetchone(cur)
            return _row_to_record(row) if row else None

    def create(self, record: InvoiceRecord) -> str:
        invoice_id = record.id or new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO tax_invoices(id, {', '.join(_COLUMNS)}, issued_at)
                VALUES(%s, {', '.join(['%s'] * len(_COLUMNS))}, COALESCE(%s, NOW()))
                """,
                (
                    invoice_id,
                    record.invoice_num,
                    record.write_date,
                    record.invoicer_corp_num,
                    record.invoicer_corp_name,
                    record.invoicee_corp_num,
                    record.invoicee_corp_name,
                    record.supply_cost_total,
                    record.tax_total,
                    record.total_amount,
                    record.type.value,
                    record.status.value,
                    record.purpose_type.value,
                    record.send_key,
                    record.source,
                    record.site_id or None,
                    dumps_json([asdict(item) for item in record.items]),
                    record.remark,
                    record.issued_at,
                ),
            )
        return invoice_id

    def update_status(self, invoice_id: str, status: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE tax_invoices SET status=%s WHERE id=%s", (status, invoice_id))
            return cur.rowcount > 0
