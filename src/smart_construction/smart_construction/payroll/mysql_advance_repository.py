from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dumps_json, fetchall, loads_json
from .advance_repository import AdvancePaymentRepository
from .model import AdvancePayment

LEGACY_COLUMNS = (
    "prev_month_carryover",
    "accommodation",
    "private_room",
    "gloves",
    "deposit",
    "fines",
    "electricity",
    "gas",
    "internet",
    "water",
)
# YEAR_MONTH is reserved in MySQL, the column is pay_month.
_COLUMNS = ("worker_id", "worker_name", "team_id", "team_name", "pay_month", *LEGACY_COLUMNS, "items")
_KEY_COLUMNS = ("worker_id", "team_id", "pay_month")


def _row_to_payment(row: dict) -> AdvancePayment:
    raw_items = loads_json(row.get("items"), {})
    return AdvancePayment(
        id=row["id"],
        worker_id=row.get("worker_id") or "",
        worker_name=row.get("worker_name") or "",
        team_id=row.get("team_id") or "",
        team_name=row.get("team_name") or "",
        year_month=row.get("pay_month") or "",
        items={str(k): float(v or 0) for k, v in raw_items.items()} if isinstance(raw_items, dict) else {},
        **{c: float(row.get(c) or 0) for c in LEGACY_COLUMNS},
    )


class MySQLAdvancePaymentRepository(AdvancePaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_by_month(self, year_month: str, *, team_id: Optional[str] = None) -> Sequence[AdvancePayment]:
        sql = f"SELECT id, {', '.join(_COLUMNS)} FROM advance_payments WHERE pay_month=%s"
        params: list = [year_month]
        if team_id:
            sql += " AND team_id=%s"
            params.append(team_id)
        sql += " ORDER BY worker_name"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_payment(r) for r in fetchall(cur)]

    def upsert(self, payment: AdvancePayment) -> str:
        payment_id = payment.doc_id
        values = (
            payment_id,
            payment.worker_id,
            payment.worker_name,
            payment.team_id,
            payment.team_name,
            payment.year_month,
            *(getattr(payment, c) for c in LEGACY_COLUMNS),
            dumps_json(payment.items),
        )
        updates = ", ".join(f"{c}=VALUES({c})" for c in _COLUMNS if c not in _KEY_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO advance_payments(id, {', '.join(_COLUMNS)}, updated_at)
                VALUES({', '.join(['%s'] * len(values))}, NOW())
                ON DUPLICATE KEY UPDATE {updates}, updated_at=NOW()
                """,
                values,
            )
        return payment_id

    def delete(self, payment_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM advance_payments WHERE id=%s", (payment_id,))
            return cur.rowcount > 0
