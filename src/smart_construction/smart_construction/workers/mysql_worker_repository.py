from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_update, db_cursor, fetchall, fetchone, new_id, placeholders
from .model import Worker
from .repository import REFERENCE_COLUMNS, WorkerRepository

_COLUMNS = (
    "name",
    "id_number",
    "contact",
    "role",
    "team_type",
    "team_id",
    "team_name",
    "company_id",
    "company_name",
    "site_id",
    "site_name",
    "leader_name",
    "salary_model",
    "pay_type",
    "unit_price",
    "status",
    "bank_name",
    "account_number",
    "account_holder",
    "total_man_day",
)


def _row_to_worker(row: dict) -> Worker:
    return Worker(
        id=row["id"],
        name=row["name"],
        id_number=row.get("id_number") or "",
        contact=row.get("contact") or "",
        role=row.get("role") or "",
        team_type=row.get("team_type") or "",
        team_id=row.get("team_id"),
        team_name=row.get("team_name") or "",
        company_id=row.get("company_id"),
        company_name=row.get("company_name") or "",
        site_id=row.get("site_id"),
        site_name=row.get("site_name") or "",
        leader_name=row.get("leader_name") or "",
        salary_model=row.get("salary_model") or "",
        pay_type=row.get("pay_type") or "",
        unit_price=float(row.get("unit_price") or 0),
        status=row.get("status") or "",
        bank_name=row.get("bank_name") or "",
        account_number=row.get("account_number") or "",
        account_holder=row.get("account_holder") or "",
        total_man_day=float(row.get("total_man_day") or 0),
    )


class MySQLWorkerRepository(WorkerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, {', '.join(_COLUMNS)} FROM workers ORDER BY name")
            return [_row_to_worker(r) for r in fetchall(cur)]

    def get_by_id(self, worker_id: str) -> Optional[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, {', '.join(_COLUMNS)} FROM workers WHERE id=%s", (worker_id,))
            row = fetchone(cur)
            return _row_to_worker(row) if row else None

    def create(self, worker: Worker) -> str:
        worker_id = worker.id or new_id()
        values = [getattr(worker, col) for col in _COLUMNS]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO workers(id, {', '.join(_COLUMNS)})
                VALUES(%s, {placeholders(_COLUMNS)})
                """,
                (worker_id, *values),
            )
        return worker_id

    def update(self, worker_id: str, patch: dict) -> bool:
        if not patch:
            return False
        sql, params = build_update("workers", patch, allowed=_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{sql} WHERE id=%s", (*params, worker_id))
            return cur.rowcount > 0

    def update_many(self, worker_ids: Sequence[str], patch: dict) -> int:
        if not patch or not worker_ids:
            return 0
        sql, params = build_update("workers", patch, allowed=_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{sql} WHERE id IN ({placeholders(worker_ids)})", (*params, *worker_ids))
            return int(cur.rowcount)

    def update_each(self, patches: Sequence[tuple[str, dict]]) -> int:
        updated = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for worker_id, patch in patches:
                if not patch:
                    continue
                sql, params = build_update("workers", patch, allowed=_COLUMNS)
                cur.execute(f"{sql} WHERE id=%s", (*params, worker_id))
                updated += int(cur.rowcount)
        return updated

    def update_by_reference(self, column: str, ref_id: str, patch: dict) -> int:
        if column not in REFERENCE_COLUMNS:
            raise ValueError(f"Unsupported reference column: {column}")
        if not patch:
            return 0
        sql, params = build_update("workers", patch, allowed=_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{sql} WHERE {column}=%s", (*params, ref_id))
            return int(cur.rowcount)

    def increment_man_day(self, worker_id: str, amount: float) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE workers SET total_man_day = COALESCE(total_man_day, 0) + %s WHERE id=%s",
                (amount, worker_id),
            )
