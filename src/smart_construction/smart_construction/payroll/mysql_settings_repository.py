from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dumps_json, fetchone, loads_json
from .settings_repository import SettingsRepository


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, doc_id: str) -> Optional[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT data, updated_at FROM settings WHERE doc_id=%s", (doc_id,))
            row = fetchone(cur)
            if not row:
                return None
            data = loads_json(row.get("data"), {}) or {}
            data["updated_at"] = row.get("updated_at")
            return data

    def merge(self, doc_id: str, patch: dict) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT data FROM settings WHERE doc_id=%s FOR UPDATE", (doc_id,))
            row = fetchone(cur)
            data = loads_json(row.get("data"), {}) if row else {}
            data.update({k: v for k, v in patch.items() if k != "updated_at"})
            cur.execute(
                """
                INSERT INTO settings(doc_id, data, updated_at)
                VALUES(%s, %s, NOW())
                ON DUPLICATE KEY UPDATE data=VALUES(data), updated_at=NOW()
                """,
                (doc_id, dumps_json(data)),
            )
