from __future__ import annotations

import json
import uuid
from contextlib import contextmanager
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def new_id() -> str:
    return uuid.uuid4().hex


def placeholders(values: Sequence[Any]) -> str:
    """`%s,%s,...` for an IN (...) clause."""
    return ",".join(["%s"] * len(values))


def _json_default(value: Any):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Not JSON serializable: {type(value)!r}")


def dumps_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=_json_default)


def loads_json(value: Any, default: Any = None) -> Any:
    """JSON columns come back as str (pure driver) or bytes (C extension)."""
    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        if not value.strip():
            return default
        return json.loads(value)
    return value


def as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()


def build_update(
    table: str,
    patch: Dict[str, Any],
    *,
    allowed: Sequence[str],
    json_fields: Sequence[str] = (),
) -> tuple[str, list[Any]]:
    """`UPDATE table SET a=%s, b=%s` for whitelisted columns only.

    Callers append their own WHERE clause and its parameters.
    """
    unknown = [k for k in patch if k not in allowed]
    if unknown:
        raise ValueError(f"Unknown columns for {table}: {', '.join(sorted(unknown))}")

    sets: list[str] = []
    params: list[Any] = []
    for key, value in patch.items():
        sets.append(f"{key}=%s")
        if key in json_fields:
            params.append(dumps_json(value))
        elif isinstance(value, Enum):
            params.append(value.value)
        else:
            params.append(value)
    return f"UPDATE {table} SET {', '.join(sets)}", params
