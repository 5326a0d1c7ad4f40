from pathlib import Path

import pytest

from src.smart_construction.smart_construction.database.bootstrap import (
    REQUIRED_TABLES,
    count_rows,
    iter_sql_statements,
    missing_tables,
)

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_missing_tables_lists_required_tables_not_present():
    assert missing_tables(["companies", "TEAMS", "sites", "workers", "daily_reports"]) == [
        "advance_payments",
        "settings",
        "tax_invoices",
    ]
    assert missing_tables(REQUIRED_TABLES) == []


def test_count_rows_rejects_unknown_tables():
    with pytest.raises(ValueError):
        count_rows({"host": "localhost", "user": "root", "database": "x"}, ["workers", "users"])


def test_schema_file_creates_every_required_table():
    sql = "\n".join(
        line for line in SCHEMA_PATH.read_text(encoding="utf-8").splitlines() if not line.lstrip().startswith("--")
    )
    created = [
        stmt.split("EXISTS", 1)[1].split("(", 1)[0].strip().strip("`")
        for stmt in iter_sql_statements(sql)
        if stmt.upper().startswith("CREATE TABLE")
    ]
    assert missing_tables(created) == []
