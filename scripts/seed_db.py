"""Load the demo companies, teams, sites and workers from database/seed.sql.

Prints the master row counts and runs the integrity scan, so denormalized
team/site/company names in the demo rows are checked against their masters.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.smart_construction.smart_construction.container import build_container
from src.smart_construction.smart_construction.database.bootstrap import apply_seed_sql, count_rows


def main() -> int:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    counts = count_rows(db_config)
    print("OK: seeded " + ", ".join(f"{table}={n}" for table, n in counts.items()))

    container = build_container(
        db_config=db_config,
        primary_keyword=getattr(settings, "PRIMARY_COMPANY_KEYWORD", "청연"),
    )
    scan = container.data_integrity_service.scan()
    for issue in scan.discrepancies:
        print(f"  {issue.worker_name} {issue.type.value}: '{issue.current_name}' -> '{issue.correct_name}'")
    if scan.stats.issues:
        print(f"WARN: {scan.stats.issues} name mismatch(es) in seeded workers")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
