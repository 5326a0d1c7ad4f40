from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, list_tables, missing_tables
from .logging_setup import configure_logging

from .container import build_container
from .companies.controller import register as register_companies
from .dashboard.controller import register as register_dashboard
from .integrity.controller import register as register_integrity
from .invoicing.controller import register as register_invoicing
from .payroll.controller import register as register_payroll
from .registration.controller import register as register_quick_register
from .reports.controller import register as register_reports
from .sites.controller import register as register_sites
from .teams.controller import register as register_teams
from .workers.controller import register as register_workers

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["JSON_AS_ASCII"] = False
    app.json.ensure_ascii = False

    configure_logging(
        getattr(settings, "LOG_LEVEL", "INFO"),
        getattr(settings, "LOG_FILE", ""),
        max_bytes=int(getattr(settings, "LOG_MAX_BYTES", 10 * 1024 * 1024)),
        backup_count=int(getattr(settings, "LOG_BACKUP_COUNT", 5)),
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        missing = missing_tables(list_tables(db_config))
        if missing:
            logger.warning("Schema applied but tables are missing: %s", ", ".join(missing))
        else:
            logger.info("Schema ready")
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")

    container = build_container(
        db_config=db_config,
        primary_keyword=getattr(settings, "PRIMARY_COMPANY_KEYWORD", "청연"),
        invoice_gateway_url=getattr(settings, "INVOICE_GATEWAY_URL", "http://localhost:4000/api"),
        invoice_gateway_timeout=float(getattr(settings, "INVOICE_GATEWAY_TIMEOUT", 30)),
    )

    register_companies(app, container)
    register_teams(app, container)
    register_sites(app, container)
    register_workers(app, container)
    register_reports(app, container)
    register_payroll(app, container)
    register_quick_register(app, container)
    register_integrity(app, container)
    register_invoicing(app, container)
    register_dashboard(app, container)

    return app
