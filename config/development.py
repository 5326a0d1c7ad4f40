import os

from .config import Config, _flag

SECRET_KEY = Config.SECRET_KEY or "dev-secret-key"

DB_CONFIG = Config.db_config()

DEBUG = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = Config.LOG_FILE
LOG_MAX_BYTES = Config.LOG_MAX_BYTES
LOG_BACKUP_COUNT = Config.LOG_BACKUP_COUNT

PRIMARY_COMPANY_KEYWORD = Config.PRIMARY_COMPANY_KEYWORD
INVOICE_GATEWAY_URL = Config.INVOICE_GATEWAY_URL
INVOICE_GATEWAY_TIMEOUT = Config.INVOICE_GATEWAY_TIMEOUT

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = _flag("AUTO_INIT_DB", "1")
# Optional: also seed demo master data on startup
AUTO_SEED_DB = _flag("AUTO_SEED_DB", "0")
