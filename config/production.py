from .config import Config, _flag

SECRET_KEY = Config.SECRET_KEY or "please-set-SECRET_KEY"

DB_CONFIG = Config.db_config()

DEBUG = False

LOG_LEVEL = Config.LOG_LEVEL
LOG_FILE = Config.LOG_FILE or "logs/smart_construction.log"
LOG_MAX_BYTES = Config.LOG_MAX_BYTES
LOG_BACKUP_COUNT = Config.LOG_BACKUP_COUNT

PRIMARY_COMPANY_KEYWORD = Config.PRIMARY_COMPANY_KEYWORD
INVOICE_GATEWAY_URL = Config.INVOICE_GATEWAY_URL
INVOICE_GATEWAY_TIMEOUT = Config.INVOICE_GATEWAY_TIMEOUT

AUTO_INIT_DB = _flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = _flag("AUTO_SEED_DB", "0")
