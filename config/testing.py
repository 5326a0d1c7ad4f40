from .config import Config

SECRET_KEY = "test-secret"

DB_CONFIG = Config.db_config()

DEBUG = False
TESTING = True

LOG_LEVEL = "WARNING"
LOG_FILE = ""
LOG_MAX_BYTES = Config.LOG_MAX_BYTES
LOG_BACKUP_COUNT = Config.LOG_BACKUP_COUNT

PRIMARY_COMPANY_KEYWORD = "청연"
INVOICE_GATEWAY_URL = "http://gateway.test/api"
INVOICE_GATEWAY_TIMEOUT = 5.0

AUTO_INIT_DB = False
AUTO_SEED_DB = False
