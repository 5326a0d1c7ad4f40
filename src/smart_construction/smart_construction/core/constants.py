"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

PRIMARY_COMPANY_KEYWORD = "청연"

DEFAULT_MAN_DAY = 1.0
DEFAULT_REPORT_ROLE = "작업자"
DEFAULT_PAYROLL_ROLE = "기능공"
DEFAULT_BULK_ROLE = "일반"

BOARD_COLUMN_COUNT = 4
INTEGRITY_BATCH_SIZE = 500

PAYROLL_CONFIG_DOC = "payroll_config_v1"
DEFAULT_TAX_RATE = 0.033
INCOME_TAX_DIVISOR = 1.1
VAT_RATE = 0.1

DEFAULT_INVOICE_GATEWAY_URL = "http://localhost:4000/api"
DEFAULT_INVOICE_LIST_LIMIT = 50

MASTER_DATA_CHANGED_TOPIC = "smart-construction:master-data-changed"

GENERIC_SAVE_ERROR = "저장 중 오류가 발생했습니다."
GENERIC_LOAD_ERROR = "데이터를 불러오는 중 오류가 발생했습니다."
