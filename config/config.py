import os


def _flag(name: str, default: str = "0") -> bool:
    return bool(int(os.environ.get(name, default)))


class Config:
    """Values shared by every environment, read from the process environment."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "")

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "smart_construction")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FILE = os.environ.get("LOG_FILE", "")
    LOG_MAX_BYTES = int(os.environ.get("LOG_MAX_BYTES", str(5 * 1024 * 1024)))
    LOG_BACKUP_COUNT = int(os.environ.get("LOG_BACKUP_COUNT", "5"))

    PRIMARY_COMPANY_KEYWORD = os.environ.get("PRIMARY_COMPANY_KEYWORD", "청연")
    INVOICE_GATEWAY_URL = os.environ.get("INVOICE_GATEWAY_URL", "http://localhost:4000/api")
    INVOICE_GATEWAY_TIMEOUT = float(os.environ.get("INVOICE_GATEWAY_TIMEOUT", "30"))

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
        }
