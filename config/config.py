import os


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "attendmate-dev-secret"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "attendmate")

    # Identity is supplied by the authenticating gateway
    IDENTITY_HEADER = os.environ.get("IDENTITY_HEADER", "X-User-Id")

    # Ledger transactions retried on deadlock / lock wait timeout
    TRANSACTION_MAX_ATTEMPTS = int(os.environ.get("TRANSACTION_MAX_ATTEMPTS", "5"))
    TRANSACTION_RETRY_DELAY_MS = int(os.environ.get("TRANSACTION_RETRY_DELAY_MS", "50"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
        }
