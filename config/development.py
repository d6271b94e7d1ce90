from .config import Config, env_flag

SECRET_KEY = Config.SECRET_KEY

DB_CONFIG = Config.db_config()

DEBUG = True

# Apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")

IDENTITY_HEADER = Config.IDENTITY_HEADER
TRANSACTION_MAX_ATTEMPTS = Config.TRANSACTION_MAX_ATTEMPTS
TRANSACTION_RETRY_DELAY_MS = Config.TRANSACTION_RETRY_DELAY_MS
LOG_LEVEL = "DEBUG"
