import os

from .config import Config, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = Config.db_config()

DEBUG = False

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")

IDENTITY_HEADER = Config.IDENTITY_HEADER
TRANSACTION_MAX_ATTEMPTS = Config.TRANSACTION_MAX_ATTEMPTS
TRANSACTION_RETRY_DELAY_MS = Config.TRANSACTION_RETRY_DELAY_MS
LOG_LEVEL = Config.LOG_LEVEL
