from .config import Config

SECRET_KEY = "test-secret"

DB_CONFIG = dict(Config.db_config(), database="attendmate_test")

DEBUG = False
TESTING = True

AUTO_INIT_DB = False

IDENTITY_HEADER = "X-User-Id"
TRANSACTION_MAX_ATTEMPTS = 3
TRANSACTION_RETRY_DELAY_MS = 0
LOG_LEVEL = "WARNING"
