import os

from .config import _db_from_env, _payroll_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = _db_from_env()

PAYROLL = _payroll_from_env()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also load default statutory rates and tax slabs on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
