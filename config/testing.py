import os

from .config import _db_from_env, _payroll_from_env

SECRET_KEY = "test-secret"

DB_CONFIG = _db_from_env()

PAYROLL = _payroll_from_env()

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
