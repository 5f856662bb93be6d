import os

from .config import Config

SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = Config.db_config()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

REQUIRED_DAILY_HOURS = Config.REQUIRED_DAILY_HOURS
MAX_OVERTIME_HOURS = Config.MAX_OVERTIME_HOURS
MAX_EXTENDED_OVERTIME_HOURS = Config.MAX_EXTENDED_OVERTIME_HOURS
SESSION_GAP_TOLERANCE_SECONDS = Config.SESSION_GAP_TOLERANCE_SECONDS
