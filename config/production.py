import os

from .config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = Config.db_config()

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

REQUIRED_DAILY_HOURS = Config.REQUIRED_DAILY_HOURS
MAX_OVERTIME_HOURS = Config.MAX_OVERTIME_HOURS
MAX_EXTENDED_OVERTIME_HOURS = Config.MAX_EXTENDED_OVERTIME_HOURS
SESSION_GAP_TOLERANCE_SECONDS = Config.SESSION_GAP_TOLERANCE_SECONDS
