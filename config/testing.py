from .config import Config

SECRET_KEY = "test-secret"
DB_CONFIG = Config.db_config()

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

# Fixed policy so tests do not depend on the environment
REQUIRED_DAILY_HOURS = 9
MAX_OVERTIME_HOURS = 3
MAX_EXTENDED_OVERTIME_HOURS = None
SESSION_GAP_TOLERANCE_SECONDS = 60
