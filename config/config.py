import os


def _env_hours(name: str, default: str):
    value = os.environ.get(name, default)
    return float(value) if value not in (None, "") else None


class Config:
    """Settings shared by every environment module."""

    SECRET_KEY = os.environ.get("SECRET_KEY") or "internship-tracker-dev"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "internship_tracker")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Overtime policy
    REQUIRED_DAILY_HOURS = _env_hours("REQUIRED_DAILY_HOURS", "9")
    MAX_OVERTIME_HOURS = _env_hours("MAX_OVERTIME_HOURS", "3")
    # empty -> required + overtime
    MAX_EXTENDED_OVERTIME_HOURS = _env_hours("MAX_EXTENDED_OVERTIME_HOURS", "")
    SESSION_GAP_TOLERANCE_SECONDS = int(os.environ.get("SESSION_GAP_TOLERANCE_SECONDS", "60"))

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
        }
