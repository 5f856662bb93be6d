"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
The policy values are only defaults; the active values come from the
settings module and are carried by ``OvertimePolicy``.
"""

DEFAULT_REQUIRED_DAILY_HOURS = 9
DEFAULT_MAX_OVERTIME_HOURS = 3
DEFAULT_SESSION_GAP_TOLERANCE_SECONDS = 60
DEFAULT_HISTORY_LIMIT = 200
DEFAULT_ADMIN_LIST_LIMIT = 500
