from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    INTERN = "intern"


class LogType(str, Enum):
    """Tier of a time log. Order matters: each tier continues the previous one."""

    REGULAR = "regular"
    OVERTIME = "overtime"
    EXTENDED_OVERTIME = "extended_overtime"

    @property
    def rank(self) -> int:
        return _LOG_TYPE_ORDER.index(self)

    @property
    def is_overtime(self) -> bool:
        return self is not LogType.REGULAR

    def promoted(self) -> "LogType":
        """Next tier up; extended overtime is the top tier."""
        idx = min(self.rank + 1, len(_LOG_TYPE_ORDER) - 1)
        return _LOG_TYPE_ORDER[idx]


_LOG_TYPE_ORDER = (LogType.REGULAR, LogType.OVERTIME, LogType.EXTENDED_OVERTIME)


class LogStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class OvertimeStatus(str, Enum):
    """Admin decision on an overtime or extended-overtime log."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RequestStatus(str, Enum):
    """Review state shared by edit requests and completion requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REVERT = "revert"


class ProgramStatus(str, Enum):
    ACTIVE = "active"
    PENDING_COMPLETION = "pending_completion"
    COMPLETED = "completed"


class DurationMode(str, Enum):
    """ACCURATE applies policy caps (official totals); RAW shows actual worked time."""

    ACCURATE = "accurate"
    RAW = "raw"
