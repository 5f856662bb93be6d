from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Any, Optional, Union

from .constants import (
    DEFAULT_MAX_OVERTIME_HOURS,
    DEFAULT_REQUIRED_DAILY_HOURS,
    DEFAULT_SESSION_GAP_TOLERANCE_SECONDS,
)
from .enums import LogType
from .exceptions import ValidationError

Hours = Union[int, float, Decimal]


def hours_to_minutes(hours: Hours) -> int:
    return int(Decimal(str(hours)) * 60)


@dataclass(frozen=True)
class OvertimePolicy:
    """Daily caps for each log tier.

    Extended overtime defaults to ``required + overtime`` hours when not set.
    """

    required_daily_hours: Hours = DEFAULT_REQUIRED_DAILY_HOURS
    max_overtime_hours: Hours = DEFAULT_MAX_OVERTIME_HOURS
    max_extended_overtime_hours: Optional[Hours] = None
    gap_tolerance_seconds: int = DEFAULT_SESSION_GAP_TOLERANCE_SECONDS

    def __post_init__(self) -> None:
        if Decimal(str(self.required_daily_hours)) <= 0:
            raise ValidationError("required_daily_hours must be positive")
        if Decimal(str(self.max_overtime_hours)) < 0:
            raise ValidationError("max_overtime_hours must not be negative")
        if self.max_extended_overtime_hours is not None and Decimal(str(self.max_extended_overtime_hours)) < 0:
            raise ValidationError("max_extended_overtime_hours must not be negative")
        if int(self.gap_tolerance_seconds) < 0:
            raise ValidationError("gap_tolerance_seconds must not be negative")

    @property
    def regular_cap_minutes(self) -> int:
        return hours_to_minutes(self.required_daily_hours)

    @property
    def overtime_cap_minutes(self) -> int:
        return hours_to_minutes(self.max_overtime_hours)

    @property
    def extended_cap_minutes(self) -> int:
        if self.max_extended_overtime_hours is None:
            return self.regular_cap_minutes + self.overtime_cap_minutes
        return hours_to_minutes(self.max_extended_overtime_hours)

    @property
    def gap_tolerance(self) -> timedelta:
        return timedelta(seconds=int(self.gap_tolerance_seconds))

    def cap_minutes(self, log_type: LogType) -> int:
        if log_type is LogType.REGULAR:
            return self.regular_cap_minutes
        if log_type is LogType.OVERTIME:
            return self.overtime_cap_minutes
        return self.extended_cap_minutes

    def cap(self, log_type: LogType) -> timedelta:
        return timedelta(minutes=self.cap_minutes(log_type))

    def tier_for_worked_minutes(self, worked_minutes: int) -> LogType:
        """Tier a new clock-in belongs to, given completed minutes already worked that day."""
        if worked_minutes < self.regular_cap_minutes:
            return LogType.REGULAR
        if worked_minutes < self.regular_cap_minutes + self.overtime_cap_minutes:
            return LogType.OVERTIME
        return LogType.EXTENDED_OVERTIME

    @classmethod
    def from_settings(cls, settings: Any) -> "OvertimePolicy":
        return cls(
            required_daily_hours=getattr(settings, "REQUIRED_DAILY_HOURS", DEFAULT_REQUIRED_DAILY_HOURS),
            max_overtime_hours=getattr(settings, "MAX_OVERTIME_HOURS", DEFAULT_MAX_OVERTIME_HOURS),
            max_extended_overtime_hours=getattr(settings, "MAX_EXTENDED_OVERTIME_HOURS", None),
            gap_tolerance_seconds=int(
                getattr(settings, "SESSION_GAP_TOLERANCE_SECONDS", DEFAULT_SESSION_GAP_TOLERANCE_SECONDS)
            ),
        )
