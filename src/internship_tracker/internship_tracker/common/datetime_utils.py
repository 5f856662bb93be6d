from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import ROUND_DOWN, Decimal
from typing import Optional

from ..core.exceptions import ValidationError

_TWO_PLACES = Decimal("0.01")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: Optional[str], field_name: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into naive local time.

    Stored times are naive local DATETIMEs, so offsets such as ``Z`` are
    converted here and dropped.
    """
    v = (value or "").strip()
    if not v:
        return None
    try:
        parsed = datetime.fromisoformat(v.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO-8601 timestamp")
    if parsed.tzinfo is not None:
        return parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def floor_to_minute(value: datetime) -> datetime:
    return value.replace(second=0, microsecond=0)


def whole_minutes(delta: timedelta) -> int:
    """Completed minutes in ``delta``; partial minutes are discarded and negatives clamp to 0."""
    if delta <= timedelta(0):
        return 0
    return int(delta.total_seconds() // 60)


def minutes_to_hours(minutes: int) -> Decimal:
    """Hours truncated (not rounded) to two decimals."""
    return (Decimal(int(minutes)) / Decimal(60)).quantize(_TWO_PLACES, rounding=ROUND_DOWN)


def truncate_hours(value) -> Decimal:
    return Decimal(str(value)).quantize(_TWO_PLACES, rounding=ROUND_DOWN)


def local_date(value: datetime) -> date:
    """Calendar date of ``value`` in local time (aware values are converted first)."""
    if value.tzinfo is not None:
        return value.astimezone().date()
    return value.date()


def day_bounds(work_date: date) -> tuple[datetime, datetime]:
    start = datetime.combine(work_date, datetime.min.time())
    return start, start + timedelta(days=1)
