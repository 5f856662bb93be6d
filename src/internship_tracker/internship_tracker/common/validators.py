from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from ..core.enums import ReviewAction
from ..core.exceptions import ValidationError


def require_positive_id(value: Any, field_name: str) -> int:
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid")
    if v <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return v


def require_chronological(time_in: Optional[datetime], time_out: Optional[datetime]) -> None:
    if time_in is not None and time_out is not None and time_out < time_in:
        raise ValidationError("Time out cannot be earlier than time in")


def parse_action(value: Any) -> ReviewAction:
    try:
        return ReviewAction(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid action: {value!r}")
