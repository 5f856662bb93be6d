from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.enums import LogType
from ..core.policy import OvertimePolicy


@dataclass(frozen=True)
class PlannedSegment:
    log_type: LogType
    time_in: datetime
    time_out: datetime


def plan_tier_split(
    time_in: datetime,
    time_out: datetime,
    *,
    policy: OvertimePolicy,
    start_type: LogType = LogType.REGULAR,
) -> list[PlannedSegment]:
    """Cut ``[time_in, time_out]`` into segments that each fit their tier cap.

    Each segment ends at ``segment.time_in + cap`` and the remainder moves
    one tier up. Extended overtime is the top tier, so a remainder there
    keeps being cut into extended segments. Tiers with a zero cap are
    skipped.
    """

    segments: list[PlannedSegment] = []
    log_type = start_type
    start = time_in
    while True:
        cap = policy.cap(log_type)
        is_top = log_type.promoted() is log_type
        if cap <= timedelta(0) and not is_top:
            log_type = log_type.promoted()
            continue
        cut = start + cap
        if time_out <= cut or cap <= timedelta(0):
            segments.append(PlannedSegment(log_type=log_type, time_in=start, time_out=time_out))
            return segments
        segments.append(PlannedSegment(log_type=log_type, time_in=start, time_out=cut))
        start = cut
        log_type = log_type.promoted()


def exceeds_cap(time_in: datetime, time_out: datetime, log_type: LogType, policy: OvertimePolicy) -> bool:
    """True when a closed span is longer than its tier allows (zero caps never trigger)."""
    cap = policy.cap(log_type)
    return cap > timedelta(0) and time_out - time_in > cap
