from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Optional

from ..core.enums import LogType
from ..time_logs.model import TimeLog


@dataclass(frozen=True)
class Session:
    """One unbroken stretch of work made of one or more contiguous logs."""

    logs: tuple[TimeLog, ...]

    @property
    def time_in(self) -> datetime:
        return self.logs[0].time_in

    @property
    def time_out(self) -> Optional[datetime]:
        return self.logs[-1].time_out

    @property
    def session_type(self) -> LogType:
        return self.logs[0].log_type

    @property
    def is_continuous_session(self) -> bool:
        return len(self.logs) > 1

    @property
    def is_active(self) -> bool:
        return self.logs[-1].is_open

    @property
    def log_ids(self) -> tuple[int, ...]:
        return tuple(l.log_id for l in self.logs)


def is_tier_continuation(earlier: LogType, later: LogType) -> bool:
    return later.rank == earlier.rank + 1


def is_contiguous(earlier: TimeLog, later: TimeLog, tolerance: timedelta) -> bool:
    if earlier.time_out is None:
        return False
    gap = later.time_in - earlier.time_out
    return timedelta(0) <= gap <= tolerance


def group_into_sessions(
    logs: Iterable[TimeLog],
    *,
    tolerance: timedelta = timedelta(0),
    continuity_groups: Optional[Mapping[int, str]] = None,
) -> list[Session]:
    """Group logs into chronological sessions.

    Two neighbours share a session when the second continues the first one
    tier-wise (regular -> overtime -> extended overtime) with a gap within
    ``tolerance``, or when ``continuity_groups`` maps both log ids to the
    same key (continuous-session edit requests).
    """

    groups = continuity_groups or {}
    ordered = sorted(logs, key=lambda l: (l.time_in, l.log_id))

    sessions: list[Session] = []
    current: list[TimeLog] = []
    for log in ordered:
        if current and _joins(current[-1], log, tolerance, groups):
            current.append(log)
            continue
        if current:
            sessions.append(Session(logs=tuple(current)))
        current = [log]

    if current:
        sessions.append(Session(logs=tuple(current)))
    return sessions


def _joins(prev: TimeLog, log: TimeLog, tolerance: timedelta, groups: Mapping[int, str]) -> bool:
    key = groups.get(prev.log_id)
    if key is not None and key == groups.get(log.log_id):
        return True
    return is_tier_continuation(prev.log_type, log.log_type) and is_contiguous(prev, log, tolerance)
