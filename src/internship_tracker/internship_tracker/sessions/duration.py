from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from ..common.datetime_utils import minutes_to_hours, whole_minutes
from ..core.enums import DurationMode, LogType, OvertimeStatus
from ..core.policy import OvertimePolicy
from ..time_logs.model import TimeLog


@dataclass(frozen=True)
class SegmentDuration:
    """Contribution of one log to its session."""

    log_id: int
    log_type: LogType
    elapsed_minutes: int
    credited_minutes: int
    overflow_minutes: int
    overtime_status: Optional[OvertimeStatus]
    is_active: bool


@dataclass(frozen=True)
class SessionDuration:
    mode: DurationMode
    segments: tuple[SegmentDuration, ...]
    regular_minutes: int
    overtime_minutes: int
    approved_overtime_minutes: int
    pending_overtime_minutes: int
    rejected_overtime_minutes: int
    overflow_minutes: int
    overtime_status: Optional[OvertimeStatus]
    is_active: bool

    @property
    def regular_hours(self) -> Decimal:
        return minutes_to_hours(self.regular_minutes)

    @property
    def overtime_hours(self) -> Decimal:
        return minutes_to_hours(self.overtime_minutes)

    @property
    def needs_migration(self) -> bool:
        return self.overflow_minutes > 0


def session_overtime_status(statuses: Iterable[Optional[OvertimeStatus]]) -> Optional[OvertimeStatus]:
    """Collapse per-log overtime decisions: rejected wins, then approved, then pending."""
    seen = [s or OvertimeStatus.PENDING for s in statuses]
    if not seen:
        return None
    if OvertimeStatus.REJECTED in seen:
        return OvertimeStatus.REJECTED
    if OvertimeStatus.APPROVED in seen:
        return OvertimeStatus.APPROVED
    return OvertimeStatus.PENDING


class DurationCalculator:
    """Splits the logs of one session into regular and overtime minutes.

    ACCURATE mode applies the policy caps and is used for official totals;
    RAW mode credits everything that was worked. Both floor each log to
    whole minutes before anything else.
    """

    def __init__(self, policy: OvertimePolicy):
        self._policy = policy

    @property
    def policy(self) -> OvertimePolicy:
        return self._policy

    @staticmethod
    def elapsed_minutes(log: TimeLog, as_of: datetime) -> int:
        end = log.time_out if log.time_out is not None else as_of
        return whole_minutes(end - log.time_in)

    def compute(
        self,
        logs: Iterable[TimeLog],
        *,
        as_of: datetime,
        prior_regular_minutes: int = 0,
        mode: DurationMode = DurationMode.ACCURATE,
    ) -> SessionDuration:
        ordered = sorted(logs, key=lambda l: (l.time_in, l.log_id))
        used = {t: 0 for t in LogType}
        used[LogType.REGULAR] = max(int(prior_regular_minutes), 0)

        segments: list[SegmentDuration] = []
        regular = overtime = overflow = 0
        by_status = {s: 0 for s in OvertimeStatus}

        for log in ordered:
            elapsed = self.elapsed_minutes(log, as_of)
            if mode is DurationMode.ACCURATE:
                room = max(self._policy.cap_minutes(log.log_type) - used[log.log_type], 0)
                credited = min(elapsed, room)
            else:
                credited = elapsed
            used[log.log_type] += credited
            excess = elapsed - credited

            status = None
            if log.log_type.is_overtime:
                status = log.overtime_status or OvertimeStatus.PENDING
                overtime += credited
                by_status[status] += credited
            else:
                regular += credited
            overflow += excess

            segments.append(
                SegmentDuration(
                    log_id=log.log_id,
                    log_type=log.log_type,
                    elapsed_minutes=elapsed,
                    credited_minutes=credited,
                    overflow_minutes=excess,
                    overtime_status=status,
                    is_active=log.is_open,
                )
            )

        return SessionDuration(
            mode=mode,
            segments=tuple(segments),
            regular_minutes=regular,
            overtime_minutes=overtime,
            approved_overtime_minutes=by_status[OvertimeStatus.APPROVED],
            pending_overtime_minutes=by_status[OvertimeStatus.PENDING],
            rejected_overtime_minutes=by_status[OvertimeStatus.REJECTED],
            overflow_minutes=overflow,
            overtime_status=session_overtime_status(s.overtime_status for s in segments if s.log_type.is_overtime),
            is_active=bool(ordered) and ordered[-1].is_open,
        )

    def accurate(self, logs: Iterable[TimeLog], *, as_of: datetime, prior_regular_minutes: int = 0) -> SessionDuration:
        return self.compute(logs, as_of=as_of, prior_regular_minutes=prior_regular_minutes, mode=DurationMode.ACCURATE)

    def raw(self, logs: Iterable[TimeLog], *, as_of: datetime) -> SessionDuration:
        return self.compute(logs, as_of=as_of, mode=DurationMode.RAW)


def compute_session_duration(
    logs: Iterable[TimeLog],
    as_of: datetime,
    prior_regular_minutes: int = 0,
    *,
    policy: OvertimePolicy,
    mode: DurationMode = DurationMode.ACCURATE,
) -> SessionDuration:
    return DurationCalculator(policy).compute(
        logs,
        as_of=as_of,
        prior_regular_minutes=prior_regular_minutes,
        mode=mode,
    )
