from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_DOWN, Decimal
from typing import Iterable, Sequence

from ..common.datetime_utils import local_date, minutes_to_hours, truncate_hours
from ..core.enums import RequestStatus
from ..core.policy import Hours, OvertimePolicy
from ..edit_requests.model import EditRequest
from ..time_logs.model import TimeLog
from .duration import DurationCalculator, SessionDuration
from .grouper import Session, group_into_sessions


@dataclass(frozen=True)
class StatisticsOptions:
    include_edit_requests: bool = False
    required_hours: Hours = 0
    include_active_sessions: bool = True


@dataclass(frozen=True)
class SessionSummary:
    session: Session
    accurate: SessionDuration
    raw: SessionDuration
    pending_edits: tuple[EditRequest, ...] = ()


@dataclass(frozen=True)
class DayBreakdown:
    work_date: date
    sessions: tuple[SessionSummary, ...]
    regular_minutes: int
    overtime_minutes: int
    approved_overtime_minutes: int
    raw_overtime_minutes: int
    overflow_minutes: int

    @property
    def regular_hours(self) -> Decimal:
        return minutes_to_hours(self.regular_minutes)

    @property
    def overtime_hours(self) -> Decimal:
        return minutes_to_hours(self.overtime_minutes)

    @property
    def raw_overtime_hours(self) -> Decimal:
        return minutes_to_hours(self.raw_overtime_minutes)


@dataclass(frozen=True)
class OvertimeTotals:
    total: Decimal
    approved: Decimal
    pending: Decimal
    rejected: Decimal


@dataclass(frozen=True)
class TimeStatistics:
    user_id: int
    internship_progress: Decimal
    regular_hours_total: Decimal
    overtime_hours_total: OvertimeTotals
    raw_overtime_hours_total: Decimal
    required_hours: Decimal
    remaining_hours: Decimal
    progress_percent: Decimal
    has_overflow: bool
    breakdown_by_day: tuple[DayBreakdown, ...]


def continuity_groups_from(edit_requests: Iterable[EditRequest]) -> dict[int, str]:
    """Log id -> group key for every continuous-session request that was not rejected."""
    groups: dict[int, str] = {}
    for req in edit_requests:
        key = req.metadata.group_key
        if key is None or req.status == RequestStatus.REJECTED:
            continue
        for log_id in req.metadata.log_ids:
            groups[int(log_id)] = key
    return groups


class TimeStatisticsAggregator:
    """Reduces a user's logs to per-day sessions and hour totals.

    Totals are always computed from the stored times; pending edit requests
    are only attached to the sessions they touch when
    ``include_edit_requests`` is set.
    """

    def __init__(self, policy: OvertimePolicy):
        self._policy = policy
        self._calculator = DurationCalculator(policy)

    def calculate(
        self,
        logs: Iterable[TimeLog],
        user_id: int,
        options: StatisticsOptions,
        *,
        as_of: datetime,
        edit_requests: Sequence[EditRequest] = (),
    ) -> TimeStatistics:
        own = [l for l in logs if int(l.user_id) == int(user_id)]
        if not options.include_active_sessions:
            own = [l for l in own if not l.is_open]

        sessions = group_into_sessions(
            own,
            tolerance=self._policy.gap_tolerance,
            continuity_groups=continuity_groups_from(edit_requests),
        )

        by_day: dict[date, list[Session]] = defaultdict(list)
        for s in sessions:
            by_day[local_date(s.time_in)].append(s)

        pending_by_log: dict[int, list[EditRequest]] = defaultdict(list)
        if options.include_edit_requests:
            for req in edit_requests:
                if req.status == RequestStatus.PENDING:
                    for log_id in req.affected_log_ids:
                        pending_by_log[int(log_id)].append(req)

        days = [self._reduce_day(d, by_day[d], as_of, pending_by_log) for d in sorted(by_day)]

        regular = sum(d.regular_minutes for d in days)
        overtime = sum(d.overtime_minutes for d in days)
        approved = sum(d.approved_overtime_minutes for d in days)
        pending = sum(s.accurate.pending_overtime_minutes for d in days for s in d.sessions)
        rejected = sum(s.accurate.rejected_overtime_minutes for d in days for s in d.sessions)

        progress = minutes_to_hours(regular + approved)
        required = truncate_hours(options.required_hours or 0)
        remaining = max(required - progress, Decimal("0.00"))
        if required > 0:
            percent = min(progress / required * 100, Decimal(100)).quantize(Decimal("0.01"), rounding=ROUND_DOWN)
        else:
            percent = Decimal("0.00")

        return TimeStatistics(
            user_id=int(user_id),
            internship_progress=progress,
            regular_hours_total=minutes_to_hours(regular),
            overtime_hours_total=OvertimeTotals(
                total=minutes_to_hours(overtime),
                approved=minutes_to_hours(approved),
                pending=minutes_to_hours(pending),
                rejected=minutes_to_hours(rejected),
            ),
            raw_overtime_hours_total=minutes_to_hours(sum(d.raw_overtime_minutes for d in days)),
            required_hours=required,
            remaining_hours=remaining,
            progress_percent=percent,
            has_overflow=any(d.overflow_minutes > 0 for d in days),
            breakdown_by_day=tuple(days),
        )

    def _reduce_day(
        self,
        work_date: date,
        sessions: list[Session],
        as_of: datetime,
        pending_by_log: dict[int, list[EditRequest]],
    ) -> DayBreakdown:
        prior_regular = 0
        summaries: list[SessionSummary] = []
        for s in sessions:
            accurate = self._calculator.accurate(s.logs, as_of=as_of, prior_regular_minutes=prior_regular)
            raw = self._calculator.raw(s.logs, as_of=as_of)
            prior_regular += accurate.regular_minutes

            edits: dict[int, EditRequest] = {}
            for log_id in s.log_ids:
                for req in pending_by_log.get(log_id, ()):
                    edits[req.request_id] = req

            summaries.append(
                SessionSummary(
                    session=s,
                    accurate=accurate,
                    raw=raw,
                    pending_edits=tuple(edits[k] for k in sorted(edits)),
                )
            )

        return DayBreakdown(
            work_date=work_date,
            sessions=tuple(summaries),
            regular_minutes=sum(x.accurate.regular_minutes for x in summaries),
            overtime_minutes=sum(x.accurate.overtime_minutes for x in summaries),
            approved_overtime_minutes=sum(x.accurate.approved_overtime_minutes for x in summaries),
            raw_overtime_minutes=sum(x.raw.overtime_minutes for x in summaries),
            overflow_minutes=sum(x.accurate.overflow_minutes for x in summaries),
        )


def calculate_time_statistics(
    logs: Iterable[TimeLog],
    user_id: int,
    options: StatisticsOptions,
    *,
    as_of: datetime,
    policy: OvertimePolicy,
    edit_requests: Sequence[EditRequest] = (),
) -> TimeStatistics:
    return TimeStatisticsAggregator(policy).calculate(
        logs,
        user_id,
        options,
        as_of=as_of,
        edit_requests=edit_requests,
    )
