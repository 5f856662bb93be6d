from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Union

from ..common.datetime_utils import day_bounds, floor_to_minute, local_date, now_local, whole_minutes
from ..common.validators import require_chronological, require_positive_id
from ..core.enums import LogStatus, LogType, OvertimeStatus, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.policy import OvertimePolicy
from ..core.result import OperationResult, guarded
from ..database.unit_of_work import UnitOfWork
from ..sessions.splitting import exceeds_cap, plan_tier_split

logger = logging.getLogger(__name__)


class TimeLogService:
    def __init__(
        self,
        uow: UnitOfWork,
        policy: OvertimePolicy,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._uow = uow
        self._policy = policy
        self._clock = clock

    def clock_in(self, user_id: int, *, now: Optional[datetime] = None) -> OperationResult:
        return guarded(logger, "clock in", lambda: self._clock_in(user_id, now))

    def _clock_in(self, user_id: int, now: Optional[datetime]) -> OperationResult:
        user_id = require_positive_id(user_id, "user_id")
        now = floor_to_minute(now or self._clock())
        start, end = day_bounds(local_date(now))

        with self._uow.transaction() as tx:
            open_logs = tx.time_logs.list_open(user_id, for_update=True)
            worked = sum(
                whole_minutes(l.time_out - l.time_in)
                for l in tx.time_logs.list_for_user(user_id, start=start, end=end)
                if not l.is_open
            )
            log_type = self._policy.tier_for_worked_minutes(worked)
            if any(l.log_type == log_type for l in open_logs):
                raise ConflictError(f"Already clocked in ({log_type.value})")

            log_id = tx.time_logs.insert(
                user_id=user_id,
                time_in=now,
                time_out=None,
                log_type=log_type,
                status=LogStatus.PENDING,
                overtime_status=OvertimeStatus.PENDING if log_type.is_overtime else None,
            )

        logger.info("User %s clocked in (%s) at %s", user_id, log_type.value, now)
        return OperationResult.ok(log_id=log_id, log_type=log_type.value, time_in=now)

    def clock_out(
        self,
        user_id: int,
        *,
        now: Optional[datetime] = None,
        discard_overtime: bool = False,
        overtime_note: Optional[str] = None,
    ) -> OperationResult:
        return guarded(
            logger,
            "clock out",
            lambda: self._clock_out(user_id, now, discard_overtime, overtime_note),
        )

    def _clock_out(
        self,
        user_id: int,
        now: Optional[datetime],
        discard_overtime: bool,
        overtime_note: Optional[str],
    ) -> OperationResult:
        user_id = require_positive_id(user_id, "user_id")
        now = floor_to_minute(now or self._clock())
        note = (overtime_note or "").strip() or None

        with self._uow.transaction() as tx:
            open_logs = tx.time_logs.list_open(user_id, for_update=True)
            if not open_logs:
                raise ValidationError("You are not clocked in")
            log = max(open_logs, key=lambda l: (l.time_in, l.log_id))
            require_chronological(log.time_in, now)

            created: list[int] = []
            discarded: list[int] = []
            if discard_overtime and log.log_type == LogType.REGULAR:
                # keep only the regular shift; the day's overtime goes away
                plan_out = min(now, log.time_in + self._policy.cap(LogType.REGULAR))
                start, end = day_bounds(local_date(log.time_in))
                for other in tx.time_logs.list_for_user(user_id, start=start, end=end):
                    if other.log_id != log.log_id and other.log_type.is_overtime:
                        tx.time_logs.delete(other.log_id)
                        discarded.append(other.log_id)
            elif not exceeds_cap(log.time_in, now, log.log_type, self._policy):
                plan_out = now
            else:
                plan = plan_tier_split(log.time_in, now, policy=self._policy, start_type=log.log_type)
                plan_out = plan[0].time_out
                for seg in plan[1:]:
                    created.append(
                        tx.time_logs.insert(
                            user_id=user_id,
                            time_in=seg.time_in,
                            time_out=seg.time_out,
                            log_type=seg.log_type,
                            status=LogStatus.COMPLETED,
                            overtime_status=OvertimeStatus.PENDING,
                            notes=note,
                        )
                    )

            tx.time_logs.rewrite(
                log_id=log.log_id,
                time_in=log.time_in,
                time_out=plan_out,
                log_type=log.log_type,
                status=LogStatus.COMPLETED,
                overtime_status=log.overtime_status,
            )

        logger.info(
            "User %s clocked out of log %s at %s (%d overtime logs, %d discarded)",
            user_id,
            log.log_id,
            now,
            len(created),
            len(discarded),
        )
        return OperationResult.ok(
            log_id=log.log_id,
            time_out=plan_out,
            created_log_ids=created,
            discarded_log_ids=discarded,
        )

    def decide_overtime(
        self,
        log_id: int,
        status: Union[OvertimeStatus, str],
        admin_id: int,
        *,
        current_role: Role = Role.ADMIN,
    ) -> OperationResult:
        return guarded(logger, "decide overtime", lambda: self._decide_overtime(log_id, status, admin_id, current_role))

    def _decide_overtime(
        self,
        log_id: int,
        status: Union[OvertimeStatus, str],
        admin_id: int,
        current_role: Role,
    ) -> OperationResult:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can decide overtime")
        log_id = require_positive_id(log_id, "log_id")
        try:
            status = OvertimeStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid overtime status: {status!r}")

        with self._uow.transaction() as tx:
            log = tx.time_logs.get(log_id, for_update=True)
            if not log:
                raise NotFoundError(f"Time log {log_id} not found")
            if not log.log_type.is_overtime:
                raise ValidationError("Only overtime logs can be approved or rejected")

            decided = status != OvertimeStatus.PENDING
            tx.time_logs.set_overtime_status(
                log_id=log_id,
                overtime_status=status,
                decided_by=int(admin_id) if decided else None,
                decided_at=self._clock() if decided else None,
            )

        logger.info("Overtime on log %s set to %s by %s", log_id, status.value, admin_id)
        return OperationResult.ok(log_id=log_id, overtime_status=status.value)

    def logs_for_user(
        self,
        user_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> OperationResult:
        def run() -> OperationResult:
            uid = require_positive_id(user_id, "user_id")
            with self._uow.transaction() as tx:
                logs = list(tx.time_logs.list_for_user(uid, start=start, end=end))
            return OperationResult.ok(logs=logs)

        return guarded(logger, "list time logs", run)

    def today_logs(self, user_id: int, *, today: Optional[date] = None) -> OperationResult:
        start, end = day_bounds(today or local_date(self._clock()))
        return self.logs_for_user(user_id, start=start, end=end)

    def pending_overtime(self) -> OperationResult:
        def run() -> OperationResult:
            with self._uow.transaction() as tx:
                logs = list(tx.time_logs.list_overtime(status=OvertimeStatus.PENDING))
            return OperationResult.ok(logs=logs)

        return guarded(logger, "list pending overtime", run)
