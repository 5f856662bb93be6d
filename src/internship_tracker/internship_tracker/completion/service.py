from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Union

from ..common.datetime_utils import now_local, truncate_hours
from ..common.validators import parse_action, require_positive_id
from ..core.constants import DEFAULT_ADMIN_LIST_LIMIT
from ..core.enums import ProgramStatus, RequestStatus, ReviewAction, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.policy import Hours, OvertimePolicy
from ..core.result import OperationResult, guarded
from ..database.unit_of_work import TransactionScope, UnitOfWork
from ..sessions.statistics import StatisticsOptions, TimeStatistics, calculate_time_statistics
from .model import EligibilityVerdict, InternshipProgram

logger = logging.getLogger(__name__)


def is_eligible(progress: Hours, required: Hours) -> bool:
    """Inclusive: exactly reaching the required hours is enough."""
    return truncate_hours(progress) >= truncate_hours(required)


class CompletionService:
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

    def _statistics(
        self,
        tx: TransactionScope,
        user_id: int,
        program: Optional[InternshipProgram],
        as_of: datetime,
        *,
        include_active_sessions: bool,
        include_edit_requests: bool = False,
    ) -> TimeStatistics:
        logs = tx.time_logs.list_for_user(user_id)
        edits = tx.edit_requests.list_requests(user_id=user_id, limit=DEFAULT_ADMIN_LIST_LIMIT)
        options = StatisticsOptions(
            include_edit_requests=include_edit_requests,
            required_hours=program.required_hours if program else 0,
            include_active_sessions=include_active_sessions,
        )
        return calculate_time_statistics(
            logs,
            user_id,
            options,
            as_of=as_of,
            policy=self._policy,
            edit_requests=edits,
        )

    @staticmethod
    def _require_program(tx: TransactionScope, user_id: int) -> InternshipProgram:
        program = tx.completion.get_program_for_user(user_id)
        if not program:
            raise NotFoundError(f"No internship program for user {user_id}")
        return program

    def progress(
        self,
        user_id: int,
        *,
        as_of: Optional[datetime] = None,
        include_edit_requests: bool = False,
    ) -> OperationResult:
        """Statistics for display; open sessions count up to ``as_of``."""

        def run() -> OperationResult:
            uid = require_positive_id(user_id, "user_id")
            with self._uow.transaction() as tx:
                program = tx.completion.get_program_for_user(uid)
                stats = self._statistics(
                    tx,
                    uid,
                    program,
                    as_of or self._clock(),
                    include_active_sessions=True,
                    include_edit_requests=include_edit_requests,
                )
            return OperationResult.ok(statistics=stats, program=program)

        return guarded(logger, "load progress", run)

    def check_eligibility(self, user_id: int, *, as_of: Optional[datetime] = None) -> OperationResult:
        def run() -> OperationResult:
            uid = require_positive_id(user_id, "user_id")
            with self._uow.transaction() as tx:
                verdict = self._verdict(tx, uid, as_of or self._clock())
            return OperationResult.ok(verdict=verdict)

        return guarded(logger, "check eligibility", run)

    def _verdict(self, tx: TransactionScope, user_id: int, as_of: datetime) -> EligibilityVerdict:
        program = self._require_program(tx, user_id)
        stats = self._statistics(tx, user_id, program, as_of, include_active_sessions=False)
        required = truncate_hours(program.required_hours)
        eligible = is_eligible(stats.internship_progress, required)
        return EligibilityVerdict(
            eligible=eligible,
            progress_hours=stats.internship_progress,
            required_hours=required,
            remaining_hours=stats.remaining_hours,
            reason=None if eligible else f"{stats.remaining_hours} hours remaining",
        )

    def request_completion(self, user_id: int, *, as_of: Optional[datetime] = None) -> OperationResult:
        return guarded(logger, "request completion", lambda: self._request_completion(user_id, as_of))

    def _request_completion(self, user_id: int, as_of: Optional[datetime]) -> OperationResult:
        uid = require_positive_id(user_id, "user_id")
        with self._uow.transaction() as tx:
            program = self._require_program(tx, uid)
            existing = tx.completion.find_requests(
                user_id=uid,
                statuses=[RequestStatus.PENDING, RequestStatus.APPROVED],
            )
            if existing:
                raise ConflictError("A completion request already exists")

            verdict = self._verdict(tx, uid, as_of or self._clock())
            if not verdict.eligible:
                raise ValidationError(f"Not eligible for completion: {verdict.reason}")

            request_id = tx.completion.create_request(
                user_id=uid,
                program_id=program.program_id,
                total_hours_completed=verdict.progress_hours,
            )
            tx.completion.set_program_status(program_id=program.program_id, status=ProgramStatus.PENDING_COMPLETION)

        logger.info("Completion request %s created for user %s (%s h)", request_id, uid, verdict.progress_hours)
        return OperationResult.ok(request_id=request_id, total_hours=verdict.progress_hours)

    def process_completion_request(
        self,
        request_id: int,
        action: Union[ReviewAction, str],
        reviewer_id: int,
        admin_notes: Optional[str] = None,
        *,
        current_role: Role = Role.ADMIN,
    ) -> OperationResult:
        return guarded(
            logger,
            "process completion request",
            lambda: self._process(request_id, action, reviewer_id, admin_notes, current_role),
        )

    def _process(
        self,
        request_id: int,
        action: Union[ReviewAction, str],
        reviewer_id: int,
        admin_notes: Optional[str],
        current_role: Role,
    ) -> OperationResult:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can review completion requests")
        action = action if isinstance(action, ReviewAction) else parse_action(action)
        if action is ReviewAction.REVERT:
            raise ValidationError("Completion requests cannot be reverted")
        request_id = require_positive_id(request_id, "request_id")
        target = RequestStatus.APPROVED if action is ReviewAction.APPROVE else RequestStatus.REJECTED

        with self._uow.transaction() as tx:
            req = tx.completion.get_request(request_id)
            if not req:
                raise NotFoundError(f"Completion request {request_id} not found")
            if req.status == target:
                return OperationResult.ok(request_id=request_id, status=target.value)
            if req.status != RequestStatus.PENDING:
                raise ConflictError(f"Completion request {request_id} already processed")

            if not tx.completion.decide_request(
                request_id=request_id,
                status=target,
                reviewed_by=int(reviewer_id),
                reviewed_at=self._clock(),
                admin_notes=(admin_notes or "").strip() or None,
            ):
                raise ConflictError(f"Completion request {request_id} already processed")
            tx.completion.set_program_status(
                program_id=req.program_id,
                status=ProgramStatus.COMPLETED if target == RequestStatus.APPROVED else ProgramStatus.ACTIVE,
            )

        logger.info("Completion request %s %s by %s", request_id, target.value, reviewer_id)
        return OperationResult.ok(request_id=request_id, status=target.value)

    def time_record_for_request(self, request_id: int, *, as_of: Optional[datetime] = None) -> OperationResult:
        """Official time record behind a completion request (completed logs only)."""

        def run() -> OperationResult:
            rid = require_positive_id(request_id, "request_id")
            with self._uow.transaction() as tx:
                req = tx.completion.get_request(rid)
                if not req:
                    raise NotFoundError(f"Completion request {rid} not found")
                program = tx.completion.get_program_for_user(req.user_id)
                stats = self._statistics(tx, req.user_id, program, as_of or self._clock(), include_active_sessions=False)
            return OperationResult.ok(request=req, statistics=stats)

        return guarded(logger, "load time record", run)

    def list_requests(self, *, status: Optional[RequestStatus] = None) -> OperationResult:
        def run() -> OperationResult:
            with self._uow.transaction() as tx:
                requests = list(tx.completion.list_requests(status=status, limit=DEFAULT_ADMIN_LIST_LIMIT))
            return OperationResult.ok(requests=requests)

        return guarded(logger, "list completion requests", run)

