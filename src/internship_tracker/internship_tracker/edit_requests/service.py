from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence, Union

from ..common.datetime_utils import floor_to_minute, now_local
from ..common.validators import parse_action, require_chronological, require_positive_id
from ..core.enums import LogStatus, OvertimeStatus, RequestStatus, ReviewAction, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.policy import OvertimePolicy
from ..core.result import OperationResult, guarded
from ..database.unit_of_work import TransactionScope, UnitOfWork
from ..sessions.grouper import group_into_sessions
from ..sessions.splitting import PlannedSegment, exceeds_cap, plan_tier_split
from ..time_logs.model import LogSnapshot, TimeLog
from .model import EditRequest, EditRequestMetadata

logger = logging.getLogger(__name__)

_TERMINAL = {
    ReviewAction.APPROVE: RequestStatus.APPROVED,
    ReviewAction.REJECT: RequestStatus.REJECTED,
}


class EditRequestService:
    """Submission and review of time-log edit requests.

    A request moves pending -> approved/rejected and back to pending on
    revert. Every affected log is snapshotted at submission so a revert
    restores exactly what was stored, including logs that an approval
    deleted, and removes logs that an approval inserted.
    """

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

    # ---- submission ----

    def submit(
        self,
        *,
        requested_by: int,
        current_role: Role,
        log_id: int,
        requested_time_in: Optional[datetime] = None,
        requested_time_out: Optional[datetime] = None,
    ) -> OperationResult:
        return guarded(
            logger,
            "submit edit request",
            lambda: self._submit(
                requested_by=requested_by,
                current_role=current_role,
                log_ids=[log_id],
                requested_time_in=requested_time_in,
                requested_time_out=requested_time_out,
                continuous=False,
            ),
        )

    def submit_continuous(
        self,
        *,
        requested_by: int,
        current_role: Role,
        log_ids: Sequence[int],
        requested_time_in: Optional[datetime] = None,
        requested_time_out: Optional[datetime] = None,
    ) -> OperationResult:
        return guarded(
            logger,
            "submit continuous edit request",
            lambda: self._submit(
                requested_by=requested_by,
                current_role=current_role,
                log_ids=list(log_ids),
                requested_time_in=requested_time_in,
                requested_time_out=requested_time_out,
                continuous=True,
            ),
        )

    def _submit(
        self,
        *,
        requested_by: int,
        current_role: Role,
        log_ids: list[int],
        requested_time_in: Optional[datetime],
        requested_time_out: Optional[datetime],
        continuous: bool,
    ) -> OperationResult:
        requested_by = require_positive_id(requested_by, "requested_by")
        if not log_ids:
            raise ValidationError("At least one log is required")
        ids = [require_positive_id(i, "log_id") for i in log_ids]
        if len(set(ids)) != len(ids):
            raise ValidationError("Duplicate log ids")

        if requested_time_in is None and requested_time_out is None:
            raise ValidationError("Provide a new time in or time out")
        new_in = floor_to_minute(requested_time_in) if requested_time_in else None
        new_out = floor_to_minute(requested_time_out) if requested_time_out else None
        require_chronological(new_in, new_out)

        with self._uow.transaction() as tx:
            logs = []
            for log_id in ids:
                log = tx.time_logs.get(log_id, for_update=True)
                if not log:
                    raise NotFoundError(f"Time log {log_id} not found")
                logs.append(log)
            logs.sort(key=lambda l: (l.time_in, l.log_id))

            owners = {int(l.user_id) for l in logs}
            if len(owners) != 1:
                raise ValidationError("All logs must belong to the same user")
            owner = owners.pop()
            if owner != requested_by and current_role != Role.ADMIN:
                raise AuthorizationError("You can only edit your own time logs")

            if continuous:
                self._check_continuous(logs)
                if new_out is None and logs[-1].is_open:
                    raise ValidationError("A continuous session edit needs a time out")
            require_chronological(new_in or logs[0].time_in, new_out or logs[-1].time_out)

            metadata = EditRequestMetadata(
                is_continuous_session=continuous,
                log_ids=tuple(l.log_id for l in logs),
                original_segments=tuple(LogSnapshot.of(l) for l in logs),
            )
            request_id = tx.edit_requests.create(
                log_id=logs[0].log_id,
                requested_by=requested_by,
                requested_time_in=new_in,
                requested_time_out=new_out,
                original_time_in=logs[0].time_in,
                original_time_out=logs[-1].time_out,
                metadata=metadata,
            )
            logger.info("Edit request %s submitted by user %s for logs %s", request_id, requested_by, metadata.log_ids)

            auto_approved = current_role == Role.ADMIN and owner != requested_by
            if auto_approved:
                req = tx.edit_requests.get(request_id, for_update=True)
                self._approve(tx, req, reviewer_id=requested_by)
                logger.info("Edit request %s auto-approved by admin %s", request_id, requested_by)

        return OperationResult.ok(request_id=request_id, auto_approved=auto_approved)

    def _check_continuous(self, logs: list[TimeLog]) -> None:
        if len(logs) < 2:
            raise ValidationError("A continuous session edit needs at least two logs")
        if any(l.is_open for l in logs[:-1]):
            raise ValidationError("Only the last log of a session can be open")
        sessions = group_into_sessions(logs, tolerance=self._policy.gap_tolerance)
        if len(sessions) != 1:
            raise ValidationError("Logs do not form one continuous session")

    # ---- review ----

    def review(
        self,
        *,
        request_id: int,
        action: Union[ReviewAction, str],
        reviewer_id: int,
        current_role: Role = Role.ADMIN,
    ) -> OperationResult:
        return guarded(
            logger,
            "review edit request",
            lambda: self._review(
                request_id=request_id,
                action=action,
                reviewer_id=reviewer_id,
                current_role=current_role,
            ),
        )

    def _review(
        self,
        *,
        request_id: int,
        action: Union[ReviewAction, str],
        reviewer_id: int,
        current_role: Role,
    ) -> OperationResult:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can review edit requests")
        action = action if isinstance(action, ReviewAction) else parse_action(action)
        request_id = require_positive_id(request_id, "request_id")

        with self._uow.transaction() as tx:
            req = tx.edit_requests.get(request_id, for_update=True)
            if not req:
                raise NotFoundError(f"Edit request {request_id} not found")
            status = self._apply(tx, req, action, reviewer_id=int(reviewer_id))

        return OperationResult.ok(request_id=request_id, status=status.value)

    def process_batch(
        self,
        *,
        request_ids: Sequence[int],
        action: Union[ReviewAction, str],
        reviewer_id: int,
        current_role: Role = Role.ADMIN,
    ) -> OperationResult:
        """Apply one action to several continuous-session requests, all or nothing."""
        return guarded(
            logger,
            "process edit request batch",
            lambda: self._process_batch(
                request_ids=request_ids,
                action=action,
                reviewer_id=reviewer_id,
                current_role=current_role,
            ),
        )

    def _process_batch(
        self,
        *,
        request_ids: Sequence[int],
        action: Union[ReviewAction, str],
        reviewer_id: int,
        current_role: Role,
    ) -> OperationResult:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can review edit requests")
        action = action if isinstance(action, ReviewAction) else parse_action(action)
        ids = [require_positive_id(i, "request_id") for i in request_ids or ()]
        if not ids:
            raise ValidationError("No requests selected")

        results: dict[int, str] = {}
        with self._uow.transaction() as tx:
            for request_id in ids:
                req = tx.edit_requests.get(request_id, for_update=True)
                if not req:
                    raise NotFoundError(f"Edit request {request_id} not found")
                if not req.metadata.is_continuous_session:
                    raise ValidationError(f"Edit request {request_id} is not a continuous-session request")
                results[request_id] = self._apply(tx, req, action, reviewer_id=int(reviewer_id)).value

        logger.info("Batch %s of %d edit requests by %s", action.value, len(ids), reviewer_id)
        return OperationResult.ok(processed=results)

    def _apply(
        self,
        tx: TransactionScope,
        req: EditRequest,
        action: ReviewAction,
        *,
        reviewer_id: int,
    ) -> RequestStatus:
        if action is ReviewAction.REVERT:
            if req.status == RequestStatus.PENDING:
                return RequestStatus.PENDING
            self._revert(tx, req)
            return RequestStatus.PENDING

        target = _TERMINAL[action]
        if req.status == target:
            return target
        if req.status != RequestStatus.PENDING:
            raise ConflictError(f"Edit request {req.request_id} already processed")

        if action is ReviewAction.APPROVE:
            self._approve(tx, req, reviewer_id=reviewer_id)
        else:
            tx.edit_requests.set_status(
                request_id=req.request_id,
                status=RequestStatus.REJECTED,
                reviewed_by=reviewer_id,
                reviewed_at=self._clock(),
            )
            logger.info("Edit request %s rejected by %s", req.request_id, reviewer_id)
        return target

    def _approve(self, tx: TransactionScope, req: EditRequest, *, reviewer_id: int) -> None:
        logs = []
        for log_id in req.affected_log_ids:
            log = tx.time_logs.get(log_id, for_update=True)
            if not log:
                raise NotFoundError(f"Time log {log_id} not found")
            logs.append(log)
        logs.sort(key=lambda l: (l.time_in, l.log_id))

        new_in = req.requested_time_in or logs[0].time_in
        new_out = req.requested_time_out or logs[-1].time_out
        require_chronological(new_in, new_out)

        if new_out is None:
            if len(logs) != 1:
                raise ValidationError("A continuous session edit needs a time out")
            log = logs[0]
            tx.time_logs.rewrite(
                log_id=log.log_id,
                time_in=new_in,
                time_out=None,
                log_type=log.log_type,
                status=log.status,
                overtime_status=log.overtime_status,
            )
            created: list[int] = []
        else:
            first_type = logs[0].log_type
            if req.metadata.is_continuous_session or exceeds_cap(new_in, new_out, first_type, self._policy):
                plan = plan_tier_split(new_in, new_out, policy=self._policy, start_type=first_type)
            else:
                plan = [PlannedSegment(log_type=first_type, time_in=new_in, time_out=new_out)]
            created = self._write_plan(tx, logs, plan)

        tx.edit_requests.update_metadata(request_id=req.request_id, metadata=req.metadata.with_created(created))
        tx.edit_requests.set_status(
            request_id=req.request_id,
            status=RequestStatus.APPROVED,
            reviewed_by=reviewer_id,
            reviewed_at=self._clock(),
        )
        logger.info("Edit request %s approved by %s (%d logs created)", req.request_id, reviewer_id, len(created))

    @staticmethod
    def _write_plan(tx: TransactionScope, logs: list[TimeLog], plan: list[PlannedSegment]) -> list[int]:
        """Lay planned segments over existing logs in order; insert extras, delete leftovers."""
        created: list[int] = []
        user_id = logs[0].user_id
        for i, seg in enumerate(plan):
            if i < len(logs):
                log = logs[i]
                if seg.log_type.is_overtime:
                    ot_status = log.overtime_status if log.log_type.is_overtime else None
                    ot_status = ot_status or OvertimeStatus.PENDING
                else:
                    ot_status = None
                tx.time_logs.rewrite(
                    log_id=log.log_id,
                    time_in=seg.time_in,
                    time_out=seg.time_out,
                    log_type=seg.log_type,
                    status=LogStatus.COMPLETED,
                    overtime_status=ot_status,
                )
            else:
                created.append(
                    tx.time_logs.insert(
                        user_id=user_id,
                        time_in=seg.time_in,
                        time_out=seg.time_out,
                        log_type=seg.log_type,
                        status=LogStatus.COMPLETED,
                        overtime_status=OvertimeStatus.PENDING if seg.log_type.is_overtime else None,
                    )
                )
        for log in logs[len(plan):]:
            tx.time_logs.delete(log.log_id)
        return created

    def _revert(self, tx: TransactionScope, req: EditRequest) -> None:
        if req.status == RequestStatus.APPROVED:
            for log_id in req.metadata.created_log_ids:
                tx.time_logs.delete(log_id)
            for snap in req.metadata.original_segments:
                self._restore(tx, snap)

        tx.edit_requests.update_metadata(request_id=req.request_id, metadata=req.metadata.with_created(()))
        tx.edit_requests.set_status(
            request_id=req.request_id,
            status=RequestStatus.PENDING,
            reviewed_by=None,
            reviewed_at=None,
        )
        logger.info("Edit request %s reverted from %s", req.request_id, req.status.value)

    @staticmethod
    def _restore(tx: TransactionScope, snap: LogSnapshot) -> None:
        if tx.time_logs.get(snap.log_id, for_update=True):
            tx.time_logs.rewrite(
                log_id=snap.log_id,
                time_in=snap.time_in,
                time_out=snap.time_out,
                log_type=snap.log_type,
                status=snap.status,
                overtime_status=snap.overtime_status,
            )
            return
        tx.time_logs.insert(
            user_id=snap.user_id,
            time_in=snap.time_in,
            time_out=snap.time_out,
            log_type=snap.log_type,
            status=snap.status,
            overtime_status=snap.overtime_status,
            log_id=snap.log_id,
        )

    # ---- listing ----

    def list_pending(self, *, limit: int = 200) -> OperationResult:
        return guarded(logger, "list pending edit requests", lambda: self._list(status=RequestStatus.PENDING, limit=limit))

    def list_for_user(self, user_id: int, *, limit: int = 200) -> OperationResult:
        return guarded(
            logger,
            "list edit requests",
            lambda: self._list(user_id=require_positive_id(user_id, "user_id"), limit=limit),
        )

    def _list(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> OperationResult:
        with self._uow.transaction() as tx:
            requests = list(tx.edit_requests.list_requests(status=status, user_id=user_id, limit=int(limit)))
        return OperationResult.ok(requests=requests)
