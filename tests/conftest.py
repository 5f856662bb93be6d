from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytest

from src.internship_tracker.internship_tracker.completion.model import CompletionRequest, InternshipProgram
from src.internship_tracker.internship_tracker.core.enums import (
    LogStatus,
    LogType,
    OvertimeStatus,
    ProgramStatus,
    RequestStatus,
)
from src.internship_tracker.internship_tracker.core.policy import OvertimePolicy
from src.internship_tracker.internship_tracker.database.unit_of_work import TransactionScope
from src.internship_tracker.internship_tracker.edit_requests.model import EditRequest
from src.internship_tracker.internship_tracker.time_logs.model import TimeLog

CREATED_AT = datetime(2026, 3, 1, 12, 0)


@dataclass
class Store:
    logs: dict[int, TimeLog] = field(default_factory=dict)
    edit_requests: dict[int, EditRequest] = field(default_factory=dict)
    programs: dict[int, InternshipProgram] = field(default_factory=dict)
    completion_requests: dict[int, CompletionRequest] = field(default_factory=dict)
    next_log_id: int = 1
    next_request_id: int = 1
    next_completion_id: int = 1


class InMemoryTimeLogs:
    def __init__(self, store: Store):
        self._s = store

    def get(self, log_id, *, for_update=False):
        return self._s.logs.get(int(log_id))

    def list_for_user(self, user_id, *, start=None, end=None):
        items = [
            l
            for l in self._s.logs.values()
            if l.user_id == int(user_id)
            and (start is None or l.time_in >= start)
            and (end is None or l.time_in < end)
        ]
        return sorted(items, key=lambda l: (l.time_in, l.log_id))

    def list_completed(self, *, user_id=None):
        items = [
            l
            for l in self._s.logs.values()
            if l.status == LogStatus.COMPLETED and l.time_out is not None and (user_id is None or l.user_id == user_id)
        ]
        return sorted(items, key=lambda l: l.log_id)

    def list_open(self, user_id, *, for_update=False):
        items = [l for l in self._s.logs.values() if l.user_id == int(user_id) and l.time_out is None]
        return sorted(items, key=lambda l: l.time_in, reverse=True)

    def list_overtime(self, *, status=None, limit=500):
        items = [
            l
            for l in self._s.logs.values()
            if l.log_type.is_overtime and (status is None or l.overtime_status == status)
        ]
        return sorted(items, key=lambda l: l.time_in, reverse=True)[:limit]

    def insert(self, *, user_id, time_in, time_out, log_type, status, overtime_status=None, notes=None, log_id=None):
        if log_id is None:
            log_id = self._s.next_log_id
        log_id = int(log_id)
        if log_id in self._s.logs:
            raise RuntimeError(f"duplicate log id {log_id}")
        self._s.next_log_id = max(self._s.next_log_id, log_id + 1)
        self._s.logs[log_id] = TimeLog(
            log_id=log_id,
            user_id=int(user_id),
            time_in=time_in,
            time_out=time_out,
            log_type=log_type,
            status=status,
            overtime_status=overtime_status,
            notes=notes,
            created_at=CREATED_AT,
        )
        return log_id

    def rewrite(self, *, log_id, time_in, time_out, log_type, status, overtime_status):
        log = self._s.logs.get(int(log_id))
        if not log:
            return False
        self._s.logs[log.log_id] = replace(
            log,
            time_in=time_in,
            time_out=time_out,
            log_type=log_type,
            status=status,
            overtime_status=overtime_status,
        )
        return True

    def set_overtime_status(self, *, log_id, overtime_status, decided_by, decided_at):
        log = self._s.logs.get(int(log_id))
        if not log or not log.log_type.is_overtime:
            return False
        self._s.logs[log.log_id] = replace(
            log,
            overtime_status=overtime_status,
            approved_by=decided_by,
            approved_at=decided_at,
        )
        return True

    def delete(self, log_id):
        return self._s.logs.pop(int(log_id), None) is not None


class InMemoryEditRequests:
    def __init__(self, store: Store):
        self._s = store

    def create(
        self,
        *,
        log_id,
        requested_by,
        requested_time_in,
        requested_time_out,
        original_time_in,
        original_time_out,
        metadata,
    ):
        rid = self._s.next_request_id
        self._s.next_request_id += 1
        self._s.edit_requests[rid] = EditRequest(
            request_id=rid,
            log_id=int(log_id),
            requested_by=int(requested_by),
            requested_time_in=requested_time_in,
            requested_time_out=requested_time_out,
            original_time_in=original_time_in,
            original_time_out=original_time_out,
            status=RequestStatus.PENDING,
            created_at=CREATED_AT,
            metadata=metadata,
        )
        return rid

    def get(self, request_id, *, for_update=False):
        return self._s.edit_requests.get(int(request_id))

    def list_requests(self, *, status=None, user_id=None, limit=200):
        items = []
        for req in self._s.edit_requests.values():
            if status is not None and req.status != status:
                continue
            owner = self._s.logs.get(req.log_id)
            if owner is None:
                continue
            if user_id is not None and owner.user_id != int(user_id):
                continue
            items.append(req)
        return sorted(items, key=lambda r: r.request_id, reverse=True)[:limit]

    def set_status(self, *, request_id, status, reviewed_by, reviewed_at):
        req = self._s.edit_requests.get(int(request_id))
        if not req:
            return False
        self._s.edit_requests[req.request_id] = replace(
            req,
            status=status,
            reviewed_by=reviewed_by,
            reviewed_at=reviewed_at,
        )
        return True

    def update_metadata(self, *, request_id, metadata):
        req = self._s.edit_requests.get(int(request_id))
        if not req:
            return False
        self._s.edit_requests[req.request_id] = replace(req, metadata=metadata)
        return True


class InMemoryCompletion:
    def __init__(self, store: Store):
        self._s = store

    def get_program_for_user(self, user_id):
        items = [p for p in self._s.programs.values() if p.user_id == int(user_id)]
        return max(items, key=lambda p: p.program_id) if items else None

    def set_program_status(self, *, program_id, status):
        program = self._s.programs.get(int(program_id))
        if not program:
            return False
        self._s.programs[program.program_id] = replace(program, status=status)
        return True

    def find_requests(self, *, user_id, statuses):
        return [r for r in self._s.completion_requests.values() if r.user_id == int(user_id) and r.status in statuses]

    def get_request(self, request_id):
        return self._s.completion_requests.get(int(request_id))

    def list_requests(self, *, status=None, limit=500):
        items = [r for r in self._s.completion_requests.values() if status is None or r.status == status]
        return items[:limit]

    def create_request(self, *, user_id, program_id, total_hours_completed):
        rid = self._s.next_completion_id
        self._s.next_completion_id += 1
        self._s.completion_requests[rid] = CompletionRequest(
            request_id=rid,
            user_id=int(user_id),
            program_id=int(program_id),
            total_hours_completed=total_hours_completed,
            status=RequestStatus.PENDING,
            created_at=CREATED_AT,
        )
        return rid

    def decide_request(self, *, request_id, status, reviewed_by, reviewed_at, admin_notes=None):
        req = self._s.completion_requests.get(int(request_id))
        if not req or req.status != RequestStatus.PENDING:
            return False
        self._s.completion_requests[req.request_id] = replace(
            req,
            status=status,
            reviewed_by=reviewed_by,
            reviewed_at=reviewed_at,
            admin_notes=admin_notes,
        )
        return True


class InMemoryUnitOfWork:
    """Works on a copy of the store and swaps it in only when the block succeeds."""

    def __init__(self):
        self.store = Store()
        self.commits = 0
        self.rollbacks = 0

    def scope(self, store: Store) -> TransactionScope:
        return TransactionScope(
            time_logs=InMemoryTimeLogs(store),
            edit_requests=InMemoryEditRequests(store),
            completion=InMemoryCompletion(store),
        )

    @contextmanager
    def transaction(self):
        work = copy.deepcopy(self.store)
        try:
            yield self.scope(work)
        except Exception:
            self.rollbacks += 1
            raise
        self.store = work
        self.commits += 1

    # ---- seeding helpers for tests ----

    def seed_log(
        self,
        time_in: datetime,
        time_out: Optional[datetime],
        *,
        user_id: int = 1,
        log_type: LogType = LogType.REGULAR,
        overtime_status: Optional[OvertimeStatus] = None,
    ) -> int:
        if overtime_status is None and log_type.is_overtime:
            overtime_status = OvertimeStatus.PENDING
        return InMemoryTimeLogs(self.store).insert(
            user_id=user_id,
            time_in=time_in,
            time_out=time_out,
            log_type=log_type,
            status=LogStatus.COMPLETED if time_out else LogStatus.PENDING,
            overtime_status=overtime_status,
        )

    def seed_program(self, *, user_id: int = 1, required_hours="600") -> int:
        pid = len(self.store.programs) + 1
        self.store.programs[pid] = InternshipProgram(
            program_id=pid,
            user_id=user_id,
            required_hours=Decimal(str(required_hours)),
            status=ProgramStatus.ACTIVE,
            start_date=date(2026, 1, 5),
        )
        return pid

    def logs(self, user_id: Optional[int] = None) -> list[TimeLog]:
        items = [l for l in self.store.logs.values() if user_id is None or l.user_id == user_id]
        return sorted(items, key=lambda l: (l.time_in, l.log_id))


@pytest.fixture()
def uow():
    return InMemoryUnitOfWork()


@pytest.fixture()
def policy():
    return OvertimePolicy()


@pytest.fixture()
def fixed_now():
    return datetime(2026, 3, 2, 18, 0, 0)


@pytest.fixture()
def make_log():
    counter = {"next": 100}

    def _make(
        time_in: datetime,
        time_out: Optional[datetime],
        log_type: LogType = LogType.REGULAR,
        *,
        overtime_status: Optional[OvertimeStatus] = None,
        user_id: int = 1,
        log_id: Optional[int] = None,
    ) -> TimeLog:
        if log_id is None:
            log_id = counter["next"]
            counter["next"] += 1
        if overtime_status is None and log_type.is_overtime:
            overtime_status = OvertimeStatus.PENDING
        return TimeLog(
            log_id=log_id,
            user_id=user_id,
            time_in=time_in,
            time_out=time_out,
            log_type=log_type,
            status=LogStatus.COMPLETED if time_out else LogStatus.PENDING,
            overtime_status=overtime_status,
        )

    return _make
