from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LogStatus, LogType, OvertimeStatus
from .model import TimeLog


class TimeLogRepository(Protocol):
    def get(self, log_id: int, *, for_update: bool = False) -> Optional[TimeLog]:
        raise NotImplementedError

    def list_for_user(
        self,
        user_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[TimeLog]:
        """Logs ordered by time_in; ``start``/``end`` bound time_in as [start, end)."""

        raise NotImplementedError

    def list_completed(self, *, user_id: Optional[int] = None) -> Sequence[TimeLog]:
        raise NotImplementedError

    def list_open(self, user_id: int, *, for_update: bool = False) -> Sequence[TimeLog]:
        raise NotImplementedError

    def list_overtime(self, *, status: Optional[OvertimeStatus] = None, limit: int = 500) -> Sequence[TimeLog]:
        raise NotImplementedError

    def insert(
        self,
        *,
        user_id: int,
        time_in: datetime,
        time_out: Optional[datetime],
        log_type: LogType,
        status: LogStatus,
        overtime_status: Optional[OvertimeStatus] = None,
        notes: Optional[str] = None,
        log_id: Optional[int] = None,
    ) -> int:
        """Insert a log; ``log_id`` is only passed when restoring a deleted row."""

        raise NotImplementedError

    def rewrite(
        self,
        *,
        log_id: int,
        time_in: datetime,
        time_out: Optional[datetime],
        log_type: LogType,
        status: LogStatus,
        overtime_status: Optional[OvertimeStatus],
    ) -> bool:
        raise NotImplementedError

    def set_overtime_status(
        self,
        *,
        log_id: int,
        overtime_status: OvertimeStatus,
        decided_by: Optional[int],
        decided_at: Optional[datetime],
    ) -> bool:
        raise NotImplementedError

    def delete(self, log_id: int) -> bool:
        raise NotImplementedError
