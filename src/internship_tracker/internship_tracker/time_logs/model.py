from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..core.enums import LogStatus, LogType, OvertimeStatus


@dataclass(frozen=True)
class TimeLog:
    """Domain entity: one clock-in/clock-out record."""

    log_id: int
    user_id: int
    time_in: datetime
    time_out: Optional[datetime]
    log_type: LogType = LogType.REGULAR
    status: LogStatus = LogStatus.COMPLETED
    overtime_status: Optional[OvertimeStatus] = None
    notes: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.time_out is None

    def with_span(self, time_in: datetime, time_out: Optional[datetime]) -> "TimeLog":
        return replace(self, time_in=time_in, time_out=time_out)


@dataclass(frozen=True)
class LogSnapshot:
    """Stored state of a log captured before an edit, used to revert exactly."""

    log_id: int
    user_id: int
    time_in: datetime
    time_out: Optional[datetime]
    log_type: LogType
    status: LogStatus
    overtime_status: Optional[OvertimeStatus] = None

    @classmethod
    def of(cls, log: TimeLog) -> "LogSnapshot":
        return cls(
            log_id=log.log_id,
            user_id=log.user_id,
            time_in=log.time_in,
            time_out=log.time_out,
            log_type=log.log_type,
            status=log.status,
            overtime_status=log.overtime_status,
        )

    def to_dict(self) -> dict:
        return {
            "log_id": self.log_id,
            "user_id": self.user_id,
            "time_in": self.time_in.isoformat(),
            "time_out": self.time_out.isoformat() if self.time_out else None,
            "log_type": self.log_type.value,
            "status": self.status.value,
            "overtime_status": self.overtime_status.value if self.overtime_status else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LogSnapshot":
        return cls(
            log_id=int(data["log_id"]),
            user_id=int(data["user_id"]),
            time_in=datetime.fromisoformat(data["time_in"]),
            time_out=datetime.fromisoformat(data["time_out"]) if data.get("time_out") else None,
            log_type=LogType(data["log_type"]),
            status=LogStatus(data["status"]),
            overtime_status=OvertimeStatus(data["overtime_status"]) if data.get("overtime_status") else None,
        )
