from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from ..core.enums import RequestStatus
from ..time_logs.model import LogSnapshot


@dataclass(frozen=True)
class EditRequestMetadata:
    """Extra state stored with a request (JSON column).

    ``original_segments`` snapshots every affected log at submission time;
    ``created_log_ids`` lists logs inserted by the latest approval.
    """

    is_continuous_session: bool = False
    log_ids: tuple[int, ...] = ()
    original_segments: tuple[LogSnapshot, ...] = ()
    created_log_ids: tuple[int, ...] = ()

    @property
    def group_key(self) -> Optional[str]:
        if not self.is_continuous_session or not self.log_ids:
            return None
        return "session-" + "-".join(str(i) for i in sorted(self.log_ids))

    def with_created(self, created_log_ids) -> "EditRequestMetadata":
        return replace(self, created_log_ids=tuple(int(i) for i in created_log_ids))

    def to_dict(self) -> dict:
        return {
            "isContinuousSession": self.is_continuous_session,
            "logIds": list(self.log_ids),
            "originalSegments": [s.to_dict() for s in self.original_segments],
            "createdLogIds": list(self.created_log_ids),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "EditRequestMetadata":
        if not data:
            return cls()
        return cls(
            is_continuous_session=bool(data.get("isContinuousSession")),
            log_ids=tuple(int(i) for i in data.get("logIds") or ()),
            original_segments=tuple(LogSnapshot.from_dict(s) for s in data.get("originalSegments") or ()),
            created_log_ids=tuple(int(i) for i in data.get("createdLogIds") or ()),
        )


@dataclass(frozen=True)
class EditRequest:
    request_id: int
    log_id: int
    requested_by: int
    requested_time_in: Optional[datetime]
    requested_time_out: Optional[datetime]
    original_time_in: datetime
    original_time_out: Optional[datetime]
    status: RequestStatus
    created_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    metadata: EditRequestMetadata = field(default_factory=EditRequestMetadata)

    @property
    def affected_log_ids(self) -> tuple[int, ...]:
        return self.metadata.log_ids or (self.log_id,)
