from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import EditRequest, EditRequestMetadata


class EditRequestRepository(Protocol):
    def create(
        self,
        *,
        log_id: int,
        requested_by: int,
        requested_time_in: Optional[datetime],
        requested_time_out: Optional[datetime],
        original_time_in: datetime,
        original_time_out: Optional[datetime],
        metadata: EditRequestMetadata,
    ) -> int:
        raise NotImplementedError

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[EditRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[EditRequest]:
        """``user_id`` filters on the owner of the edited log."""

        raise NotImplementedError

    def set_status(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: Optional[int],
        reviewed_at: Optional[datetime],
    ) -> bool:
        raise NotImplementedError

    def update_metadata(self, *, request_id: int, metadata: EditRequestMetadata) -> bool:
        raise NotImplementedError
