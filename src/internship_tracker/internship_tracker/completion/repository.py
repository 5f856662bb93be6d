from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import ProgramStatus, RequestStatus
from .model import CompletionRequest, InternshipProgram


class CompletionRepository(Protocol):
    def get_program_for_user(self, user_id: int) -> Optional[InternshipProgram]:
        raise NotImplementedError

    def set_program_status(self, *, program_id: int, status: ProgramStatus) -> bool:
        raise NotImplementedError

    def find_requests(
        self,
        *,
        user_id: int,
        statuses: Sequence[RequestStatus],
    ) -> Sequence[CompletionRequest]:
        raise NotImplementedError

    def get_request(self, request_id: int) -> Optional[CompletionRequest]:
        raise NotImplementedError

    def list_requests(self, *, status: Optional[RequestStatus] = None, limit: int = 500) -> Sequence[CompletionRequest]:
        raise NotImplementedError

    def create_request(self, *, user_id: int, program_id: int, total_hours_completed: Decimal) -> int:
        raise NotImplementedError

    def decide_request(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        admin_notes: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError
