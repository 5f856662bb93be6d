from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import ProgramStatus, RequestStatus


@dataclass(frozen=True)
class InternshipProgram:
    program_id: int
    user_id: int
    required_hours: Decimal
    status: ProgramStatus
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class CompletionRequest:
    request_id: int
    user_id: int
    program_id: int
    total_hours_completed: Decimal
    status: RequestStatus
    created_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    admin_notes: Optional[str] = None


@dataclass(frozen=True)
class EligibilityVerdict:
    eligible: bool
    progress_hours: Decimal
    required_hours: Decimal
    remaining_hours: Decimal
    reason: Optional[str] = None


@dataclass(frozen=True)
class MigrationReport:
    success: bool
    processed: int
    errors: tuple[str, ...] = ()
