from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import ProgramStatus, RequestStatus
from ..database.mysql_base import fetchall, fetchone
from .model import CompletionRequest, InternshipProgram
from .repository import CompletionRepository


def _row_to_request(r: dict) -> CompletionRequest:
    return CompletionRequest(
        request_id=int(r["id"]),
        user_id=int(r["user_id"]),
        program_id=int(r["internship_program_id"]),
        total_hours_completed=Decimal(str(r["total_hours_completed"])),
        status=RequestStatus(r["status"]),
        created_at=r.get("created_at"),
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        admin_notes=r.get("admin_notes"),
    )


class MySQLCompletionRepository(CompletionRepository):
    def __init__(self, cur):
        self._cur = cur

    def get_program_for_user(self, user_id: int) -> Optional[InternshipProgram]:
        self._cur.execute(
            """
            SELECT id, user_id, required_hours, status, start_date, end_date
            FROM internship_programs
            WHERE user_id=%s
            ORDER BY created_at DESC
            LIMIT 1
            """,
            (int(user_id),),
        )
        r = fetchone(self._cur)
        if not r:
            return None
        return InternshipProgram(
            program_id=int(r["id"]),
            user_id=int(r["user_id"]),
            required_hours=Decimal(str(r["required_hours"])),
            status=ProgramStatus(r["status"]),
            start_date=r.get("start_date"),
            end_date=r.get("end_date"),
        )

    def set_program_status(self, *, program_id: int, status: ProgramStatus) -> bool:
        self._cur.execute(
            "UPDATE internship_programs SET status=%s WHERE id=%s",
            (status.value, int(program_id)),
        )
        return self._cur.rowcount > 0

    def find_requests(
        self,
        *,
        user_id: int,
        statuses: Sequence[RequestStatus],
    ) -> Sequence[CompletionRequest]:
        if not statuses:
            return []
        placeholders = ",".join(["%s"] * len(statuses))
        self._cur.execute(
            f"""
            SELECT id, user_id, internship_program_id, total_hours_completed, status,
                   created_at, reviewed_by, reviewed_at, admin_notes
            FROM internship_completion_requests
            WHERE user_id=%s AND status IN ({placeholders})
            ORDER BY created_at DESC
            """,
            tuple([int(user_id)] + [s.value for s in statuses]),
        )
        return [_row_to_request(r) for r in fetchall(self._cur)]

    def get_request(self, request_id: int) -> Optional[CompletionRequest]:
        self._cur.execute(
            """
            SELECT id, user_id, internship_program_id, total_hours_completed, status,
                   created_at, reviewed_by, reviewed_at, admin_notes
            FROM internship_completion_requests
            WHERE id=%s
            """,
            (int(request_id),),
        )
        r = fetchone(self._cur)
        return _row_to_request(r) if r else None

    def list_requests(self, *, status: Optional[RequestStatus] = None, limit: int = 500) -> Sequence[CompletionRequest]:
        clauses = ["1=1"]
        params: list[object] = []
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        self._cur.execute(
            f"""
            SELECT id, user_id, internship_program_id, total_hours_completed, status,
                   created_at, reviewed_by, reviewed_at, admin_notes
            FROM internship_completion_requests
            WHERE {where}
            ORDER BY created_at DESC
            LIMIT %s
            """,
            tuple(params + [int(limit)]),
        )
        return [_row_to_request(r) for r in fetchall(self._cur)]

    def create_request(self, *, user_id: int, program_id: int, total_hours_completed: Decimal) -> int:
        self._cur.execute(
            """
            INSERT INTO internship_completion_requests(
                user_id, internship_program_id, total_hours_completed, status
            )
            VALUES(%s,%s,%s,%s)
            """,
            (int(user_id), int(program_id), total_hours_completed, RequestStatus.PENDING.value),
        )
        return int(self._cur.lastrowid)

    def decide_request(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        admin_notes: Optional[str] = None,
    ) -> bool:
        self._cur.execute(
            """
            UPDATE internship_completion_requests
            SET status=%s, reviewed_by=%s, reviewed_at=%s, admin_notes=%s
            WHERE id=%s AND status=%s
            """,
            (status.value, int(reviewed_by), reviewed_at, admin_notes, int(request_id), RequestStatus.PENDING.value),
        )
        return self._cur.rowcount > 0
