from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import RequestStatus
from ..database.mysql_base import dump_json, fetchall, fetchone, for_update_clause, load_json
from .model import EditRequest, EditRequestMetadata
from .repository import EditRequestRepository

_COLUMNS = """
    r.id, r.log_id, r.requested_by, r.requested_time_in, r.requested_time_out,
    r.original_time_in, r.original_time_out, r.status, r.created_at,
    r.reviewed_by, r.reviewed_at, r.metadata
"""


def _row_to_request(r: dict) -> EditRequest:
    return EditRequest(
        request_id=int(r["id"]),
        log_id=int(r["log_id"]),
        requested_by=int(r["requested_by"]),
        requested_time_in=r.get("requested_time_in"),
        requested_time_out=r.get("requested_time_out"),
        original_time_in=r["original_time_in"],
        original_time_out=r.get("original_time_out"),
        status=RequestStatus(r["status"]),
        created_at=r.get("created_at"),
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        metadata=EditRequestMetadata.from_dict(load_json(r.get("metadata"))),
    )


class MySQLEditRequestRepository(EditRequestRepository):
    def __init__(self, cur):
        self._cur = cur

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
        self._cur.execute(
            """
            INSERT INTO time_log_edit_requests(
                log_id, requested_by, requested_time_in, requested_time_out,
                original_time_in, original_time_out, status, metadata
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(log_id),
                int(requested_by),
                requested_time_in,
                requested_time_out,
                original_time_in,
                original_time_out,
                RequestStatus.PENDING.value,
                dump_json(metadata.to_dict()),
            ),
        )
        return int(self._cur.lastrowid)

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[EditRequest]:
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM time_log_edit_requests r WHERE r.id=%s" + for_update_clause(for_update),
            (int(request_id),),
        )
        r = fetchone(self._cur)
        return _row_to_request(r) if r else None

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[EditRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("r.status=%s")
            params.append(status.value)
        if user_id is not None:
            clauses.append("l.user_id=%s")
            params.append(int(user_id))

        where = " AND ".join(clauses)
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM time_log_edit_requests r
            JOIN time_logs l ON l.id = r.log_id
            WHERE {where}
            ORDER BY r.created_at DESC
            LIMIT %s
            """,
            tuple(params + [int(limit)]),
        )
        return [_row_to_request(r) for r in fetchall(self._cur)]

    def set_status(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: Optional[int],
        reviewed_at: Optional[datetime],
    ) -> bool:
        self._cur.execute(
            """
            UPDATE time_log_edit_requests
            SET status=%s, reviewed_by=%s, reviewed_at=%s
            WHERE id=%s
            """,
            (status.value, reviewed_by, reviewed_at, int(request_id)),
        )
        return self._cur.rowcount > 0

    def update_metadata(self, *, request_id: int, metadata: EditRequestMetadata) -> bool:
        self._cur.execute(
            "UPDATE time_log_edit_requests SET metadata=%s WHERE id=%s",
            (dump_json(metadata.to_dict()), int(request_id)),
        )
        return self._cur.rowcount > 0
