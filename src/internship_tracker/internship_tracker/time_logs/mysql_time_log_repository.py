from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import LogStatus, LogType, OvertimeStatus
from ..database.mysql_base import fetchall, fetchone, for_update_clause
from .model import TimeLog
from .repository import TimeLogRepository

_COLUMNS = """
    id, user_id, time_in, time_out, log_type, status, overtime_status,
    notes, approved_by, approved_at, created_at
"""


def _row_to_log(r: dict) -> TimeLog:
    return TimeLog(
        log_id=int(r["id"]),
        user_id=int(r["user_id"]),
        time_in=r["time_in"],
        time_out=r.get("time_out"),
        log_type=LogType(r.get("log_type") or LogType.REGULAR.value),
        status=LogStatus(r["status"]),
        overtime_status=OvertimeStatus(r["overtime_status"]) if r.get("overtime_status") else None,
        notes=r.get("notes"),
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
        created_at=r.get("created_at"),
    )


class MySQLTimeLogRepository(TimeLogRepository):
    """Time log queries on a cursor owned by the current unit of work."""

    def __init__(self, cur):
        self._cur = cur

    def get(self, log_id: int, *, for_update: bool = False) -> Optional[TimeLog]:
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM time_logs WHERE id=%s" + for_update_clause(for_update),
            (int(log_id),),
        )
        r = fetchone(self._cur)
        return _row_to_log(r) if r else None

    def list_for_user(
        self,
        user_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[TimeLog]:
        clauses = ["user_id=%s"]
        params: list[object] = [int(user_id)]

        if start is not None:
            clauses.append("time_in >= %s")
            params.append(start)
        if end is not None:
            clauses.append("time_in < %s")
            params.append(end)

        where = " AND ".join(clauses)
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM time_logs
            WHERE {where}
            ORDER BY time_in ASC, id ASC
            """,
            tuple(params),
        )
        return [_row_to_log(r) for r in fetchall(self._cur)]

    def list_completed(self, *, user_id: Optional[int] = None) -> Sequence[TimeLog]:
        clauses = ["status=%s", "time_in IS NOT NULL", "time_out IS NOT NULL"]
        params: list[object] = [LogStatus.COMPLETED.value]

        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))

        where = " AND ".join(clauses)
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM time_logs
            WHERE {where}
            ORDER BY created_at ASC, id ASC
            """,
            tuple(params),
        )
        return [_row_to_log(r) for r in fetchall(self._cur)]

    def list_open(self, user_id: int, *, for_update: bool = False) -> Sequence[TimeLog]:
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM time_logs
            WHERE user_id=%s AND time_out IS NULL
            ORDER BY time_in DESC
            """
            + for_update_clause(for_update),
            (int(user_id),),
        )
        return [_row_to_log(r) for r in fetchall(self._cur)]

    def list_overtime(self, *, status: Optional[OvertimeStatus] = None, limit: int = 500) -> Sequence[TimeLog]:
        clauses = ["log_type IN (%s, %s)"]
        params: list[object] = [LogType.OVERTIME.value, LogType.EXTENDED_OVERTIME.value]

        if status is not None:
            clauses.append("overtime_status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM time_logs
            WHERE {where}
            ORDER BY time_in DESC
            LIMIT %s
            """,
            tuple(params + [int(limit)]),
        )
        return [_row_to_log(r) for r in fetchall(self._cur)]

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
        self._cur.execute(
            """
            INSERT INTO time_logs(id, user_id, time_in, time_out, log_type, status, overtime_status, notes)
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(log_id) if log_id is not None else None,
                int(user_id),
                time_in,
                time_out,
                log_type.value,
                status.value,
                overtime_status.value if overtime_status else None,
                notes,
            ),
        )
        return int(log_id) if log_id is not None else int(self._cur.lastrowid)

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
        self._cur.execute(
            """
            UPDATE time_logs
            SET time_in=%s, time_out=%s, log_type=%s, status=%s, overtime_status=%s
            WHERE id=%s
            """,
            (
                time_in,
                time_out,
                log_type.value,
                status.value,
                overtime_status.value if overtime_status else None,
                int(log_id),
            ),
        )
        return self._cur.rowcount > 0

    def set_overtime_status(
        self,
        *,
        log_id: int,
        overtime_status: OvertimeStatus,
        decided_by: Optional[int],
        decided_at: Optional[datetime],
    ) -> bool:
        self._cur.execute(
            """
            UPDATE time_logs
            SET overtime_status=%s, approved_by=%s, approved_at=%s
            WHERE id=%s AND log_type IN (%s, %s)
            """,
            (
                overtime_status.value,
                decided_by,
                decided_at,
                int(log_id),
                LogType.OVERTIME.value,
                LogType.EXTENDED_OVERTIME.value,
            ),
        )
        return self._cur.rowcount > 0

    def delete(self, log_id: int) -> bool:
        self._cur.execute("DELETE FROM time_logs WHERE id=%s", (int(log_id),))
        return self._cur.rowcount > 0
