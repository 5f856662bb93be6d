from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cur)`` inside one transaction: commit on success, rollback on error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        logger.debug("Rolling back transaction", exc_info=True)
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def load_json(value: Any) -> Optional[dict]:
    """Decode a JSON column; mysql-connector returns str, bytes or an already decoded value."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value) if value.strip() else None
    return value


def dump_json(value: Optional[dict]) -> Optional[str]:
    return json.dumps(value) if value is not None else None


def for_update_clause(for_update: bool) -> str:
    return " FOR UPDATE" if for_update else ""
