from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import ContextManager, Iterator, Protocol

from ..completion.mysql_completion_repository import MySQLCompletionRepository
from ..completion.repository import CompletionRepository
from ..edit_requests.mysql_edit_request_repository import MySQLEditRequestRepository
from ..edit_requests.repository import EditRequestRepository
from ..time_logs.mysql_time_log_repository import MySQLTimeLogRepository
from ..time_logs.repository import TimeLogRepository
from .connection import DatabaseConnection
from .mysql_base import db_cursor


@dataclass(frozen=True)
class TransactionScope:
    """Repositories bound to one open transaction."""

    time_logs: TimeLogRepository
    edit_requests: EditRequestRepository
    completion: CompletionRepository


class UnitOfWork(Protocol):
    def transaction(self) -> ContextManager[TransactionScope]:
        """Everything done through the yielded scope commits together or not at all."""

        raise NotImplementedError


class MySQLUnitOfWork(UnitOfWork):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[TransactionScope]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield TransactionScope(
                time_logs=MySQLTimeLogRepository(cur),
                edit_requests=MySQLEditRequestRepository(cur),
                completion=MySQLCompletionRepository(cur),
            )
