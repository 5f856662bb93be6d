from __future__ import annotations

from dataclasses import dataclass

from .completion.migration import LongLogMigration
from .completion.service import CompletionService
from .core.policy import OvertimePolicy
from .database.connection import DBConfig, DatabaseConnection
from .database.unit_of_work import MySQLUnitOfWork, UnitOfWork
from .edit_requests.service import EditRequestService
from .time_logs.service import TimeLogService


@dataclass(frozen=True)
class Container:
    policy: OvertimePolicy
    uow: UnitOfWork

    time_log_service: TimeLogService
    edit_request_service: EditRequestService
    completion_service: CompletionService
    migration: LongLogMigration


def build_services(*, uow: UnitOfWork, policy: OvertimePolicy) -> Container:
    return Container(
        policy=policy,
        uow=uow,
        time_log_service=TimeLogService(uow, policy),
        edit_request_service=EditRequestService(uow, policy),
        completion_service=CompletionService(uow, policy),
        migration=LongLogMigration(uow, policy),
    )


def build_container(*, db_config: dict, policy: OvertimePolicy) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(uow=MySQLUnitOfWork(conn), policy=policy)
