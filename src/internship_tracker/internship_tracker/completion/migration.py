from __future__ import annotations

import logging
from typing import Optional

from ..core.enums import LogStatus, OvertimeStatus
from ..core.exceptions import DomainError
from ..core.policy import OvertimePolicy
from ..database.unit_of_work import UnitOfWork
from ..sessions.splitting import exceeds_cap, plan_tier_split
from ..time_logs.model import TimeLog
from .model import MigrationReport

logger = logging.getLogger(__name__)


class LongLogMigration:
    """Splits completed logs that are longer than their tier cap.

    The head keeps the log id, time_in and type; every following piece is
    one tier higher (extended overtime stays extended) and ends on the
    original time_out. Each log is migrated in its own transaction, so a
    failing row is reported and the rest still go through. A second run
    finds nothing left to split.
    """

    def __init__(self, uow: UnitOfWork, policy: OvertimePolicy):
        self._uow = uow
        self._policy = policy

    def find_long_logs(self, user_id: Optional[int] = None) -> list[TimeLog]:
        with self._uow.transaction() as tx:
            logs = tx.time_logs.list_completed(user_id=user_id)
        return [l for l in logs if l.time_out is not None and exceeds_cap(l.time_in, l.time_out, l.log_type, self._policy)]

    def has_long_logs(self, user_id: Optional[int] = None) -> bool:
        return bool(self.find_long_logs(user_id))

    def migrate(self, user_id: Optional[int] = None) -> MigrationReport:
        try:
            candidates = self.find_long_logs(user_id)
        except Exception as e:
            logger.exception("Could not load logs for migration")
            return MigrationReport(success=False, processed=0, errors=(f"load failed: {e}",))

        processed = 0
        errors: list[str] = []
        for log in candidates:
            try:
                if self._migrate_one(log.log_id):
                    processed += 1
            except DomainError as e:
                logger.warning("Migration of log %s failed: %s", log.log_id, e)
                errors.append(f"log {log.log_id}: {e}")
            except Exception as e:
                logger.exception("Migration of log %s failed unexpectedly", log.log_id)
                errors.append(f"log {log.log_id}: {e}")

        logger.info("Long-log migration processed %d logs with %d errors", processed, len(errors))
        return MigrationReport(success=not errors, processed=processed, errors=tuple(errors))

    def _migrate_one(self, log_id: int) -> bool:
        with self._uow.transaction() as tx:
            log = tx.time_logs.get(log_id, for_update=True)
            # re-checked under lock; another run may have split it already
            if not log or log.time_out is None or not exceeds_cap(log.time_in, log.time_out, log.log_type, self._policy):
                return False

            plan = plan_tier_split(log.time_in, log.time_out, policy=self._policy, start_type=log.log_type)
            head, tail = plan[0], plan[1:]
            tx.time_logs.rewrite(
                log_id=log.log_id,
                time_in=head.time_in,
                time_out=head.time_out,
                log_type=log.log_type,
                status=LogStatus.COMPLETED,
                overtime_status=log.overtime_status,
            )
            for seg in tail:
                tx.time_logs.insert(
                    user_id=log.user_id,
                    time_in=seg.time_in,
                    time_out=seg.time_out,
                    log_type=seg.log_type,
                    status=LogStatus.COMPLETED,
                    overtime_status=OvertimeStatus.PENDING,
                    notes=log.notes,
                )
        logger.debug("Split log %s into %d pieces", log_id, len(plan))
        return True
