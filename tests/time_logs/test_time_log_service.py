from __future__ import annotations

from datetime import date, datetime

import pytest

from src.internship_tracker.internship_tracker.core.enums import LogStatus, LogType, OvertimeStatus, Role
from src.internship_tracker.internship_tracker.time_logs.service import TimeLogService

DECIDED_AT = datetime(2026, 3, 3, 9, 0)


def _dt(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(2026, 3, 2, hour, minute, second)


@pytest.fixture()
def service(uow, policy):
    return TimeLogService(uow, policy, clock=lambda: DECIDED_AT)


def test_clock_in_opens_a_regular_log_floored_to_the_minute(uow, service):
    result = service.clock_in(1, now=_dt(8, 0, 42))

    assert result.success
    log = uow.store.logs[result.data["log_id"]]
    assert log.time_in == _dt(8)
    assert log.time_out is None
    assert log.status is LogStatus.PENDING
    assert log.log_type is LogType.REGULAR
    assert log.overtime_status is None


def test_second_open_log_of_same_tier_is_rejected(uow, service):
    service.clock_in(1, now=_dt(8))

    result = service.clock_in(1, now=_dt(9))

    assert result.error_kind == "conflict"
    assert len(uow.logs()) == 1


def test_clock_in_after_full_day_opens_overtime(uow, service):
    uow.seed_log(_dt(8), _dt(17))

    result = service.clock_in(1, now=_dt(18))

    assert result.data["log_type"] == "overtime"
    log = uow.store.logs[result.data["log_id"]]
    assert log.overtime_status is OvertimeStatus.PENDING


def test_clock_in_after_regular_and_overtime_opens_extended(uow, service):
    uow.seed_log(_dt(6), _dt(15))
    uow.seed_log(_dt(15), _dt(18), log_type=LogType.OVERTIME)

    result = service.clock_in(1, now=_dt(19))

    assert result.data["log_type"] == "extended_overtime"


def test_clock_out_closes_the_open_log(uow, service):
    log_id = service.clock_in(1, now=_dt(8)).data["log_id"]

    result = service.clock_out(1, now=_dt(16, 30, 15))

    assert result.success
    log = uow.store.logs[log_id]
    assert log.time_out == _dt(16, 30)
    assert log.status is LogStatus.COMPLETED
    assert result.data["created_log_ids"] == []


def test_clock_out_past_cap_splits_off_overtime(uow, service):
    log_id = service.clock_in(1, now=_dt(8)).data["log_id"]

    result = service.clock_out(1, now=_dt(19), overtime_note="release night")

    reg, ot = uow.logs()
    assert (reg.log_id, reg.time_out, reg.status) == (log_id, _dt(17), LogStatus.COMPLETED)
    assert (ot.log_type, ot.time_in, ot.time_out) == (LogType.OVERTIME, _dt(17), _dt(19))
    assert ot.overtime_status is OvertimeStatus.PENDING
    assert ot.notes == "release night"
    assert result.data["created_log_ids"] == [ot.log_id]


def test_clock_out_discarding_overtime_cuts_at_cap(uow, service):
    log_id = service.clock_in(1, now=_dt(8)).data["log_id"]

    service.clock_out(1, now=_dt(19), discard_overtime=True)

    (log,) = uow.logs()
    assert (log.log_id, log.time_out) == (log_id, _dt(17))


def test_discarding_overtime_removes_the_days_overtime_logs(uow, service):
    earlier_ot = uow.seed_log(_dt(6), _dt(7), log_type=LogType.OVERTIME)
    other_day = uow.seed_log(datetime(2026, 3, 1, 18, 0), datetime(2026, 3, 1, 20, 0), log_type=LogType.OVERTIME)
    log_id = service.clock_in(1, now=_dt(8)).data["log_id"]

    result = service.clock_out(1, now=_dt(15), discard_overtime=True)

    assert result.data["discarded_log_ids"] == [earlier_ot]
    assert earlier_ot not in uow.store.logs
    assert other_day in uow.store.logs
    assert uow.store.logs[log_id].time_out == _dt(15)


def test_discard_flag_is_ignored_for_overtime_logs(uow, service):
    uow.seed_log(_dt(8), _dt(17))
    ot_id = service.clock_in(1, now=_dt(17)).data["log_id"]

    result = service.clock_out(1, now=_dt(19), discard_overtime=True)

    assert result.data["discarded_log_ids"] == []
    log = uow.store.logs[ot_id]
    assert (log.log_type, log.time_out, log.status) == (LogType.OVERTIME, _dt(19), LogStatus.COMPLETED)


def test_clock_out_without_open_log(service):
    assert service.clock_out(1, now=_dt(17)).error_kind == "validation"


def test_decide_overtime(uow, service):
    ot = uow.seed_log(_dt(17), _dt(19), log_type=LogType.OVERTIME)

    result = service.decide_overtime(ot, "approved", 99)

    assert result.success
    log = uow.store.logs[ot]
    assert (log.overtime_status, log.approved_by, log.approved_at) == (OvertimeStatus.APPROVED, 99, DECIDED_AT)

    service.decide_overtime(ot, OvertimeStatus.PENDING, 99)
    log = uow.store.logs[ot]
    assert (log.overtime_status, log.approved_by, log.approved_at) == (OvertimeStatus.PENDING, None, None)


def test_decide_overtime_errors(uow, service):
    reg = uow.seed_log(_dt(8), _dt(17))
    ot = uow.seed_log(_dt(17), _dt(19), log_type=LogType.OVERTIME)

    assert service.decide_overtime(reg, "approved", 99).error_kind == "validation"
    assert service.decide_overtime(ot, "maybe", 99).error_kind == "validation"
    assert service.decide_overtime(404, "approved", 99).error_kind == "not_found"
    assert service.decide_overtime(ot, "approved", 1, current_role=Role.INTERN).error_kind == "authorization"


def test_today_logs_and_pending_overtime(uow, service):
    uow.seed_log(_dt(8), _dt(17))
    uow.seed_log(_dt(17), _dt(18), log_type=LogType.OVERTIME)
    uow.seed_log(datetime(2026, 3, 3, 8, 0), datetime(2026, 3, 3, 9, 0))

    today = service.today_logs(1, today=date(2026, 3, 2))
    pending = service.pending_overtime()

    assert len(today.data["logs"]) == 2
    assert [l.log_type for l in pending.data["logs"]] == [LogType.OVERTIME]
