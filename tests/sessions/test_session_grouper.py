from __future__ import annotations

from datetime import datetime, timedelta

from src.internship_tracker.internship_tracker.core.enums import LogType
from src.internship_tracker.internship_tracker.sessions.grouper import group_into_sessions, is_tier_continuation

TOL = timedelta(seconds=60)


def test_regular_followed_by_overtime_is_one_session(make_log):
    reg = make_log(datetime(2026, 3, 2, 8, 0), datetime(2026, 3, 2, 17, 0))
    ot = make_log(datetime(2026, 3, 2, 17, 0), datetime(2026, 3, 2, 19, 0), LogType.OVERTIME)

    sessions = group_into_sessions([ot, reg], tolerance=TOL)

    assert len(sessions) == 1
    s = sessions[0]
    assert s.log_ids == (reg.log_id, ot.log_id)
    assert s.is_continuous_session is True
    assert s.session_type is LogType.REGULAR
    assert s.time_in == reg.time_in
    assert s.time_out == ot.time_out
    assert s.is_active is False


def test_gap_within_tolerance_joins_and_larger_gap_splits(make_log):
    reg = make_log(datetime(2026, 3, 2, 8, 0), datetime(2026, 3, 2, 17, 0))
    near = make_log(datetime(2026, 3, 2, 17, 0, 30), datetime(2026, 3, 2, 18, 0), LogType.OVERTIME)
    assert len(group_into_sessions([reg, near], tolerance=TOL)) == 1

    far = make_log(datetime(2026, 3, 2, 17, 2), datetime(2026, 3, 2, 18, 0), LogType.OVERTIME)
    assert len(group_into_sessions([reg, far], tolerance=TOL)) == 2


def test_same_tier_neighbours_stay_separate(make_log):
    a = make_log(datetime(2026, 3, 2, 8, 0), datetime(2026, 3, 2, 12, 0))
    b = make_log(datetime(2026, 3, 2, 12, 0), datetime(2026, 3, 2, 16, 0))

    sessions = group_into_sessions([a, b], tolerance=TOL)

    assert [s.log_ids for s in sessions] == [(a.log_id,), (b.log_id,)]


def test_overlapping_logs_do_not_join(make_log):
    reg = make_log(datetime(2026, 3, 2, 8, 0), datetime(2026, 3, 2, 17, 0))
    ot = make_log(datetime(2026, 3, 2, 16, 0), datetime(2026, 3, 2, 18, 0), LogType.OVERTIME)

    assert len(group_into_sessions([reg, ot], tolerance=TOL)) == 2


def test_open_earlier_log_never_joins(make_log):
    reg = make_log(datetime(2026, 3, 2, 8, 0), None)
    ot = make_log(datetime(2026, 3, 2, 17, 0), datetime(2026, 3, 2, 18, 0), LogType.OVERTIME)

    assert len(group_into_sessions([reg, ot], tolerance=TOL)) == 2


def test_active_session_when_last_log_open(make_log):
    reg = make_log(datetime(2026, 3, 2, 8, 0), datetime(2026, 3, 2, 17, 0))
    ot = make_log(datetime(2026, 3, 2, 17, 0), None, LogType.OVERTIME)

    (s,) = group_into_sessions([reg, ot], tolerance=TOL)

    assert s.is_active is True
    assert s.time_out is None


def test_continuity_groups_join_logs_from_a_continuous_edit(make_log):
    a = make_log(datetime(2026, 3, 2, 8, 0), datetime(2026, 3, 2, 12, 0))
    b = make_log(datetime(2026, 3, 2, 12, 5), datetime(2026, 3, 2, 16, 0))
    groups = {a.log_id: "session-x", b.log_id: "session-x"}

    assert len(group_into_sessions([a, b], tolerance=TOL, continuity_groups=groups)) == 1
    assert len(group_into_sessions([a, b], tolerance=TOL)) == 2


def test_output_is_chronological(make_log):
    late = make_log(datetime(2026, 3, 3, 8, 0), datetime(2026, 3, 3, 12, 0))
    early = make_log(datetime(2026, 3, 2, 8, 0), datetime(2026, 3, 2, 12, 0))

    sessions = group_into_sessions([late, early])

    assert [s.time_in for s in sessions] == [early.time_in, late.time_in]


def test_tier_continuation_rules():
    assert is_tier_continuation(LogType.REGULAR, LogType.OVERTIME)
    assert is_tier_continuation(LogType.OVERTIME, LogType.EXTENDED_OVERTIME)
    assert not is_tier_continuation(LogType.REGULAR, LogType.EXTENDED_OVERTIME)
    assert not is_tier_continuation(LogType.OVERTIME, LogType.REGULAR)
