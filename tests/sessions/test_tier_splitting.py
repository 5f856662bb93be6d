from __future__ import annotations

from datetime import datetime, timedelta

from src.internship_tracker.internship_tracker.core.enums import LogType
from src.internship_tracker.internship_tracker.core.policy import OvertimePolicy
from src.internship_tracker.internship_tracker.sessions.splitting import exceeds_cap, plan_tier_split

START = datetime(2026, 3, 2, 8, 0)


def _spans(plan):
    return [(s.log_type, s.time_in, s.time_out) for s in plan]


def test_span_within_cap_is_one_segment(policy):
    plan = plan_tier_split(START, START + timedelta(hours=9), policy=policy)

    assert _spans(plan) == [(LogType.REGULAR, START, START + timedelta(hours=9))]


def test_eleven_hours_split_into_regular_and_overtime(policy):
    plan = plan_tier_split(START, START + timedelta(hours=11), policy=policy)

    assert _spans(plan) == [
        (LogType.REGULAR, START, datetime(2026, 3, 2, 17, 0)),
        (LogType.OVERTIME, datetime(2026, 3, 2, 17, 0), datetime(2026, 3, 2, 19, 0)),
    ]


def test_cascade_through_every_tier(policy):
    plan = plan_tier_split(START, START + timedelta(hours=30), policy=policy)

    assert [s.log_type for s in plan] == [
        LogType.REGULAR,
        LogType.OVERTIME,
        LogType.EXTENDED_OVERTIME,
        LogType.EXTENDED_OVERTIME,
    ]
    assert [s.time_out - s.time_in for s in plan] == [
        timedelta(hours=9),
        timedelta(hours=3),
        timedelta(hours=12),
        timedelta(hours=6),
    ]
    # contiguous, covers the whole span
    assert all(a.time_out == b.time_in for a, b in zip(plan, plan[1:]))
    assert plan[-1].time_out == START + timedelta(hours=30)


def test_overtime_start_promotes_to_extended(policy):
    plan = plan_tier_split(START, START + timedelta(hours=5), policy=policy, start_type=LogType.OVERTIME)

    assert [(s.log_type, s.time_out - s.time_in) for s in plan] == [
        (LogType.OVERTIME, timedelta(hours=3)),
        (LogType.EXTENDED_OVERTIME, timedelta(hours=2)),
    ]


def test_zero_overtime_cap_skips_the_overtime_tier():
    policy = OvertimePolicy(max_overtime_hours=0)

    plan = plan_tier_split(START, START + timedelta(hours=11), policy=policy)

    assert [(s.log_type, s.time_out - s.time_in) for s in plan] == [
        (LogType.REGULAR, timedelta(hours=9)),
        (LogType.EXTENDED_OVERTIME, timedelta(hours=2)),
    ]


def test_exceeds_cap_is_strict(policy):
    assert not exceeds_cap(START, START + timedelta(hours=9), LogType.REGULAR, policy)
    assert exceeds_cap(START, START + timedelta(hours=9, minutes=1), LogType.REGULAR, policy)
    assert not exceeds_cap(START, START + timedelta(hours=3), LogType.OVERTIME, policy)
