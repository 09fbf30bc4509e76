"""Tests for the booking overlap checks"""

import random

import pytest

from app.booking.overlap import (
    FORM_POLICY,
    WIZARD_POLICY,
    OverlapPolicy,
    OverlapRule,
    TimeFormatError,
    booked_table_numbers,
    format_time,
    parse_time,
    times_conflict,
)


def intervals_intersect(a: int, b: int, window: int) -> bool:
    """Reference check on half-open [start, start + window) intervals"""
    return max(a, b) < min(a + window, b + window)


@pytest.mark.parametrize("rule", [OverlapRule.DISTANCE, OverlapRule.INTERVAL])
def test_conflict_matches_interval_intersection(rule):
    """Randomized pairs agree with a direct half-open intersection test"""
    rng = random.Random(20240601)

    for _ in range(2000):
        window = rng.randint(1, 240)
        policy = OverlapPolicy(duration_minutes=window, rule=rule)
        a = rng.randint(0, 23 * 60 + 59)
        b = rng.randint(0, 23 * 60 + 59)

        assert times_conflict(format_time(a), format_time(b), policy) == intervals_intersect(a, b, window)


@pytest.mark.parametrize("rule", [OverlapRule.DISTANCE, OverlapRule.INTERVAL])
def test_touching_windows_do_not_conflict(rule):
    """end == other_start is free in both directions"""
    rng = random.Random(7)

    for _ in range(500):
        window = rng.randint(1, 180)
        policy = OverlapPolicy(duration_minutes=window, rule=rule)
        a = rng.randint(0, 24 * 60 - 1 - window)
        b = a + window

        assert not times_conflict(format_time(a), format_time(b), policy)
        assert not times_conflict(format_time(b), format_time(a), policy)
        assert times_conflict(format_time(a), format_time(b - 1), policy)


def test_form_policy_window():
    assert FORM_POLICY.window_minutes == 105
    assert FORM_POLICY.rule == OverlapRule.DISTANCE

    assert times_conflict("18:00", "19:44", FORM_POLICY)
    assert not times_conflict("18:00", "19:45", FORM_POLICY)
    assert times_conflict("19:44", "18:00", FORM_POLICY)


def test_wizard_policy_window():
    assert WIZARD_POLICY.window_minutes == 120
    assert WIZARD_POLICY.rule == OverlapRule.INTERVAL

    assert times_conflict("18:00", "19:59", WIZARD_POLICY)
    assert not times_conflict("18:00", "20:00", WIZARD_POLICY)


def test_policies_disagree_between_105_and_120_minutes():
    """The two flows are kept distinct: 18:00 vs 19:50 only clashes for the wizard"""
    assert not times_conflict("18:00", "19:50", FORM_POLICY)
    assert times_conflict("18:00", "19:50", WIZARD_POLICY)


@pytest.mark.parametrize(
    "value",
    ["", "18", "18:0", "1800", "24:00", "18:60", "ab:cd", "18:00:00:00", "-1:00", None, 1800],
)
def test_malformed_times_fail_closed(value):
    """Bad input is reported as a conflict rather than raising"""
    assert times_conflict(value, "12:00") is True
    assert times_conflict("12:00", value) is True
    assert times_conflict(value, "12:00", WIZARD_POLICY) is True


@pytest.mark.parametrize(
    "value,minutes",
    [("00:00", 0), ("9:05", 545), ("18:00", 1080), ("18:00:59", 1080), ("23:59", 1439)],
)
def test_parse_time(value, minutes):
    assert parse_time(value) == minutes


def test_parse_time_rejects_out_of_range():
    with pytest.raises(TimeFormatError):
        parse_time("25:00")

    # TimeFormatError is a ValueError
    with pytest.raises(ValueError):
        parse_time("noon")


def test_booked_table_numbers_uses_active_conflicts_only():
    reservations = [
        {"table_number": 1, "reservation_time": "18:00", "status": "confirmed"},
        {"table_number": 2, "reservation_time": "18:30", "status": "pending"},
        {"table_number": 3, "reservation_time": "18:00", "status": "cancelled"},
        {"table_number": 4, "reservation_time": "20:30", "status": "confirmed"},
        {"table_number": None, "reservation_time": "18:00", "status": "confirmed"},
        {"table_number": 1, "reservation_time": "18:15", "status": "pending"},
    ]

    assert booked_table_numbers("18:30", reservations) == [1, 2]
    assert booked_table_numbers("21:00", reservations) == [4]


def test_booked_table_numbers_reads_objects():
    class Row:
        def __init__(self, table_number, reservation_time, status="pending"):
            self.table_number = table_number
            self.reservation_time = reservation_time
            self.status = status

    rows = [Row(5, "12:00"), Row(6, "bogus")]

    # The unparseable time blocks its table
    assert booked_table_numbers("15:00", rows) == [6]
    assert booked_table_numbers("12:30", rows) == [5, 6]
