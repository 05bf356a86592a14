from datetime import date, time

import pytest

from studyplanner.services.durations import (
    coerce_minutes,
    minutes_between,
    parse_clock,
    resolve_duration,
)


def test_parse_clock():
    assert parse_clock("09:30") == time(9, 30)
    assert parse_clock(" 7:05 ") == time(7, 5)
    assert parse_clock("25:00") is None
    assert parse_clock("9h30") is None
    assert parse_clock("09:30:00") is None
    assert parse_clock(None) is None


def test_minutes_between_same_day():
    assert minutes_between(time(9, 0), time(10, 30), date(2024, 5, 10)) == 90
    assert minutes_between(time(9, 0), time(9, 0), date(2024, 5, 10)) == 0


def test_minutes_between_wraps_past_midnight():
    assert minutes_between(time(23, 30), time(0, 15), date(2024, 5, 10)) == 45


@pytest.mark.parametrize(
    "value, expected",
    [
        (45, 45),
        ("45", 45),
        (" 30 ", 30),
        (12.9, 12),
        (-5, 0),
        ("abc", 0),
        ("", 0),
        (None, 0),
        (True, 0),
        (float("nan"), 0),
        (float("inf"), 0),
    ],
)
def test_coerce_minutes(value, expected):
    assert coerce_minutes(value) == expected


def test_clock_pair_wins_over_explicit_duration():
    assert resolve_duration(10, "23:30", "00:15", on=date(2024, 5, 10)) == 45


def test_incomplete_or_malformed_pair_falls_back_to_duration():
    assert resolve_duration(50, "09:00", None) == 50
    assert resolve_duration("50", "nine", "10:00") == 50
    assert resolve_duration(None, None, None) == 0
