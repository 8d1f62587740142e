from datetime import date, datetime

import pytest
from booking_engine.utils.time import (
    day_bounds,
    iter_month_days,
    month_bounds,
    normalize_wall_clock,
    parse_hhmm,
    round_to_quarter_hour,
)


def test_end_before_anchor_rolls_to_next_day() -> None:
    start = datetime(2024, 7, 28, 22, 0)
    end = normalize_wall_clock(date(2024, 7, 28), "01:00", not_before=start)
    assert end == datetime(2024, 7, 29, 1, 0)


def test_end_after_anchor_stays_on_reference_day() -> None:
    start = datetime(2024, 7, 28, 18, 0)
    assert normalize_wall_clock(date(2024, 7, 28), "21:30", not_before=start) == datetime(2024, 7, 28, 21, 30)


def test_without_anchor_no_rollover() -> None:
    assert normalize_wall_clock(date(2024, 7, 28), "01:00") == datetime(2024, 7, 28, 1, 0)


def test_rollover_crosses_month_end() -> None:
    start = datetime(2024, 7, 31, 23, 0)
    assert normalize_wall_clock(date(2024, 7, 31), "00:30", not_before=start) == datetime(2024, 8, 1, 0, 30)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (datetime(2024, 7, 28, 8, 53), datetime(2024, 7, 28, 9, 0)),
        (datetime(2024, 7, 28, 8, 52), datetime(2024, 7, 28, 8, 45)),
        (datetime(2024, 7, 28, 8, 7, 59), datetime(2024, 7, 28, 8, 0)),
        (datetime(2024, 7, 28, 8, 8), datetime(2024, 7, 28, 8, 15)),
        (datetime(2024, 7, 28, 23, 58), datetime(2024, 7, 29, 0, 0)),
    ],
)
def test_round_to_quarter_hour(value: datetime, expected: datetime) -> None:
    assert round_to_quarter_hour(value) == expected


@pytest.mark.parametrize("raw", ["7:00", "24:00", "12:60", "noon", ""])
def test_parse_hhmm_rejects_malformed(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_hhmm(raw)


def test_month_bounds_cover_whole_month() -> None:
    start, end = month_bounds(2024, 2)
    assert start == datetime(2024, 2, 1, 0, 0)
    assert end.date() == date(2024, 2, 29)
    assert (end.hour, end.minute, end.second) == (23, 59, 59)


def test_day_bounds_are_inclusive() -> None:
    start, end = day_bounds(date(2024, 7, 28))
    assert start == datetime(2024, 7, 28)
    assert end.date() == date(2024, 7, 28) and end.hour == 23


def test_iter_month_days_covers_leap_february() -> None:
    days = list(iter_month_days(2024, 2))
    assert days[0] == date(2024, 2, 1)
    assert days[-1] == date(2024, 2, 29)
    assert len(days) == 29
