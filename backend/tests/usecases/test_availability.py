from datetime import date, datetime

import pytest
from booking_engine.domain.settings import ReservationSettings, TimeWindow
from booking_engine.models import BookingStatus
from booking_engine.usecases import availability as uc


def _settings(capacity: int | None = 20) -> ReservationSettings:
    return ReservationSettings(
        unit_id="bistro",
        bookable_window=TimeWindow("11:00", "23:00"),
        blackout_dates=frozenset({date(2024, 7, 15)}),
        daily_capacity=capacity,
    )


@pytest.mark.asyncio
async def test_month_headcounts_skip_query_without_capacity(booking_repo) -> None:
    booking_repo.seed(start_time=datetime(2024, 7, 28, 19, 0), headcount=4)
    result = await uc.month_headcounts(booking_repo, _settings(capacity=None), year=2024, month=7)
    assert result == {}
    assert booking_repo.queries == []


@pytest.mark.asyncio
async def test_month_headcounts_group_active_bookings_by_day(booking_repo) -> None:
    booking_repo.seed(start_time=datetime(2024, 7, 28, 12, 0), headcount=4)
    booking_repo.seed(start_time=datetime(2024, 7, 28, 20, 0), headcount=6, status=BookingStatus.PENDING)
    booking_repo.seed(start_time=datetime(2024, 7, 28, 21, 0), headcount=9, status=BookingStatus.CANCELLED)
    booking_repo.seed(start_time=datetime(2024, 7, 1, 0, 0), headcount=2)
    booking_repo.seed(start_time=datetime(2024, 7, 31, 23, 30), headcount=3)
    booking_repo.seed(start_time=datetime(2024, 8, 1, 12, 0), headcount=5)
    booking_repo.seed(unit_id="other", start_time=datetime(2024, 7, 28, 12, 0), headcount=7)

    result = await uc.month_headcounts(booking_repo, _settings(), year=2024, month=7)

    assert result == {"2024-07-28": 10, "2024-07-01": 2, "2024-07-31": 3}
    _, start, end, statuses = booking_repo.queries[0]
    assert start == datetime(2024, 7, 1)
    assert end.date() == date(2024, 7, 31)
    assert set(statuses) == {BookingStatus.PENDING, BookingStatus.CONFIRMED}


@pytest.mark.asyncio
async def test_aggregate_for_date_can_exclude_one_booking(booking_repo) -> None:
    own = booking_repo.seed(start_time=datetime(2024, 7, 28, 19, 0), headcount=6)
    booking_repo.seed(start_time=datetime(2024, 7, 28, 13, 0), headcount=4)

    assert await uc.aggregate_for_date(booking_repo, unit_id="bistro", day=date(2024, 7, 28)) == 10
    assert (
        await uc.aggregate_for_date(booking_repo, unit_id="bistro", day=date(2024, 7, 28), exclude_booking_id=own.id)
        == 4
    )


@pytest.mark.asyncio
async def test_month_calendar_flags_full_blackout_and_past_days(booking_repo) -> None:
    booking_repo.seed(start_time=datetime(2024, 7, 28, 19, 0), headcount=20)
    booking_repo.seed(start_time=datetime(2024, 7, 27, 19, 0), headcount=5)

    days = await uc.month_calendar(booking_repo, _settings(), year=2024, month=7, today=date(2024, 7, 20))
    by_day = {d.date: d for d in days}

    assert len(days) == 31
    assert by_day[date(2024, 7, 28)].is_full is True
    assert by_day[date(2024, 7, 28)].remaining == 0
    assert by_day[date(2024, 7, 27)].remaining == 15
    assert by_day[date(2024, 7, 15)].is_blackout is True
    assert by_day[date(2024, 7, 19)].is_past is True
    assert by_day[date(2024, 7, 20)].is_past is False


@pytest.mark.asyncio
async def test_month_calendar_without_capacity_has_no_remaining(booking_repo) -> None:
    days = await uc.month_calendar(booking_repo, _settings(capacity=None), year=2024, month=2, today=date(2024, 1, 1))
    assert len(days) == 29
    assert all(d.remaining is None and d.is_full is False for d in days)
