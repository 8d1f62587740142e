from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date

from ..domain.repositories import BookingRepository
from ..domain.settings import ReservationSettings
from ..models import ACTIVE_STATUSES
from ..utils.time import day_bounds, iter_month_days, month_bounds, to_date_key


@dataclass(frozen=True)
class DayAvailability:
    date: date
    headcount: int
    remaining: int | None
    is_full: bool
    is_blackout: bool
    is_past: bool


async def aggregate_for_date(
    booking_repo: BookingRepository,
    *,
    unit_id: str,
    day: date,
    exclude_booking_id: int | None = None,
) -> int:
    """Live headcount of pending and confirmed bookings starting on ``day``."""
    start, end = day_bounds(day)
    bookings = await booking_repo.query_bookings(unit_id, start, end, ACTIVE_STATUSES)
    return sum(b.headcount or 0 for b in bookings if b.id != exclude_booking_id)


async def month_headcounts(
    booking_repo: BookingRepository,
    settings: ReservationSettings,
    *,
    year: int,
    month: int,
) -> dict[str, int]:
    """
    Headcount per ``YYYY-MM-DD`` for the month, for greying out full days.

    Advisory only: the result may be stale by the time a booking is
    submitted. Venues without a daily capacity get an empty mapping and no
    query is made.
    """
    if not settings.has_capacity_limit:
        return {}
    start, end = month_bounds(year, month)
    bookings = await booking_repo.query_bookings(settings.unit_id, start, end, ACTIVE_STATUSES)
    headcounts: dict[str, int] = defaultdict(int)
    for booking in bookings:
        headcounts[to_date_key(booking.start_time)] += booking.headcount or 0
    return dict(headcounts)


async def month_calendar(
    booking_repo: BookingRepository,
    settings: ReservationSettings,
    *,
    year: int,
    month: int,
    today: date,
) -> list[DayAvailability]:
    headcounts = await month_headcounts(booking_repo, settings, year=year, month=month)
    capacity = settings.daily_capacity
    days: list[DayAvailability] = []
    for day in iter_month_days(year, month):
        headcount = headcounts.get(to_date_key(day), 0)
        remaining = max(capacity - headcount, 0) if capacity is not None else None
        days.append(
            DayAvailability(
                date=day,
                headcount=headcount,
                remaining=remaining,
                is_full=remaining == 0,
                is_blackout=day in settings.blackout_dates,
                is_past=day < today,
            )
        )
    return days
