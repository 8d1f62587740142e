from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..models import BookingStatus, ReservationMode
from ..utils.time import parse_hhmm
from .errors import (
    BlackoutDateError,
    CapacityFullError,
    CapacityLimitedError,
    InvalidTransitionError,
    TimeWindowViolationError,
)
from .settings import ReservationSettings


@dataclass(frozen=True)
class BookingCandidate:
    start_time: datetime
    headcount: int

    @property
    def booking_date(self) -> date:
        return self.start_time.date()


def validate_booking(
    candidate: BookingCandidate,
    aggregate_for_date: int,
    settings: ReservationSettings,
) -> int | None:
    """
    Pure validation of a booking candidate against venue rules.

    Checks run in a fixed order and stop at the first failure: blackout date,
    bookable time window (inclusive, minute precision), then daily capacity.
    Returns the seats left on that date after the booking, or None when the
    venue has no capacity limit. Raises a BookingValidationError otherwise.
    """
    if candidate.booking_date in settings.blackout_dates:
        raise BlackoutDateError()

    window = settings.bookable_window
    # Seconds count: 23:00:45 is past a window ending at 23:00.
    start_of_day = candidate.start_time.time()
    if start_of_day < parse_hhmm(window.start) or start_of_day > parse_hhmm(window.end):
        raise TimeWindowViolationError(window.start, window.end)

    capacity = settings.daily_capacity
    if capacity is None:
        return None
    if aggregate_for_date >= capacity:
        raise CapacityFullError()
    if aggregate_for_date + candidate.headcount > capacity:
        raise CapacityLimitedError(remaining=capacity - aggregate_for_date)
    return capacity - aggregate_for_date - candidate.headcount


def initial_status(mode: ReservationMode) -> BookingStatus:
    return BookingStatus.CONFIRMED if mode == ReservationMode.AUTO else BookingStatus.PENDING


_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
}


def ensure_transition(current: BookingStatus, target: BookingStatus) -> None:
    if target not in _TRANSITIONS[current]:
        raise InvalidTransitionError(current.value, target.value)
