"""Wall-clock helpers shared by bookings and time tracking.

All instants handled here are naive venue-local datetimes; no timezone
conversion happens anywhere in the booking engine.
"""
import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterator


def parse_hhmm(value: str) -> time:
    """Parse a strict ``HH:mm`` string."""
    try:
        hours, minutes = value.split(":")
        if len(hours) != 2 or len(minutes) != 2:
            raise ValueError
        return time(int(hours), int(minutes))
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"invalid HH:mm time: {value!r}") from exc


def format_hhmm(value: time | datetime) -> str:
    return value.strftime("%H:%M")


def to_date_key(value: date | datetime) -> str:
    return value.strftime("%Y-%m-%d")


def normalize_wall_clock(
    reference_date: date,
    hhmm: str,
    *,
    not_before: datetime | None = None,
) -> datetime:
    """Combine a date and a wall-clock time into an instant.

    If ``not_before`` is given and the naive combination precedes it, the
    result moves to the next calendar day (a shift or booking ending after
    midnight).
    """
    instant = datetime.combine(reference_date, parse_hhmm(hhmm))
    if not_before is not None and instant < not_before:
        instant += timedelta(days=1)
    return instant


def round_to_quarter_hour(value: datetime) -> datetime:
    """Round to the nearest 15 minutes; seconds are dropped before rounding."""
    rounded = round(value.minute / 15) * 15
    base = value.replace(minute=0, second=0, microsecond=0)
    # 53..59 minutes round to 60, which rolls the hour (and possibly the day).
    return base + timedelta(minutes=rounded)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Inclusive first and last instant of a calendar day."""
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """Inclusive first and last instant of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return (
        datetime.combine(date(year, month, 1), time.min),
        datetime.combine(date(year, month, last_day), time.max),
    )


def iter_month_days(year: int, month: int) -> Iterator[date]:
    last_day = calendar.monthrange(year, month)[1]
    for day in range(1, last_day + 1):
        yield date(year, month, day)
