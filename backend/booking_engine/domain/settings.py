from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping

from ..models import ReservationMode
from ..utils.time import parse_hhmm
from .errors import SettingsError


@dataclass(frozen=True)
class TimeWindow:
    start: str
    end: str

    def __post_init__(self) -> None:
        if parse_hhmm(self.start) > parse_hhmm(self.end):
            raise SettingsError(f"window start {self.start} is after end {self.end}")


@dataclass(frozen=True)
class ReservationSettings:
    unit_id: str
    bookable_window: TimeWindow
    blackout_dates: frozenset[date] = frozenset()
    daily_capacity: int | None = None
    kitchen_window: TimeWindow | None = None
    bar_window: TimeWindow | None = None
    reservation_mode: ReservationMode = ReservationMode.REQUEST
    notification_emails: tuple[str, ...] = ()
    guest_form: dict[str, Any] = field(default_factory=dict)

    @property
    def has_capacity_limit(self) -> bool:
        return self.daily_capacity is not None


# Stored document keys accepted by merge_settings. Anything else is rejected.
SETTING_FIELDS = frozenset(
    {
        "blackoutDates",
        "dailyCapacity",
        "bookableWindow",
        "kitchenWindow",
        "barWindow",
        "reservationMode",
        "notificationEmails",
        "guestForm",
        "theme",
        "schemaVersion",
    }
)


def default_settings(unit_id: str, *, window_from: str = "11:00", window_to: str = "23:00") -> ReservationSettings:
    return ReservationSettings(unit_id=unit_id, bookable_window=TimeWindow(window_from, window_to))


def merge_settings(defaults: ReservationSettings, stored: Mapping[str, Any] | None) -> ReservationSettings:
    """Overlay a stored settings document on typed defaults.

    Only the fixed field set is honoured; unknown keys raise SettingsError.
    ``theme`` and ``schemaVersion`` are presentation data and are accepted
    but not carried into the booking rules.
    """
    if not stored:
        return defaults
    unknown = set(stored) - SETTING_FIELDS
    if unknown:
        raise SettingsError(f"unknown reservation setting fields: {', '.join(sorted(unknown))}")

    values: dict[str, Any] = {}
    try:
        if "blackoutDates" in stored:
            values["blackout_dates"] = frozenset(
                date.fromisoformat(str(d)) for d in stored["blackoutDates"] or ()
            )
        if "dailyCapacity" in stored:
            values["daily_capacity"] = _capacity(stored["dailyCapacity"])
        if "bookableWindow" in stored:
            # A present but empty window means "whole day".
            values["bookable_window"] = _window(stored["bookableWindow"]) or TimeWindow("00:00", "23:59")
        if "kitchenWindow" in stored:
            values["kitchen_window"] = _window(stored["kitchenWindow"])
        if "barWindow" in stored:
            values["bar_window"] = _window(stored["barWindow"])
        if "reservationMode" in stored:
            values["reservation_mode"] = ReservationMode(stored["reservationMode"] or ReservationMode.REQUEST)
        if "notificationEmails" in stored:
            values["notification_emails"] = _emails(stored["notificationEmails"])
        if "guestForm" in stored:
            values["guest_form"] = dict(stored["guestForm"] or {})
    except SettingsError:
        raise
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"malformed reservation settings: {exc}") from exc

    return ReservationSettings(
        unit_id=defaults.unit_id,
        bookable_window=values.get("bookable_window", defaults.bookable_window),
        blackout_dates=values.get("blackout_dates", defaults.blackout_dates),
        daily_capacity=values.get("daily_capacity", defaults.daily_capacity),
        kitchen_window=values.get("kitchen_window", defaults.kitchen_window),
        bar_window=values.get("bar_window", defaults.bar_window),
        reservation_mode=values.get("reservation_mode", defaults.reservation_mode),
        notification_emails=values.get("notification_emails", defaults.notification_emails),
        guest_form=values.get("guest_form", defaults.guest_form),
    )


def _capacity(value: Any) -> int | None:
    # null, 0 and negatives all mean "no limit".
    if value is None:
        return None
    capacity = int(value)
    return capacity if capacity > 0 else None


def _window(value: Any) -> TimeWindow | None:
    if not value:
        return None
    if not isinstance(value, Mapping) or set(value) != {"from", "to"}:
        raise SettingsError(f"window must be an object with 'from' and 'to': {value!r}")
    return TimeWindow(str(value["from"]), str(value["to"]))


def _emails(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise SettingsError(f"notificationEmails must be a list: {value!r}")
    return tuple(str(e) for e in value)
