from datetime import date

import pytest
from booking_engine.domain.errors import SettingsError
from booking_engine.domain.settings import TimeWindow, default_settings, merge_settings
from booking_engine.models import ReservationMode


def test_missing_document_returns_defaults() -> None:
    defaults = default_settings("bistro")
    assert merge_settings(defaults, None) is defaults
    assert defaults.bookable_window == TimeWindow("11:00", "23:00")
    assert defaults.daily_capacity is None
    assert defaults.reservation_mode == ReservationMode.REQUEST


def test_partial_document_overrides_only_given_fields() -> None:
    merged = merge_settings(
        default_settings("bistro"),
        {"dailyCapacity": 40, "blackoutDates": ["2024-12-24", "2024-12-25"], "reservationMode": "auto"},
    )
    assert merged.daily_capacity == 40
    assert merged.blackout_dates == frozenset({date(2024, 12, 24), date(2024, 12, 25)})
    assert merged.reservation_mode == ReservationMode.AUTO
    assert merged.bookable_window == TimeWindow("11:00", "23:00")


def test_unknown_fields_are_rejected() -> None:
    with pytest.raises(SettingsError, match="tableMap"):
        merge_settings(default_settings("bistro"), {"dailyCapacity": 10, "tableMap": {}})


@pytest.mark.parametrize("raw", [None, 0, -5])
def test_non_positive_capacity_means_unlimited(raw: object) -> None:
    merged = merge_settings(default_settings("bistro"), {"dailyCapacity": raw})
    assert merged.daily_capacity is None
    assert merged.has_capacity_limit is False


def test_empty_bookable_window_opens_whole_day() -> None:
    merged = merge_settings(default_settings("bistro"), {"bookableWindow": None})
    assert merged.bookable_window == TimeWindow("00:00", "23:59")


def test_presentation_fields_are_accepted_and_ignored() -> None:
    merged = merge_settings(default_settings("bistro"), {"theme": {"primary": "#166534"}, "schemaVersion": 2})
    assert merged.daily_capacity is None


@pytest.mark.parametrize(
    "document",
    [
        {"bookableWindow": {"from": "23:00", "to": "11:00"}},
        {"bookableWindow": {"from": "9am", "to": "11:00"}},
        {"blackoutDates": ["28/07/2024"]},
        {"reservationMode": "walk-in"},
        {"kitchenWindow": {"start": "12:00"}},
        {"bookableWindow": {"from": "12:00"}},
        {"notificationEmails": "floor@bistro.example"},
    ],
)
def test_malformed_documents_raise_settings_error(document: dict[str, object]) -> None:
    with pytest.raises(SettingsError):
        merge_settings(default_settings("bistro"), document)
