from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Mapping

from ..config import Settings
from ..domain.errors import BookingValidationError, InvalidTransitionError, NotFoundError
from ..domain.events import GUEST, Actor
from ..domain.repositories import (
    GUEST_CANCELLATION,
    GUEST_CONFIRMATION,
    VENUE_NEW_BOOKING,
    BookingRepository,
    NewBooking,
    SettingsRepository,
)
from ..domain.services import BookingCandidate, initial_status, validate_booking
from ..domain.settings import ReservationSettings
from ..models import Booking, BookingSource, BookingStatus, Unit
from ..utils.contact import normalize_email, normalize_phone
from ..utils.reference import new_reference_code
from ..utils.time import day_bounds, normalize_wall_clock
from . import lifecycle
from .availability import aggregate_for_date
from .lifecycle import SideEffects
from .settings import load_settings

logger = logging.getLogger(__name__)


@dataclass
class BookingRequest:
    booking_date: date
    start_time: str
    headcount: int
    name: str
    end_time: str | None = None
    phone: str | None = None
    email: str | None = None
    notes: str | None = None
    occasion: str | None = None
    locale: str = "hu"
    custom_data: dict[str, str] = field(default_factory=dict)


def resolve_times(request: BookingRequest, *, default_duration: timedelta) -> tuple[datetime, datetime]:
    """Start and end instants for a request.

    An end time earlier than the start belongs to the next day; a missing
    end, or one equal to the start, falls back to the default duration.
    """
    start = normalize_wall_clock(request.booking_date, request.start_time)
    if request.end_time:
        end = normalize_wall_clock(request.booking_date, request.end_time, not_before=start)
        if end > start:
            return start, end
    return start, start + default_duration


async def check_booking(
    booking_repo: BookingRepository,
    settings: ReservationSettings,
    *,
    candidate: BookingCandidate,
    exclude_booking_id: int | None = None,
) -> int | None:
    """Authoritative check against a fresh read of the day's aggregate."""
    aggregate = 0
    if settings.has_capacity_limit:
        aggregate = await aggregate_for_date(
            booking_repo,
            unit_id=settings.unit_id,
            day=candidate.booking_date,
            exclude_booking_id=exclude_booking_id,
        )
    return validate_booking(candidate, aggregate, settings)


def _new_record(
    request: BookingRequest,
    settings: ReservationSettings,
    *,
    start: datetime,
    end: datetime,
    actor: Actor,
    config: Settings,
) -> NewBooking:
    record = NewBooking(
        unit_id=settings.unit_id,
        name=request.name.strip(),
        headcount=request.headcount,
        start_time=start,
        end_time=end,
        status=initial_status(settings.reservation_mode),
        source=actor.source,
        reference_code=new_reference_code(),
        occasion=request.occasion or request.custom_data.get("occasion", ""),
        heard_from=request.custom_data.get("heardFrom", ""),
        notes=request.notes,
        locale=request.locale,
        custom_data=dict(request.custom_data),
    )
    if actor.source == BookingSource.GUEST:
        record.contact_phone_e164 = normalize_phone(request.phone or "", default_prefix=config.default_phone_prefix)
        record.contact_email = normalize_email(request.email)
    else:
        record.phone = request.phone
        record.email = request.email
    return record


def _notification_payload(booking: Booking, unit: Unit, config: Settings) -> dict[str, Any]:
    return {
        "unit_name": unit.name,
        "name": booking.name,
        "headcount": booking.headcount,
        "start_time": booking.start_time.strftime("%Y-%m-%d %H:%M"),
        "status": booking.status.value,
        "locale": booking.locale,
        "reference_code": booking.reference_code,
        "manage_url": f"{config.public_base_url.rstrip('/')}/manage/{booking.reference_code}",
    }


async def submit_booking(
    booking_repo: BookingRepository,
    settings_repo: SettingsRepository,
    effects: SideEffects,
    *,
    unit_id: str,
    request: BookingRequest,
    config: Settings,
    actor: Actor = GUEST,
) -> Booking:
    """
    Validate and store a booking request.

    The capacity read and the write are separate store operations, so two
    submissions racing between them can both succeed and overbook the day.
    Audit and notification calls are scheduled after the write and their
    failures never affect the returned booking.
    """
    if request.headcount < 1:
        raise ValueError("headcount must be at least 1")
    unit, settings = await load_settings(settings_repo, unit_id=unit_id, config=config)
    start, end = resolve_times(request, default_duration=timedelta(minutes=config.default_duration_minutes))

    candidate = BookingCandidate(start_time=start, headcount=request.headcount)
    try:
        await check_booking(booking_repo, settings, candidate=candidate)
    except BookingValidationError as exc:
        logger.info("booking for unit %s on %s rejected: %s", unit_id, start.date(), exc.reason)
        raise

    record = _new_record(request, settings, start=start, end=end, actor=actor, config=config)
    booking = await lifecycle.create_booking(booking_repo, effects, record=record, actor=actor)

    payload = _notification_payload(booking, unit, config)
    if booking.guest_email:
        effects.notify(booking.guest_email, GUEST_CONFIRMATION, payload)
    if actor.is_guest and settings.notification_emails:
        effects.notify(list(settings.notification_emails), VENUE_NEW_BOOKING, payload)
    return booking


async def get_booking(booking_repo: BookingRepository, *, unit_id: str, booking_id: int) -> Booking:
    booking = await booking_repo.get(unit_id, booking_id)
    if booking is None:
        raise NotFoundError("booking not found")
    return booking


async def get_by_reference(booking_repo: BookingRepository, *, reference_code: str) -> Booking:
    booking = await booking_repo.get_by_reference(reference_code)
    if booking is None:
        raise NotFoundError("booking not found")
    return booking


async def list_bookings(
    booking_repo: BookingRepository,
    settings_repo: SettingsRepository,
    *,
    unit_id: str,
    start: date,
    end: date,
) -> list[Booking]:
    if await settings_repo.get_unit(unit_id) is None:
        raise NotFoundError("unit not found")
    return await booking_repo.list_for_unit(unit_id, day_bounds(start)[0], day_bounds(end)[1])


async def confirm_booking(
    booking_repo: BookingRepository,
    effects: SideEffects,
    *,
    unit_id: str,
    booking_id: int,
    actor: Actor,
) -> Booking:
    booking = await get_booking(booking_repo, unit_id=unit_id, booking_id=booking_id)
    return await lifecycle.confirm_booking(booking_repo, effects, booking=booking, actor=actor)


async def cancel_booking(
    booking_repo: BookingRepository,
    effects: SideEffects,
    *,
    unit_id: str,
    booking_id: int,
    reason: str,
    actor: Actor,
) -> Booking:
    booking = await get_booking(booking_repo, unit_id=unit_id, booking_id=booking_id)
    return await lifecycle.cancel_booking(booking_repo, effects, booking=booking, reason=reason, actor=actor)


async def cancel_by_reference(
    booking_repo: BookingRepository,
    settings_repo: SettingsRepository,
    effects: SideEffects,
    *,
    reference_code: str,
    reason: str,
    config: Settings,
) -> Booking:
    booking = await get_by_reference(booking_repo, reference_code=reference_code)
    already_cancelled = booking.status == BookingStatus.CANCELLED
    booking = await lifecycle.cancel_booking(booking_repo, effects, booking=booking, reason=reason, actor=GUEST)
    if not already_cancelled and booking.guest_email:
        unit = await settings_repo.get_unit(booking.unit_id)
        if unit is not None:
            effects.notify(booking.guest_email, GUEST_CANCELLATION, _notification_payload(booking, unit, config))
    return booking


async def update_booking(
    booking_repo: BookingRepository,
    settings_repo: SettingsRepository,
    effects: SideEffects,
    *,
    unit_id: str,
    booking_id: int,
    changes: Mapping[str, Any],
    actor: Actor,
    config: Settings,
) -> Booking:
    """
    Patch a booking. With revalidation enabled, a change to headcount or to
    the start time re-runs the validator against the target day's aggregate
    minus this booking's own seats.
    """
    booking = await get_booking(booking_repo, unit_id=unit_id, booking_id=booking_id)
    if booking.status == BookingStatus.CANCELLED:
        raise InvalidTransitionError(booking.status.value, "updated")
    changes = dict(changes)
    start = changes.get("start_time", booking.start_time)
    end = changes.get("end_time", booking.end_time)
    if start >= end:
        raise ValueError("start_time must be earlier than end_time")
    if changes.get("headcount", booking.headcount) < 1:
        raise ValueError("headcount must be at least 1")

    touches_capacity = "headcount" in changes or "start_time" in changes
    if config.revalidate_on_update and touches_capacity:
        _, settings = await load_settings(settings_repo, unit_id=unit_id, config=config)
        candidate = BookingCandidate(start_time=start, headcount=changes.get("headcount", booking.headcount))
        await check_booking(booking_repo, settings, candidate=candidate, exclude_booking_id=booking.id)

    if booking.source == BookingSource.GUEST:
        changes = _guest_contact_changes(changes, config)
    return await lifecycle.update_booking(booking_repo, effects, booking=booking, changes=changes, actor=actor)


def _guest_contact_changes(changes: dict[str, Any], config: Settings) -> dict[str, Any]:
    # Guest bookings are read through the normalized contact columns.
    if "phone" in changes:
        changes["contact_phone_e164"] = normalize_phone(
            changes.pop("phone") or "", default_prefix=config.default_phone_prefix
        )
    if "email" in changes:
        changes["contact_email"] = normalize_email(changes.pop("email"))
    return changes
