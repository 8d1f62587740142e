from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from ..domain.errors import InvalidTransitionError
from ..domain.events import Actor, AuditEvent, describe
from ..domain.repositories import AuditSink, BookingRepository, NewBooking, Notifier
from ..domain.services import ensure_transition
from ..models import Booking, BookingStatus, LogType
from ..utils.side_effects import SideEffectRunner

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "headcount",
        "occasion",
        "start_time",
        "end_time",
        "phone",
        "email",
        "contact_phone_e164",
        "contact_email",
        "notes",
        "custom_data",
    }
)


@dataclass
class SideEffects:
    runner: SideEffectRunner
    audit: AuditSink
    notifier: Notifier

    def record(self, kind: LogType, booking: Booking, actor: Actor, *, status_from: BookingStatus | None) -> None:
        event = AuditEvent(
            booking_id=booking.id,
            unit_id=booking.unit_id,
            kind=kind,
            actor=actor,
            summary=describe(kind, booking),
            status_from=status_from.value if status_from else None,
            status_to=booking.status.value,
        )
        self.runner.fire(f"audit:{kind.value}", self.audit.emit, event)

    def notify(self, target: str | list[str], template: str, payload: Mapping[str, Any]) -> None:
        self.runner.fire(f"notify:{template}", self.notifier.send, target, template, payload)


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def create_booking(
    booking_repo: BookingRepository,
    effects: SideEffects,
    *,
    record: NewBooking,
    actor: Actor,
) -> Booking:
    booking = await booking_repo.create(record)
    logger.info("booking %s created for unit %s as %s", booking.id, booking.unit_id, booking.status.value)
    effects.record(LogType.CREATED, booking, actor, status_from=None)
    return booking


async def confirm_booking(
    booking_repo: BookingRepository,
    effects: SideEffects,
    *,
    booking: Booking,
    actor: Actor,
) -> Booking:
    previous = booking.status
    ensure_transition(previous, BookingStatus.CONFIRMED)
    updated = await booking_repo.update_status(booking, BookingStatus.CONFIRMED)
    effects.record(LogType.CONFIRMED, updated, actor, status_from=previous)
    return updated


async def cancel_booking(
    booking_repo: BookingRepository,
    effects: SideEffects,
    *,
    booking: Booking,
    reason: str,
    actor: Actor,
) -> Booking:
    # Idempotent: a second cancel returns the booking untouched, cancelled_at included.
    if booking.status == BookingStatus.CANCELLED:
        return booking
    previous = booking.status
    ensure_transition(previous, BookingStatus.CANCELLED)
    updated = await booking_repo.update_status(
        booking,
        BookingStatus.CANCELLED,
        {"cancelled_at": _now(), "cancel_reason": reason},
    )
    effects.record(LogType.CANCELLED, updated, actor, status_from=previous)
    return updated


async def update_booking(
    booking_repo: BookingRepository,
    effects: SideEffects,
    *,
    booking: Booking,
    changes: Mapping[str, Any],
    actor: Actor,
) -> Booking:
    """Apply a field patch. Capacity is not checked here; callers decide whether to revalidate."""
    if booking.status == BookingStatus.CANCELLED:
        raise InvalidTransitionError(booking.status.value, "updated")
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"fields cannot be updated: {', '.join(sorted(unknown))}")
    if not changes:
        return booking
    updated = await booking_repo.update(booking, changes)
    effects.record(LogType.UPDATED, updated, actor, status_from=updated.status)
    return updated
