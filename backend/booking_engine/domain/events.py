from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..models import Booking, BookingSource, LogType

GUEST_ACTOR_NAME = "guest"


@dataclass(frozen=True)
class Actor:
    """Who triggered a transition. Staff actors carry a user id; guests do not."""

    user_id: int | None = None
    name: str = GUEST_ACTOR_NAME

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    @property
    def source(self) -> BookingSource:
        return BookingSource.GUEST if self.is_guest else BookingSource.MANUAL


GUEST = Actor()


@dataclass(frozen=True)
class AuditEvent:
    booking_id: int
    unit_id: str
    kind: LogType
    actor: Actor
    summary: str
    status_from: str | None = None
    status_to: str | None = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc).replace(tzinfo=None))


def describe(kind: LogType, booking: Booking) -> str:
    if kind == LogType.CREATED:
        return f"New booking: {booking.name} ({booking.headcount} guests, {booking.start_time:%H:%M})"
    if kind == LogType.UPDATED:
        return f"Booking updated: {booking.name}"
    if kind == LogType.CONFIRMED:
        return f"Booking confirmed: {booking.name}"
    reason = f" ({booking.cancel_reason})" if booking.cancel_reason else ""
    return f"Booking cancelled: {booking.name}{reason}"
