from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping, Protocol

from ..models import Booking, BookingSource, BookingStatus, Unit
from .events import AuditEvent


@dataclass
class NewBooking:
    unit_id: str
    name: str
    headcount: int
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    source: BookingSource
    reference_code: str
    occasion: str = ""
    heard_from: str = ""
    contact_phone_e164: str | None = None
    contact_email: str | None = None
    phone: str | None = None
    email: str | None = None
    notes: str | None = None
    locale: str = "hu"
    custom_data: dict[str, str] = field(default_factory=dict)


class BookingRepository(Protocol):
    async def query_bookings(
        self,
        unit_id: str,
        start: datetime,
        end: datetime,
        statuses: Iterable[BookingStatus],
    ) -> list[Booking]: ...

    async def create(self, record: NewBooking) -> Booking: ...

    async def get(self, unit_id: str, booking_id: int) -> Booking | None: ...

    async def get_by_reference(self, reference_code: str) -> Booking | None: ...

    async def list_for_unit(self, unit_id: str, start: datetime, end: datetime) -> list[Booking]: ...

    async def update_status(
        self,
        booking: Booking,
        status: BookingStatus,
        extra_fields: Mapping[str, Any] | None = None,
    ) -> Booking: ...

    async def update(self, booking: Booking, changes: Mapping[str, Any]) -> Booking: ...


class SettingsRepository(Protocol):
    async def get_unit(self, unit_id: str) -> Unit | None: ...

    async def get_document(self, unit_id: str) -> dict[str, Any] | None: ...

    async def save_document(self, unit_id: str, data: Mapping[str, Any]) -> None: ...


class AuditSink(Protocol):
    async def emit(self, event: AuditEvent) -> None: ...


GUEST_CONFIRMATION = "guest_confirmation"
VENUE_NEW_BOOKING = "venue_new_booking"
GUEST_CANCELLATION = "guest_cancellation"


class Notifier(Protocol):
    async def send(self, target: str | list[str], template: str, payload: Mapping[str, Any]) -> None: ...
