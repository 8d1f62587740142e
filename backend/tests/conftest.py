from dataclasses import asdict
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Mapping

import pytest
from booking_engine.config import Settings
from booking_engine.domain.events import AuditEvent
from booking_engine.domain.repositories import NewBooking
from booking_engine.models import Booking, BookingSource, BookingStatus, Unit
from booking_engine.usecases.lifecycle import SideEffects
from booking_engine.utils.side_effects import SideEffectRunner

CREATED_AT = datetime(2024, 7, 1, 9, 0)


class InMemoryBookingRepository:
    def __init__(self) -> None:
        self.bookings: dict[int, Booking] = {}
        self.queries: list[tuple[str, datetime, datetime, tuple[BookingStatus, ...]]] = []
        self.writes = 0
        self._next_id = 1

    def seed(
        self,
        *,
        unit_id: str = "bistro",
        start_time: datetime,
        headcount: int,
        status: BookingStatus = BookingStatus.CONFIRMED,
        name: str = "Seeded Guest",
    ) -> Booking:
        booking = Booking(
            id=self._next_id,
            unit_id=unit_id,
            name=name,
            headcount=headcount,
            occasion="",
            heard_from="",
            start_time=start_time,
            end_time=start_time + timedelta(hours=2),
            status=status,
            source=BookingSource.GUEST,
            locale="hu",
            reference_code=f"seed-reference-{self._next_id:04d}",
            custom_data={},
            created_at=CREATED_AT,
            updated_at=CREATED_AT,
            cancelled_at=None,
            cancel_reason=None,
        )
        self.bookings[booking.id] = booking
        self._next_id += 1
        return booking

    async def query_bookings(
        self,
        unit_id: str,
        start: datetime,
        end: datetime,
        statuses: Iterable[BookingStatus],
    ) -> list[Booking]:
        wanted = tuple(statuses)
        self.queries.append((unit_id, start, end, wanted))
        return [
            b
            for b in self.bookings.values()
            if b.unit_id == unit_id and start <= b.start_time <= end and b.status in wanted
        ]

    async def create(self, record: NewBooking) -> Booking:
        booking = Booking(
            id=self._next_id,
            **asdict(record),
            created_at=CREATED_AT,
            updated_at=CREATED_AT,
            cancelled_at=None,
            cancel_reason=None,
        )
        self.bookings[booking.id] = booking
        self._next_id += 1
        self.writes += 1
        return booking

    async def get(self, unit_id: str, booking_id: int) -> Booking | None:
        booking = self.bookings.get(booking_id)
        return booking if booking is not None and booking.unit_id == unit_id else None

    async def get_by_reference(self, reference_code: str) -> Booking | None:
        return next((b for b in self.bookings.values() if b.reference_code == reference_code), None)

    async def list_for_unit(self, unit_id: str, start: datetime, end: datetime) -> list[Booking]:
        rows = [b for b in self.bookings.values() if b.unit_id == unit_id and start <= b.start_time <= end]
        return sorted(rows, key=lambda b: b.start_time)

    async def update_status(
        self,
        booking: Booking,
        status: BookingStatus,
        extra_fields: Mapping[str, Any] | None = None,
    ) -> Booking:
        booking.status = status
        for key, value in (extra_fields or {}).items():
            setattr(booking, key, value)
        self.writes += 1
        return booking

    async def update(self, booking: Booking, changes: Mapping[str, Any]) -> Booking:
        for key, value in changes.items():
            setattr(booking, key, value)
        self.writes += 1
        return booking


class InMemorySettingsRepository:
    def __init__(self) -> None:
        self.units: dict[str, Unit] = {}
        self.documents: dict[str, dict[str, Any]] = {}

    def add_unit(self, unit_id: str, name: str, document: dict[str, Any] | None = None) -> Unit:
        unit = Unit(id=unit_id, name=name, created_at=CREATED_AT)
        self.units[unit_id] = unit
        if document is not None:
            self.documents[unit_id] = document
        return unit

    async def get_unit(self, unit_id: str) -> Unit | None:
        return self.units.get(unit_id)

    async def get_document(self, unit_id: str) -> dict[str, Any] | None:
        document = self.documents.get(unit_id)
        return dict(document) if document is not None else None

    async def save_document(self, unit_id: str, data: Mapping[str, Any]) -> None:
        self.documents[unit_id] = dict(data)


class RecordingAuditSink:
    def __init__(self, fail: bool = False) -> None:
        self.events: list[AuditEvent] = []
        self.fail = fail

    async def emit(self, event: AuditEvent) -> None:
        if self.fail:
            raise ConnectionError("audit store down")
        self.events.append(event)


class RecordingNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[tuple[Any, str, Mapping[str, Any]]] = []
        self.fail = fail

    async def send(self, target: str | list[str], template: str, payload: Mapping[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("mail relay down")
        self.sent.append((target, template, payload))


@pytest.fixture
def booking_repo() -> InMemoryBookingRepository:
    return InMemoryBookingRepository()


@pytest.fixture
def settings_repo() -> InMemorySettingsRepository:
    repo = InMemorySettingsRepository()
    repo.add_unit(
        "bistro",
        "Bistro Mint",
        {
            "dailyCapacity": 20,
            "bookableWindow": {"from": "11:00", "to": "23:00"},
            "blackoutDates": ["2024-08-20"],
            "reservationMode": "request",
            "notificationEmails": ["floor@bistro.example", "owner@bistro.example"],
        },
    )
    return repo


@pytest.fixture
def audit_sink() -> RecordingAuditSink:
    return RecordingAuditSink()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def effects(audit_sink: RecordingAuditSink, notifier: RecordingNotifier) -> SideEffects:
    return SideEffects(runner=SideEffectRunner(), audit=audit_sink, notifier=notifier)


@pytest.fixture
def config() -> Settings:
    return Settings()


@pytest.fixture
def booking_day() -> date:
    return date(2024, 7, 28)


@pytest.fixture
def failing_effects() -> SideEffects:
    return SideEffects(
        runner=SideEffectRunner(),
        audit=RecordingAuditSink(fail=True),
        notifier=RecordingNotifier(fail=True),
    )
