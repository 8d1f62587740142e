from __future__ import annotations

import functools
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, List, Mapping, Optional, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.errors import TransientIOError
from ..domain.repositories import BookingRepository, NewBooking, SettingsRepository
from ..models import Booking, BookingStatus, ReservationSettingRecord, Unit

T = TypeVar("T")


def _utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _store_call(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Translate driver/ORM failures into TransientIOError at the store boundary."""

    @functools.wraps(func)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        try:
            return await func(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise TransientIOError(f"{func.__name__} failed") from exc

    return wrapper


class SqlAlchemyBookingRepository(BookingRepository):
    """Every write commits on its own; reads and writes are not wrapped in one transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @_store_call
    async def query_bookings(
        self,
        unit_id: str,
        start: datetime,
        end: datetime,
        statuses: Iterable[BookingStatus],
    ) -> List[Booking]:
        stmt: Select[tuple[Booking]] = select(Booking).where(
            Booking.unit_id == unit_id,
            Booking.start_time >= start,
            Booking.start_time <= end,
            Booking.status.in_(list(statuses)),
        )
        return list((await self.session.scalars(stmt)).all())

    @_store_call
    async def create(self, record: NewBooking) -> Booking:
        now = _utc_now_naive()
        booking = Booking(**asdict(record), created_at=now, updated_at=now)
        self.session.add(booking)
        await self.session.commit()
        return booking

    @_store_call
    async def get(self, unit_id: str, booking_id: int) -> Optional[Booking]:
        stmt = select(Booking).where(Booking.id == booking_id, Booking.unit_id == unit_id)
        return await self.session.scalar(stmt)

    @_store_call
    async def get_by_reference(self, reference_code: str) -> Optional[Booking]:
        return await self.session.scalar(select(Booking).where(Booking.reference_code == reference_code))

    @_store_call
    async def list_for_unit(self, unit_id: str, start: datetime, end: datetime) -> List[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.unit_id == unit_id, Booking.start_time >= start, Booking.start_time <= end)
            .order_by(Booking.start_time)
        )
        return list((await self.session.scalars(stmt)).all())

    @_store_call
    async def update_status(
        self,
        booking: Booking,
        status: BookingStatus,
        extra_fields: Mapping[str, Any] | None = None,
    ) -> Booking:
        booking.status = status
        for key, value in (extra_fields or {}).items():
            setattr(booking, key, value)
        booking.updated_at = _utc_now_naive()
        await self.session.commit()
        return booking

    @_store_call
    async def update(self, booking: Booking, changes: Mapping[str, Any]) -> Booking:
        for key, value in changes.items():
            setattr(booking, key, value)
        booking.updated_at = _utc_now_naive()
        await self.session.commit()
        return booking


class SqlAlchemySettingsRepository(SettingsRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @_store_call
    async def get_unit(self, unit_id: str) -> Optional[Unit]:
        return await self.session.get(Unit, unit_id)

    @_store_call
    async def get_document(self, unit_id: str) -> Optional[dict[str, Any]]:
        record = await self.session.get(ReservationSettingRecord, unit_id)
        return dict(record.data) if record is not None else None

    @_store_call
    async def save_document(self, unit_id: str, data: Mapping[str, Any]) -> None:
        record = await self.session.get(ReservationSettingRecord, unit_id)
        if record is None:
            record = ReservationSettingRecord(unit_id=unit_id, data=dict(data), updated_at=_utc_now_naive())
            self.session.add(record)
        else:
            record.data = dict(data)
            record.updated_at = _utc_now_naive()
        await self.session.commit()
