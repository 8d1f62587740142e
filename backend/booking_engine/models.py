from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Optional

from sqlalchemy import JSON, CheckConstraint, Enum, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql.sqltypes import BigInteger, DateTime, Integer, String, Text


class Base(DeclarativeBase):
    pass


class BookingStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class BookingSource(StrEnum):
    GUEST = "guest"
    MANUAL = "manual"


class ReservationMode(StrEnum):
    REQUEST = "request"
    AUTO = "auto"


class LogType(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


def _str_enum(enum_cls: type[StrEnum]) -> Enum:
    return Enum(
        enum_cls,
        values_callable=lambda cls: [e.value for e in cls],
        native_enum=False,
    )


class User(Base):
    """Staff member allowed to manage bookings."""

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)


class Unit(Base):
    __tablename__ = "units"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    setting: Mapped[Optional["ReservationSettingRecord"]] = relationship(back_populates="unit")
    bookings: Mapped[list["Booking"]] = relationship(back_populates="unit")


class ReservationSettingRecord(Base):
    """Settings document per venue, stored as-is and merged onto defaults on read."""

    __tablename__ = "reservation_settings"

    unit_id: Mapped[str] = mapped_column(ForeignKey("units.id"), primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    unit: Mapped["Unit"] = relationship(back_populates="setting")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="chk_bookings_time"),
        CheckConstraint("headcount >= 1", name="chk_bookings_headcount"),
        UniqueConstraint("reference_code", name="uq_bookings_reference"),
        Index("idx_bookings_unit_start", "unit_id", "start_time"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    unit_id: Mapped[str] = mapped_column(ForeignKey("units.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    headcount: Mapped[int] = mapped_column(Integer, nullable=False)
    occasion: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    heard_from: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        _str_enum(BookingStatus), nullable=False, default=BookingStatus.PENDING
    )
    source: Mapped[BookingSource] = mapped_column(_str_enum(BookingSource), nullable=False)
    # Guest bookings carry normalized contact_*; staff bookings carry phone/email as typed.
    contact_phone_e164: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    locale: Mapped[str] = mapped_column(String(8), nullable=False, default="hu")
    reference_code: Mapped[str] = mapped_column(String(64), nullable=False)
    custom_data: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    cancel_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    unit: Mapped["Unit"] = relationship(back_populates="bookings")

    @property
    def guest_email(self) -> str | None:
        return self.contact_email or self.email

    @property
    def guest_phone(self) -> str | None:
        return self.contact_phone_e164 or self.phone


class ReservationLog(Base):
    __tablename__ = "reservation_logs"
    __table_args__ = (Index("idx_logs_unit", "unit_id"), Index("idx_logs_booking", "booking_id"))

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    unit_id: Mapped[str] = mapped_column(String(64), nullable=False)
    type: Mapped[LogType] = mapped_column(_str_enum(LogType), nullable=False)
    source: Mapped[BookingSource] = mapped_column(_str_enum(BookingSource), nullable=False)
    performed_by_user_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    performed_by_name: Mapped[str] = mapped_column(String(255), nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
