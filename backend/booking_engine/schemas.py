from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .domain.settings import ReservationSettings, TimeWindow
from .models import Booking, BookingSource, BookingStatus, ReservationMode
from .usecases.availability import DayAvailability
from .usecases.bookings import BookingRequest
from .utils.contact import mask_phone

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class GuestBookingCreate(BaseModel):
    date: date
    start_time: str = Field(pattern=HHMM_PATTERN)
    end_time: Optional[str] = Field(default=None, pattern=HHMM_PATTERN)
    headcount: int = Field(ge=1)
    name: str = Field(min_length=1, max_length=255)
    phone: str = Field(default="", max_length=50)
    email: str = Field(default="", max_length=255)
    locale: Literal["hu", "en"] = "hu"
    custom_data: dict[str, str] = Field(default_factory=dict)

    def to_request(self) -> BookingRequest:
        return BookingRequest(
            booking_date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            headcount=self.headcount,
            name=self.name,
            phone=self.phone,
            email=self.email,
            locale=self.locale,
            custom_data=dict(self.custom_data),
        )


class ManualBookingCreate(GuestBookingCreate):
    occasion: str = Field(default="", max_length=255)
    notes: Optional[str] = None

    def to_request(self) -> BookingRequest:
        request = super().to_request()
        request.occasion = self.occasion
        request.notes = self.notes
        return request


class BookingUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    headcount: Optional[int] = Field(default=None, ge=1)
    occasion: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    custom_data: Optional[dict[str, str]] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _venue_local(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            raise ValueError("times are venue-local and must not carry a timezone")
        return value

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class BookingCancel(BaseModel):
    reason: str = Field(default="", max_length=500)


class BookingRead(BaseModel):
    booking_id: int
    unit_id: str
    name: str
    headcount: int
    occasion: str
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    source: BookingSource
    phone: Optional[str]
    email: Optional[str]
    notes: Optional[str]
    locale: str
    reference_code: str
    custom_data: dict[str, str]
    created_at: datetime
    cancelled_at: Optional[datetime]
    cancel_reason: Optional[str]

    @classmethod
    def from_db(cls, *, booking: Booking) -> "BookingRead":
        return cls(
            booking_id=booking.id,
            unit_id=booking.unit_id,
            name=booking.name,
            headcount=booking.headcount,
            occasion=booking.occasion,
            start_time=booking.start_time,
            end_time=booking.end_time,
            status=booking.status,
            source=booking.source,
            phone=booking.guest_phone,
            email=booking.guest_email,
            notes=booking.notes,
            locale=booking.locale,
            reference_code=booking.reference_code,
            custom_data=dict(booking.custom_data or {}),
            created_at=booking.created_at,
            cancelled_at=booking.cancelled_at,
            cancel_reason=booking.cancel_reason,
        )


class GuestBookingRead(BaseModel):
    """What an unauthenticated guest sees through their reference code."""

    reference_code: str
    unit_id: str
    name: str
    headcount: int
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    phone: str
    email: str
    locale: str

    @classmethod
    def from_db(cls, *, booking: Booking) -> "GuestBookingRead":
        return cls(
            reference_code=booking.reference_code,
            unit_id=booking.unit_id,
            name=booking.name,
            headcount=booking.headcount,
            start_time=booking.start_time,
            end_time=booking.end_time,
            status=booking.status,
            phone=mask_phone(booking.guest_phone or ""),
            email=booking.guest_email or "",
            locale=booking.locale,
        )


class DayAvailabilityRead(BaseModel):
    date: date
    headcount: int
    remaining: Optional[int]
    is_full: bool
    is_blackout: bool
    is_past: bool

    @classmethod
    def from_domain(cls, day: DayAvailability) -> "DayAvailabilityRead":
        return cls(
            date=day.date,
            headcount=day.headcount,
            remaining=day.remaining,
            is_full=day.is_full,
            is_blackout=day.is_blackout,
            is_past=day.is_past,
        )


class TimeWindowRead(BaseModel):
    start: str = Field(serialization_alias="from")
    end: str = Field(serialization_alias="to")

    @classmethod
    def from_domain(cls, window: Optional[TimeWindow]) -> Optional["TimeWindowRead"]:
        if window is None:
            return None
        return cls(start=window.start, end=window.end)


class ReservationSettingsRead(BaseModel):
    unit_id: str
    blackout_dates: list[date]
    daily_capacity: Optional[int]
    bookable_window: TimeWindowRead
    kitchen_window: Optional[TimeWindowRead]
    bar_window: Optional[TimeWindowRead]
    reservation_mode: ReservationMode
    notification_emails: list[str]

    @field_serializer("blackout_dates")
    def _ser_dates(self, dates: list[date]) -> list[str]:
        return [d.isoformat() for d in sorted(dates)]

    @classmethod
    def from_domain(cls, settings: ReservationSettings) -> "ReservationSettingsRead":
        return cls(
            unit_id=settings.unit_id,
            blackout_dates=list(settings.blackout_dates),
            daily_capacity=settings.daily_capacity,
            bookable_window=TimeWindowRead.from_domain(settings.bookable_window),
            kitchen_window=TimeWindowRead.from_domain(settings.kitchen_window),
            bar_window=TimeWindowRead.from_domain(settings.bar_window),
            reservation_mode=settings.reservation_mode,
            notification_emails=list(settings.notification_emails),
        )
