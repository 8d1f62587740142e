from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Path, Query, status

from ..config import Settings, get_settings
from ..deps import get_booking_repo, get_settings_repo, get_side_effects
from ..infrastructure.repositories import SqlAlchemyBookingRepository, SqlAlchemySettingsRepository
from ..schemas import (
    BookingCancel,
    DayAvailabilityRead,
    GuestBookingCreate,
    GuestBookingRead,
    ReservationSettingsRead,
)
from ..usecases import availability as availability_usecase
from ..usecases import bookings as booking_usecase
from ..usecases.lifecycle import SideEffects
from ..usecases.settings import load_settings
from .errors import HANDLED_ERRORS, to_http_error

router = APIRouter(prefix="", tags=["public"])


@router.get("/units/{unit_id}/settings", response_model=ReservationSettingsRead)
async def get_public_settings(
    unit_id: str,
    settings_repo: SqlAlchemySettingsRepository = Depends(get_settings_repo),
    config: Settings = Depends(get_settings),
) -> ReservationSettingsRead:
    try:
        _, settings = await load_settings(settings_repo, unit_id=unit_id, config=config)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return ReservationSettingsRead.from_domain(settings)


@router.get("/units/{unit_id}/availability", response_model=dict[str, int])
async def get_month_headcounts(
    unit_id: str,
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    booking_repo: SqlAlchemyBookingRepository = Depends(get_booking_repo),
    settings_repo: SqlAlchemySettingsRepository = Depends(get_settings_repo),
    config: Settings = Depends(get_settings),
) -> dict[str, int]:
    try:
        _, settings = await load_settings(settings_repo, unit_id=unit_id, config=config)
        return await availability_usecase.month_headcounts(booking_repo, settings, year=year, month=month)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc


@router.get("/units/{unit_id}/calendar", response_model=List[DayAvailabilityRead])
async def get_month_calendar(
    unit_id: str,
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    booking_repo: SqlAlchemyBookingRepository = Depends(get_booking_repo),
    settings_repo: SqlAlchemySettingsRepository = Depends(get_settings_repo),
    config: Settings = Depends(get_settings),
) -> list[DayAvailabilityRead]:
    try:
        _, settings = await load_settings(settings_repo, unit_id=unit_id, config=config)
        days = await availability_usecase.month_calendar(
            booking_repo, settings, year=year, month=month, today=date.today()
        )
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return [DayAvailabilityRead.from_domain(day) for day in days]


@router.post("/units/{unit_id}/bookings", response_model=GuestBookingRead, status_code=status.HTTP_201_CREATED)
async def create_guest_booking(
    payload: GuestBookingCreate,
    unit_id: str,
    booking_repo: SqlAlchemyBookingRepository = Depends(get_booking_repo),
    settings_repo: SqlAlchemySettingsRepository = Depends(get_settings_repo),
    effects: SideEffects = Depends(get_side_effects),
    config: Settings = Depends(get_settings),
) -> GuestBookingRead:
    try:
        booking = await booking_usecase.submit_booking(
            booking_repo,
            settings_repo,
            effects,
            unit_id=unit_id,
            request=payload.to_request(),
            config=config,
        )
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return GuestBookingRead.from_db(booking=booking)


@router.get("/manage/{reference_code}", response_model=GuestBookingRead)
async def get_guest_booking(
    reference_code: str = Path(..., min_length=8, max_length=64),
    booking_repo: SqlAlchemyBookingRepository = Depends(get_booking_repo),
) -> GuestBookingRead:
    try:
        booking = await booking_usecase.get_by_reference(booking_repo, reference_code=reference_code)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return GuestBookingRead.from_db(booking=booking)


@router.post("/manage/{reference_code}/cancel", response_model=GuestBookingRead)
async def cancel_guest_booking(
    payload: BookingCancel,
    reference_code: str = Path(..., min_length=8, max_length=64),
    booking_repo: SqlAlchemyBookingRepository = Depends(get_booking_repo),
    settings_repo: SqlAlchemySettingsRepository = Depends(get_settings_repo),
    effects: SideEffects = Depends(get_side_effects),
    config: Settings = Depends(get_settings),
) -> GuestBookingRead:
    try:
        booking = await booking_usecase.cancel_by_reference(
            booking_repo,
            settings_repo,
            effects,
            reference_code=reference_code,
            reason=payload.reason,
            config=config,
        )
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return GuestBookingRead.from_db(booking=booking)
