from datetime import date
from typing import Any, List

from fastapi import APIRouter, Body, Depends, Path, Query, status

from ..config import Settings, get_settings
from ..deps import get_booking_repo, get_settings_repo, get_side_effects, get_staff_actor
from ..domain.events import Actor
from ..infrastructure.repositories import SqlAlchemyBookingRepository, SqlAlchemySettingsRepository
from ..schemas import BookingCancel, BookingRead, BookingUpdate, ManualBookingCreate, ReservationSettingsRead
from ..usecases import bookings as booking_usecase
from ..usecases import settings as settings_usecase
from ..usecases.lifecycle import SideEffects
from .errors import HANDLED_ERRORS, to_http_error

router = APIRouter(prefix="/staff/units/{unit_id}", tags=["staff"])


@router.get("/bookings", response_model=List[BookingRead])
async def list_bookings(
    unit_id: str,
    start: date = Query(...),
    end: date = Query(...),
    booking_repo: SqlAlchemyBookingRepository = Depends(get_booking_repo),
    settings_repo: SqlAlchemySettingsRepository = Depends(get_settings_repo),
    actor: Actor = Depends(get_staff_actor),
) -> list[BookingRead]:
    try:
        rows = await booking_usecase.list_bookings(
            booking_repo, settings_repo, unit_id=unit_id, start=start, end=end
        )
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return [BookingRead.from_db(booking=booking) for booking in rows]


@router.post("/bookings", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def create_manual_booking(
    payload: ManualBookingCreate,
    unit_id: str,
    booking_repo: SqlAlchemyBookingRepository = Depends(get_booking_repo),
    settings_repo: SqlAlchemySettingsRepository = Depends(get_settings_repo),
    effects: SideEffects = Depends(get_side_effects),
    config: Settings = Depends(get_settings),
    actor: Actor = Depends(get_staff_actor),
) -> BookingRead:
    try:
        booking = await booking_usecase.submit_booking(
            booking_repo,
            settings_repo,
            effects,
            unit_id=unit_id,
            request=payload.to_request(),
            config=config,
            actor=actor,
        )
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return BookingRead.from_db(booking=booking)


@router.post("/bookings/{booking_id}/confirm", response_model=BookingRead)
async def confirm_booking(
    unit_id: str,
    booking_id: int = Path(..., ge=1),
    booking_repo: SqlAlchemyBookingRepository = Depends(get_booking_repo),
    effects: SideEffects = Depends(get_side_effects),
    actor: Actor = Depends(get_staff_actor),
) -> BookingRead:
    try:
        booking = await booking_usecase.confirm_booking(
            booking_repo, effects, unit_id=unit_id, booking_id=booking_id, actor=actor
        )
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return BookingRead.from_db(booking=booking)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingRead)
async def cancel_booking(
    payload: BookingCancel,
    unit_id: str,
    booking_id: int = Path(..., ge=1),
    booking_repo: SqlAlchemyBookingRepository = Depends(get_booking_repo),
    effects: SideEffects = Depends(get_side_effects),
    actor: Actor = Depends(get_staff_actor),
) -> BookingRead:
    try:
        booking = await booking_usecase.cancel_booking(
            booking_repo,
            effects,
            unit_id=unit_id,
            booking_id=booking_id,
            reason=payload.reason,
            actor=actor,
        )
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return BookingRead.from_db(booking=booking)


@router.patch("/bookings/{booking_id}", response_model=BookingRead)
async def update_booking(
    payload: BookingUpdate,
    unit_id: str,
    booking_id: int = Path(..., ge=1),
    booking_repo: SqlAlchemyBookingRepository = Depends(get_booking_repo),
    settings_repo: SqlAlchemySettingsRepository = Depends(get_settings_repo),
    effects: SideEffects = Depends(get_side_effects),
    config: Settings = Depends(get_settings),
    actor: Actor = Depends(get_staff_actor),
) -> BookingRead:
    try:
        booking = await booking_usecase.update_booking(
            booking_repo,
            settings_repo,
            effects,
            unit_id=unit_id,
            booking_id=booking_id,
            changes=payload.changes(),
            actor=actor,
            config=config,
        )
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return BookingRead.from_db(booking=booking)


@router.get("/settings", response_model=ReservationSettingsRead)
async def get_settings_document(
    unit_id: str,
    settings_repo: SqlAlchemySettingsRepository = Depends(get_settings_repo),
    config: Settings = Depends(get_settings),
    actor: Actor = Depends(get_staff_actor),
) -> ReservationSettingsRead:
    try:
        _, settings = await settings_usecase.load_settings(settings_repo, unit_id=unit_id, config=config)
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return ReservationSettingsRead.from_domain(settings)


@router.put("/settings", response_model=ReservationSettingsRead)
async def replace_settings_document(
    unit_id: str,
    document: dict[str, Any] = Body(...),
    settings_repo: SqlAlchemySettingsRepository = Depends(get_settings_repo),
    config: Settings = Depends(get_settings),
    actor: Actor = Depends(get_staff_actor),
) -> ReservationSettingsRead:
    try:
        settings = await settings_usecase.replace_settings(
            settings_repo, unit_id=unit_id, document=document, config=config
        )
    except HANDLED_ERRORS as exc:
        raise to_http_error(exc) from exc
    return ReservationSettingsRead.from_domain(settings)
