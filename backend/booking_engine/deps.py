from functools import lru_cache
from typing import AsyncIterator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings, get_settings
from .database import get_session_factory
from .domain.events import Actor
from .infrastructure.audit import SqlAlchemyAuditSink
from .infrastructure.notifications import EmailNotifier
from .infrastructure.repositories import SqlAlchemyBookingRepository, SqlAlchemySettingsRepository
from .models import User
from .usecases.lifecycle import SideEffects
from .utils.auth import bearer_token, decode_access_token
from .utils.side_effects import SideEffectRunner


async def get_session() -> AsyncIterator[AsyncSession]:
    async with get_session_factory()() as session:
        yield session


async def get_booking_repo(session: AsyncSession = Depends(get_session)) -> SqlAlchemyBookingRepository:
    return SqlAlchemyBookingRepository(session)


async def get_settings_repo(session: AsyncSession = Depends(get_session)) -> SqlAlchemySettingsRepository:
    return SqlAlchemySettingsRepository(session)


@lru_cache
def get_side_effect_runner() -> SideEffectRunner:
    return SideEffectRunner()


async def get_side_effects(
    runner: SideEffectRunner = Depends(get_side_effect_runner),
    config: Settings = Depends(get_settings),
) -> SideEffects:
    return SideEffects(
        runner=runner,
        audit=SqlAlchemyAuditSink(get_session_factory()),
        notifier=EmailNotifier(config),
    )


async def get_staff_actor(
    authorization: str | None = Header(default=None),
    session: AsyncSession = Depends(get_session),
) -> Actor:
    """Resolve a bearer token to a staff actor; anything else is 401."""
    token = bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="bearer token required")
    settings = get_settings()
    try:
        user_id = decode_access_token(token, secret=settings.auth_secret, algorithms=[settings.auth_algorithm])
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid token") from exc

    try:
        user = await session.get(User, user_id)
    except SQLAlchemyError as exc:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="user lookup failed") from exc
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unknown user")
    return Actor(user_id=user.id, name=user.full_name)
