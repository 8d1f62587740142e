from datetime import datetime

import pytest
from booking_engine.domain.errors import TransientIOError
from booking_engine.infrastructure.repositories import SqlAlchemyBookingRepository, SqlAlchemySettingsRepository
from booking_engine.models import BookingStatus
from sqlalchemy.exc import OperationalError


class FailingSession:
    def __init__(self) -> None:
        self.rolled_back = False

    async def scalars(self, *args: object, **kwargs: object) -> object:
        raise OperationalError("SELECT", None, Exception("connection reset"))

    async def get(self, *args: object, **kwargs: object) -> object:
        raise OperationalError("SELECT", None, Exception("connection reset"))

    async def rollback(self) -> None:
        self.rolled_back = True


@pytest.mark.asyncio
async def test_booking_query_failure_becomes_transient_error() -> None:
    session = FailingSession()
    repo = SqlAlchemyBookingRepository(session)  # type: ignore[arg-type]
    with pytest.raises(TransientIOError):
        await repo.query_bookings(
            "bistro", datetime(2024, 7, 28), datetime(2024, 7, 28, 23, 59), [BookingStatus.PENDING]
        )
    assert session.rolled_back is True


@pytest.mark.asyncio
async def test_settings_read_failure_becomes_transient_error() -> None:
    repo = SqlAlchemySettingsRepository(FailingSession())  # type: ignore[arg-type]
    with pytest.raises(TransientIOError):
        await repo.get_document("bistro")
