import pytest
from booking_engine.domain.errors import InvalidTransitionError
from booking_engine.domain.services import ensure_transition, initial_status
from booking_engine.models import BookingStatus, ReservationMode


def test_initial_status_follows_reservation_mode() -> None:
    assert initial_status(ReservationMode.AUTO) == BookingStatus.CONFIRMED
    assert initial_status(ReservationMode.REQUEST) == BookingStatus.PENDING


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (BookingStatus.PENDING, BookingStatus.CONFIRMED),
        (BookingStatus.PENDING, BookingStatus.CANCELLED),
        (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    ],
)
def test_allowed_transitions(current: BookingStatus, target: BookingStatus) -> None:
    ensure_transition(current, target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (BookingStatus.CONFIRMED, BookingStatus.CONFIRMED),
        (BookingStatus.CONFIRMED, BookingStatus.PENDING),
        (BookingStatus.CANCELLED, BookingStatus.CONFIRMED),
        (BookingStatus.CANCELLED, BookingStatus.PENDING),
        (BookingStatus.CANCELLED, BookingStatus.CANCELLED),
    ],
)
def test_rejected_transitions(current: BookingStatus, target: BookingStatus) -> None:
    with pytest.raises(InvalidTransitionError):
        ensure_transition(current, target)
