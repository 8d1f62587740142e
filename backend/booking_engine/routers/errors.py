from fastapi import HTTPException, status

from ..domain.errors import (
    BookingValidationError,
    CapacityFullError,
    CapacityLimitedError,
    InvalidTransitionError,
    NotFoundError,
    TransientIOError,
)

HANDLED_ERRORS = (BookingValidationError, NotFoundError, InvalidTransitionError, TransientIOError, ValueError)


def to_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, (CapacityFullError, CapacityLimitedError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.to_dict())
    if isinstance(exc, BookingValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.to_dict())
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, InvalidTransitionError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, TransientIOError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="storage unavailable, retry")
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
