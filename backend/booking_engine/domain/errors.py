class BookingValidationError(Exception):
    """Recoverable rejection of a booking candidate, shown to the user as-is."""

    reason = "validation_error"

    def to_dict(self) -> dict[str, object]:
        return {"reason": self.reason, "message": str(self)}


class BlackoutDateError(BookingValidationError):
    reason = "blackout_date"

    def __init__(self, message: str = "no bookings are accepted on this date") -> None:
        super().__init__(message)


class TimeWindowViolationError(BookingValidationError):
    reason = "time_window_violation"

    def __init__(self, window_from: str, window_to: str) -> None:
        super().__init__(f"bookings are only accepted between {window_from} and {window_to}")
        self.window_from = window_from
        self.window_to = window_to

    def to_dict(self) -> dict[str, object]:
        return {**super().to_dict(), "from": self.window_from, "to": self.window_to}


class CapacityFullError(BookingValidationError):
    reason = "capacity_full"

    def __init__(self, message: str = "the selected date is fully booked") -> None:
        super().__init__(message)


class CapacityLimitedError(BookingValidationError):
    reason = "capacity_limited"

    def __init__(self, remaining: int) -> None:
        super().__init__(f"only {remaining} seats are left on the selected date")
        self.remaining = remaining

    def to_dict(self) -> dict[str, object]:
        return {**super().to_dict(), "remaining": self.remaining}


class NotFoundError(Exception):
    pass


class TransientIOError(Exception):
    """A read or write against the store failed; the whole submission may be retried."""


class SideEffectError(Exception):
    """Audit or notification delivery failed. Logged, never surfaced."""


class InvalidTransitionError(Exception):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"cannot move booking from {current} to {target}")
        self.current = current
        self.target = target


class SettingsError(ValueError):
    pass
