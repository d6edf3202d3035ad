from __future__ import annotations

from typing import TYPE_CHECKING

from slotbook.application.utils.dates import describe_range

if TYPE_CHECKING:
    from slotbook.domain.entities.booking import Booking


class StoreError(RuntimeError):
    """Raised by realtime store adapters when a read or write fails."""
    pass


class SchedulerError(RuntimeError):
    """Base for remote scheduler adapter failures."""
    pass


class SchedulerRejectedError(SchedulerError):
    """Raised when the scheduler answers but refuses the request (4xx/5xx, bad body)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SchedulerUnavailableError(SchedulerError):
    """Raised on timeouts and transport failures."""
    pass


class BookingError(Exception):
    """Base for errors surfaced to booking callers."""
    pass


class ValidationError(BookingError):
    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class SlotConflictError(BookingError):
    def __init__(self, conflicts: list["Booking"]) -> None:
        self.conflicts = list(conflicts)
        self.ranges = [describe_range(b) for b in self.conflicts]
        super().__init__("Slot already booked for: " + ", ".join(self.ranges))


class NotFoundError(BookingError):
    pass


class NotAuthorizedError(BookingError):
    pass


class UpstreamWriteError(BookingError):
    """The remote scheduler call failed; the local store was rolled back or left untouched."""
    pass


class StoreWriteError(BookingError):
    """The realtime store write failed; upstream side effects were rolled back."""
    pass


class InconsistentStateError(BookingError):
    """The store and the scheduler disagree. Indicates an earlier bug or partial failure."""
    pass


class CompensationError(InconsistentStateError):
    """A rollback step failed and left a dangling record behind."""

    def __init__(self, message: str, booking_id: str) -> None:
        super().__init__(message)
        self.booking_id = booking_id


class BackendReadError(BookingError):
    """A backend could not be read; nothing was written."""
    pass
