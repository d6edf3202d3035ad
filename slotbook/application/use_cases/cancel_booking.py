from __future__ import annotations

import logging
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from slotbook.application.exceptions import (
    BackendReadError,
    InconsistentStateError,
    NotAuthorizedError,
    NotFoundError,
    SchedulerError,
    StoreError,
    UpstreamWriteError,
)
from slotbook.application.ports.realtime_store import RealtimeStorePort
from slotbook.application.ports.scheduler import SchedulerPort
from slotbook.application.utils.booking_codec import DecodeError, decode_booking, encode_booking
from slotbook.domain.entities.booking import Booking, BookingStatus

CANCEL_MODES = ("delete", "mark")


@dataclass(frozen=True)
class CancellationResult:
    booking_id: str
    schedule_id: int | None
    already_cancelled: bool = False


class CancelBookingUseCase:
    """
    Retire a booking from the scheduler first, then from the store.

    If the scheduler refuses, the store is left alone so the slot still shows
    as taken and the caller can retry.
    """

    def __init__(
        self,
        store: RealtimeStorePort,
        scheduler: SchedulerPort,
        timezone: ZoneInfo,
        mode: str = "delete",
    ) -> None:
        if mode not in CANCEL_MODES:
            raise ValueError(f"Unknown cancel mode: {mode}")
        self._store = store
        self._scheduler = scheduler
        self._timezone = timezone
        self._mode = mode
        self._logger = logging.getLogger(__name__)

    def execute(self, booking_id: str, requested_by: str | None = None) -> CancellationResult:
        booking = self._load(booking_id)

        if requested_by is not None and booking.created_by != requested_by:
            raise NotAuthorizedError("Only the creator can cancel this booking")

        if booking.status == BookingStatus.CANCELLED:
            return CancellationResult(
                booking_id=booking.id,
                schedule_id=booking.external_schedule_id,
                already_cancelled=True,
            )

        schedule_id = booking.external_schedule_id
        if schedule_id is None:
            self._logger.error(
                "Booking has no schedule id; it was never committed upstream",
                extra={"booking_id": booking.id, "reason": booking.status.value},
            )
            raise InconsistentStateError(f"Booking {booking.id} has no external schedule id")

        try:
            self._scheduler.cancel_schedule(schedule_id)
        except SchedulerError as e:
            self._logger.warning(
                "Scheduler refused cancellation",
                extra={"booking_id": booking.id, "schedule_id": schedule_id, "error": str(e)},
            )
            raise UpstreamWriteError(f"Could not cancel schedule {schedule_id}: {e}") from e

        try:
            self._retire(booking)
        except StoreError as e:
            self._logger.error(
                "Schedule cancelled but booking still stored",
                extra={"booking_id": booking.id, "schedule_id": schedule_id, "error": str(e)},
            )
            raise InconsistentStateError(
                f"Schedule {schedule_id} was cancelled but booking {booking.id} could not be removed"
            ) from e

        self._logger.info(
            "Booking cancelled",
            extra={"booking_id": booking.id, "slot": booking.slot.value, "schedule_id": schedule_id},
        )
        return CancellationResult(booking_id=booking.id, schedule_id=schedule_id)

    def _load(self, booking_id: str) -> Booking:
        try:
            doc = self._store.get(booking_id)
        except StoreError as e:
            raise BackendReadError(f"Could not read booking {booking_id}: {e}") from e
        if doc is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        result = decode_booking(doc, self._timezone)
        if isinstance(result, DecodeError):
            self._logger.error(
                "Stored booking cannot be decoded",
                extra={"booking_id": booking_id, "reason": result.reason},
            )
            raise InconsistentStateError(f"Booking {booking_id} is malformed: {result.reason}")
        return result

    def _retire(self, booking: Booking) -> None:
        if self._mode == "mark":
            cancelled = booking.with_status(BookingStatus.CANCELLED)
            self._store.put(booking.id, encode_booking(cancelled, self._timezone))
        else:
            self._store.delete(booking.id)
