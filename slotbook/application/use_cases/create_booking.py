from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, timedelta
from zoneinfo import ZoneInfo

from slotbook.application.dto.booking_draft import BookingDraft
from slotbook.application.exceptions import (
    BackendReadError,
    CompensationError,
    NotAuthorizedError,
    SchedulerError,
    SlotConflictError,
    StoreError,
    StoreWriteError,
    UpstreamWriteError,
)
from slotbook.application.live_snapshot import LiveBookingSnapshot, StaticBookingSnapshot
from slotbook.application.ports.realtime_store import RealtimeStorePort
from slotbook.application.ports.scheduler import SchedulerPort
from slotbook.application.use_cases.conflicts import find_conflicts
from slotbook.application.utils.booking_codec import DecodeError, decode_booking, encode_booking
from slotbook.application.utils.dates import end_of_day, start_of_day, tomorrow_in
from slotbook.application.utils.validation import validate_draft
from slotbook.domain.entities.booking import Booking


class CreateBookingUseCase:
    """
    Validate a draft, enforce slot exclusivity and write it to both backends.

    New bookings go in as a PENDING record first, so the slot is held while the
    scheduler call is in flight but nothing is shown as CREATED. Only after the
    scheduler hands back a schedule id is the record rewritten as CREATED.
    Any failure after the provisional write is rolled back before raising.

    Edits reuse the booking id. The existing CREATED record stays visible until
    the final overwrite. Its schedule is released before the new one is
    requested, since the scheduler refuses overlapping schedules for one
    resource; if the edit fails afterwards, the old window is scheduled again.
    """

    def __init__(
        self,
        store: RealtimeStorePort,
        scheduler: SchedulerPort,
        snapshot: LiveBookingSnapshot | StaticBookingSnapshot,
        timezone: ZoneInfo,
        require_future_start: bool = True,
        compensation_attempts: int = 3,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._snapshot = snapshot
        self._timezone = timezone
        self._require_future_start = require_future_start
        self._compensation_attempts = max(1, compensation_attempts)
        self._today = today
        self._logger = logging.getLogger(__name__)

    def execute(self, draft: BookingDraft) -> Booking:
        candidate = validate_draft(draft, self._earliest_start())

        existing = self._load_existing(candidate.id)
        previous = existing if existing is not None and existing.is_active else None
        if previous is not None and previous.created_by != candidate.created_by:
            raise NotAuthorizedError("Only the creator can edit this booking")

        conflicts = find_conflicts(
            candidate.slot,
            candidate.start_date,
            candidate.end_date,
            self._snapshot.occupying(),
            exclude_id=candidate.id,
        )
        if conflicts:
            self._logger.info(
                "Slot conflict",
                extra={
                    "booking_id": candidate.id,
                    "slot": candidate.slot.value,
                    "reason": ",".join(b.id for b in conflicts),
                },
            )
            raise SlotConflictError(conflicts)

        if previous is not None:
            self._release_previous_schedule(previous)
        else:
            try:
                self._write(candidate)
            except StoreError as e:
                raise StoreWriteError(f"Could not reserve slot: {e}") from e

        try:
            schedule_id = self._scheduler.create_schedule(
                candidate.course_resource_id,
                start_of_day(candidate.start_date, self._timezone),
                end_of_day(candidate.end_date, self._timezone),
            )
        except SchedulerError as e:
            self._logger.error(
                "Scheduler rejected booking",
                extra={"booking_id": candidate.id, "error": str(e)},
            )
            if previous is not None:
                self._restore_previous(previous)
            else:
                self._remove_provisional(candidate.id)
            raise UpstreamWriteError(f"Could not create schedule: {e}") from e

        final = candidate.committed(schedule_id)
        try:
            self._write(final)
        except StoreError as e:
            self._logger.error(
                "Final booking write failed",
                extra={"booking_id": final.id, "schedule_id": schedule_id, "error": str(e)},
            )
            self._roll_back_final_write(final, previous)
            raise StoreWriteError(f"Could not save booking: {e}") from e

        self._logger.info(
            "Booking created",
            extra={"booking_id": final.id, "slot": final.slot.value, "schedule_id": schedule_id},
        )
        return final

    def _earliest_start(self) -> date | None:
        if not self._require_future_start:
            return None
        if self._today is not None:
            return self._today() + timedelta(days=1)
        return tomorrow_in(self._timezone)

    def _load_existing(self, booking_id: str) -> Booking | None:
        try:
            doc = self._store.get(booking_id)
        except StoreError as e:
            raise BackendReadError(f"Could not read booking {booking_id}: {e}") from e
        if doc is None:
            return None
        result = decode_booking(doc, self._timezone)
        if isinstance(result, DecodeError):
            self._logger.warning(
                "Overwriting malformed booking record",
                extra={"booking_id": booking_id, "reason": result.reason},
            )
            return None
        return result

    def _write(self, booking: Booking) -> None:
        self._store.put(booking.id, encode_booking(booking, self._timezone))

    def _release_previous_schedule(self, previous: Booking) -> None:
        old_id = previous.external_schedule_id
        if old_id is None:
            return
        try:
            self._scheduler.cancel_schedule(old_id)
        except SchedulerError as e:
            self._logger.error(
                "Previous schedule not released for edit",
                extra={"booking_id": previous.id, "schedule_id": old_id, "error": str(e)},
            )
            raise UpstreamWriteError(f"Could not release schedule {old_id}: {e}") from e

    def _restore_previous(self, previous: Booking) -> None:
        """Schedule the previous window again and point the stored record at it."""
        old_id = previous.external_schedule_id
        if old_id is None:
            return
        try:
            restored_id = self._scheduler.create_schedule(
                previous.course_resource_id,
                start_of_day(previous.start_date, self._timezone),
                end_of_day(previous.end_date, self._timezone),
            )
        except SchedulerError as e:
            self._logger.critical(
                "Booking left without a schedule after failed edit",
                extra={"booking_id": previous.id, "schedule_id": old_id, "error": str(e)},
            )
            raise CompensationError(
                f"Schedule {old_id} of booking {previous.id} was released and could not be restored",
                booking_id=previous.id,
            ) from e
        try:
            self._write(previous.committed(restored_id))
        except StoreError as e:
            self._logger.critical(
                "Restored schedule not recorded",
                extra={"booking_id": previous.id, "schedule_id": restored_id, "error": str(e)},
            )
            raise CompensationError(
                f"Booking {previous.id} still references released schedule {old_id}, active one is {restored_id}",
                booking_id=previous.id,
            ) from e
        self._logger.info(
            "Previous schedule restored",
            extra={"booking_id": previous.id, "schedule_id": restored_id, "reason": f"replaces {old_id}"},
        )

    def _roll_back_final_write(self, final: Booking, previous: Booking | None) -> None:
        leftovers: list[CompensationError] = []
        try:
            self._undo_schedule(final.id, final.external_schedule_id)
        except CompensationError as e:
            leftovers.append(e)
        try:
            if previous is not None:
                self._restore_previous(previous)
            else:
                self._remove_provisional(final.id)
        except CompensationError as e:
            leftovers.append(e)
        if leftovers:
            raise CompensationError(
                "; ".join(str(e) for e in leftovers),
                booking_id=final.id,
            ) from leftovers[0]

    def _remove_provisional(self, booking_id: str) -> None:
        last_error: StoreError | None = None
        for attempt in range(1, self._compensation_attempts + 1):
            try:
                self._store.delete(booking_id)
                self._logger.info("Provisional booking removed", extra={"booking_id": booking_id})
                return
            except StoreError as e:
                last_error = e
                self._logger.warning(
                    "Provisional delete failed",
                    extra={"booking_id": booking_id, "reason": f"attempt {attempt}", "error": str(e)},
                )
        self._logger.critical(
            "Provisional booking left behind; slot stays blocked until removed",
            extra={"booking_id": booking_id, "error": str(last_error)},
        )
        raise CompensationError(
            f"Rollback failed, provisional booking {booking_id} is still stored",
            booking_id=booking_id,
        ) from last_error

    def _undo_schedule(self, booking_id: str, schedule_id: int) -> None:
        try:
            self._scheduler.cancel_schedule(schedule_id)
        except SchedulerError as e:
            self._logger.critical(
                "Schedule left committed after failed booking write",
                extra={"booking_id": booking_id, "schedule_id": schedule_id, "error": str(e)},
            )
            raise CompensationError(
                f"Rollback failed, schedule {schedule_id} is still committed upstream",
                booking_id=booking_id,
            ) from e
