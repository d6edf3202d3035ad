"""
Tests for cancelling bookings in both backends.
"""

from __future__ import annotations

from datetime import date

import pytest

from slotbook.application.exceptions import (
    InconsistentStateError,
    NotAuthorizedError,
    NotFoundError,
    SchedulerRejectedError,
    UpstreamWriteError,
)
from slotbook.application.use_cases.cancel_booking import CancelBookingUseCase
from slotbook.application.utils.booking_codec import encode_booking
from slotbook.domain.entities.booking import Booking, BookingStatus
from slotbook.domain.entities.slot import Slot

from conftest import TZ, make_draft


def test_cancel_frees_slot_for_new_booking(create_uc, cancel_uc, store, scheduler):
    first = create_uc.execute(make_draft())

    result = cancel_uc.execute(first.id, requested_by="user-1")

    assert result.schedule_id == first.external_schedule_id
    assert store.get(first.id) is None
    assert scheduler.get(first.external_schedule_id).status == "CANCELLED"

    again = create_uc.execute(make_draft(start_date=date(2025, 6, 3), end_date=date(2025, 6, 4)))
    assert again.status == BookingStatus.CREATED


def test_cancel_unknown_booking(cancel_uc):
    with pytest.raises(NotFoundError):
        cancel_uc.execute("missing")


def test_second_cancel_does_not_touch_scheduler(create_uc, cancel_uc, scheduler):
    booking = create_uc.execute(make_draft())
    cancel_uc.execute(booking.id)

    with pytest.raises(NotFoundError):
        cancel_uc.execute(booking.id)
    assert scheduler.cancel_calls == 1


def test_mark_mode_keeps_cancelled_record(create_uc, store, scheduler):
    uc = CancelBookingUseCase(store, scheduler, TZ, mode="mark")
    booking = create_uc.execute(make_draft())

    uc.execute(booking.id)
    assert store.get(booking.id)["status"] == "CANCELLED"

    repeat = uc.execute(booking.id)
    assert repeat.already_cancelled is True
    assert scheduler.cancel_calls == 1


def test_scheduler_refusal_leaves_store_untouched(create_uc, cancel_uc, store, scheduler, snapshot):
    booking = create_uc.execute(make_draft())
    scheduler.fail_next_cancel = SchedulerRejectedError("nope", status_code=500)

    with pytest.raises(UpstreamWriteError):
        cancel_uc.execute(booking.id)

    assert store.get(booking.id)["status"] == "CREATED"
    assert [b.id for b in snapshot.bookings()] == [booking.id]


def test_missing_schedule_id_is_inconsistent(cancel_uc, store, scheduler):
    stray = Booking(
        id="stray",
        slot=Slot.SLOT_1,
        course_name="Course",
        course_resource_id=3,
        start_date=date(2025, 6, 1),
        end_date=date(2025, 6, 1),
        created_by="user-1",
    )
    store.put(stray.id, encode_booking(stray, TZ))

    with pytest.raises(InconsistentStateError):
        cancel_uc.execute("stray")
    assert scheduler.cancel_calls == 0
    assert store.get("stray") is not None


def test_only_creator_can_cancel(create_uc, cancel_uc, scheduler):
    booking = create_uc.execute(make_draft())
    with pytest.raises(NotAuthorizedError):
        cancel_uc.execute(booking.id, requested_by="intruder")
    assert scheduler.cancel_calls == 0


def test_store_failure_after_remote_cancel_is_inconsistent(create_uc, cancel_uc, store):
    booking = create_uc.execute(make_draft())
    store.fail_deletes = 1

    with pytest.raises(InconsistentStateError):
        cancel_uc.execute(booking.id)


def test_unknown_cancel_mode_rejected(store, scheduler):
    with pytest.raises(ValueError):
        CancelBookingUseCase(store, scheduler, TZ, mode="archive")
