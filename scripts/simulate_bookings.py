#!/usr/bin/env python3
"""
Walk through the booking lifecycle against in-memory backends.

Usage:
  python3 scripts/simulate_bookings.py

Creates, conflicts, cancels and re-creates bookings, printing the slot
grid after each step. No network access.
"""

from __future__ import annotations

import sys
from datetime import date, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from slotbook.application.dto.booking_draft import BookingDraft
from slotbook.application.exceptions import BookingError
from slotbook.application.live_snapshot import LiveBookingSnapshot
from slotbook.application.use_cases.cancel_booking import CancelBookingUseCase
from slotbook.application.use_cases.create_booking import CreateBookingUseCase
from slotbook.application.utils.day_slots import resolve_day_slots
from slotbook.infrastructure.scheduler.mock_scheduler import MockScheduler
from slotbook.infrastructure.store.memory_store import MemoryRealtimeStore


def _print_day(snapshot: LiveBookingSnapshot, day: date) -> None:
    print(f"  {day:%a %b %d}")
    for day_slot in resolve_day_slots(day, snapshot.bookings()):
        occupant = day_slot.booking.course_name if day_slot.booking else "-"
        print(f"    {day_slot.slot.value}: {occupant}")


def main() -> int:
    tz = ZoneInfo("UTC")
    store = MemoryRealtimeStore()
    scheduler = MockScheduler()
    start = date.today() + timedelta(days=7)

    with LiveBookingSnapshot(store, tz) as snapshot:
        create = CreateBookingUseCase(store, scheduler, snapshot, tz)
        cancel = CancelBookingUseCase(store, scheduler, tz)

        def attempt(label: str, **fields: object) -> str | None:
            draft = BookingDraft(created_by="demo-user", course_name="Google Data Analytics", **fields)
            try:
                booking = create.execute(draft)
            except BookingError as e:
                print(f"❌ {label}: {type(e).__name__}: {e}")
                return None
            print(f"✅ {label}: {booking.id} schedule={booking.external_schedule_id}")
            return booking.id

        first = attempt("SLOT 3 for five days", slot="SLOT 3", course_resource_id=12,
                        start_date=start, end_date=start + timedelta(days=4))
        attempt("Overlap in SLOT 3", slot="SLOT 3", course_resource_id=12,
                start_date=start + timedelta(days=2), end_date=start + timedelta(days=3))
        attempt("Same dates in SLOT 4", slot="SLOT 4", course_resource_id=7,
                start_date=start + timedelta(days=2), end_date=start + timedelta(days=3))
        attempt("Bad resource id", slot="SLOT 5", course_resource_id="abc",
                start_date=start, end_date=start)
        _print_day(snapshot, start + timedelta(days=2))

        if first:
            result = cancel.execute(first, requested_by="demo-user")
            print(f"✅ Cancelled {result.booking_id} (schedule {result.schedule_id})")
        attempt("Overlap in SLOT 3 after cancel", slot="SLOT 3", course_resource_id=12,
                start_date=start + timedelta(days=2), end_date=start + timedelta(days=3))
        _print_day(snapshot, start + timedelta(days=2))

    print(f"\nActive schedules upstream: {len(scheduler.active_schedules())}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
