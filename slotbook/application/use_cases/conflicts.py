from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from slotbook.domain.entities.booking import Booking
from slotbook.domain.entities.slot import Slot


def ranges_overlap(start: date, end: date, other_start: date, other_end: date) -> bool:
    """Closed-interval test; a shared boundary day counts as overlap."""
    return start <= other_end and end >= other_start


def find_conflicts(
    slot: Slot,
    start: date,
    end: date,
    bookings: Iterable[Booking],
    exclude_id: str | None = None,
) -> list[Booking]:
    """
    Bookings that already hold `slot` on any day of [start, end].

    The candidate's own record is skipped by id, so re-validating an edit
    never conflicts with itself. Only slot-holding statuses are considered.
    """
    conflicts: list[Booking] = []
    for booking in bookings:
        if booking.slot != slot or not booking.occupies_slot:
            continue
        if exclude_id is not None and booking.id == exclude_id:
            continue
        if ranges_overlap(start, end, booking.start_date, booking.end_date):
            conflicts.append(booking)
    return conflicts


def is_slot_available(
    slot: Slot,
    start: date,
    end: date,
    bookings: Iterable[Booking],
    exclude_id: str | None = None,
) -> bool:
    return not find_conflicts(slot, start, end, bookings, exclude_id)


def bookings_conflict(a: Booking, b: Booking) -> bool:
    if a.id == b.id or a.slot != b.slot:
        return False
    return ranges_overlap(a.start_date, a.end_date, b.start_date, b.end_date)
