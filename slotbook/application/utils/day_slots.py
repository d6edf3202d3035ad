from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from slotbook.domain.entities.booking import Booking
from slotbook.domain.entities.day_slot import DaySlot
from slotbook.domain.entities.slot import Slot


def resolve_day_slots(day: date, bookings: Iterable[Booking]) -> list[DaySlot]:
    """The seven slots of `day`, each with the active booking covering it, if any."""
    occupants: dict[Slot, Booking] = {}
    for booking in bookings:
        if booking.is_active and booking.covers(day):
            occupants.setdefault(booking.slot, booking)
    return [DaySlot(day=day, slot=slot, booking=occupants.get(slot)) for slot in Slot]
