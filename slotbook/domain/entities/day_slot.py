from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from slotbook.domain.entities.booking import Booking
from slotbook.domain.entities.slot import Slot


@dataclass(frozen=True)
class DaySlot:
    day: date
    slot: Slot
    booking: Booking | None = None

    @property
    def is_free(self) -> bool:
        return self.booking is None
