from __future__ import annotations

from enum import Enum


class Slot(str, Enum):
    SLOT_1 = "SLOT 1"
    SLOT_2 = "SLOT 2"
    SLOT_3 = "SLOT 3"
    SLOT_4 = "SLOT 4"
    SLOT_5 = "SLOT 5"
    SLOT_6 = "SLOT 6"
    SLOT_7 = "SLOT 7"

    @property
    def number(self) -> int:
        return int(self.value.split(" ")[1])

    @classmethod
    def parse(cls, raw: object) -> "Slot":
        """Accept "SLOT 3", "slot 3", 3 or "3". Raises ValueError otherwise."""
        if isinstance(raw, Slot):
            return raw
        if isinstance(raw, int) and not isinstance(raw, bool):
            return cls(f"SLOT {raw}")
        if isinstance(raw, str):
            text = raw.strip().upper()
            if text.isdecimal():
                return cls(f"SLOT {int(text)}")
            return cls(" ".join(text.split()))
        raise ValueError(f"Unknown slot: {raw!r}")
