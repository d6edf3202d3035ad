from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum

from slotbook.domain.entities.slot import Slot


class BookingStatus(str, Enum):
    PENDING = "PENDING"  # provisional, not yet committed upstream
    CREATED = "CREATED"
    CANCELLED = "CANCELLED"


# Statuses that hold a slot for conflict purposes.
OCCUPYING_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CREATED})


class Department(str, Enum):
    APP_DEV = "AppDev"
    QA = "QA"
    DMR = "DMR"
    NOC = "NOC"
    OTHERS = "Others"

    @classmethod
    def parse(cls, raw: object) -> "Department":
        for member in cls:
            if isinstance(raw, str) and raw.strip().lower() == member.value.lower():
                return member
        return cls.OTHERS


@dataclass(frozen=True)
class Booking:
    id: str
    slot: Slot
    course_name: str
    course_resource_id: int
    start_date: date
    end_date: date
    created_by: str
    department: Department = Department.OTHERS
    status: BookingStatus = BookingStatus.CREATED
    external_schedule_id: int | None = None
    coursera_link: str | None = None
    notes: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == BookingStatus.CREATED

    @property
    def occupies_slot(self) -> bool:
        return self.status in OCCUPYING_STATUSES

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def with_status(self, status: BookingStatus) -> "Booking":
        return replace(self, status=status)

    def committed(self, schedule_id: int) -> "Booking":
        return replace(self, status=BookingStatus.CREATED, external_schedule_id=schedule_id)
