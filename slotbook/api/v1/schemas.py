from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from slotbook.domain.entities.booking import Booking
from slotbook.domain.entities.course import Course
from slotbook.domain.entities.day_slot import DaySlot


class BookingRequestSchema(BaseModel):
    slot: str
    course_name: str
    # Checked by validate_draft.
    course_resource_id: int | str
    start_date: date
    end_date: date
    department: str | None = None
    coursera_link: str | None = None
    notes: str | None = None


class BookingSchema(BaseModel):
    id: str
    slot: str
    course_name: str
    course_resource_id: int
    start_date: date
    end_date: date
    created_by: str
    department: str
    status: str
    external_schedule_id: int | None = None
    coursera_link: str | None = None
    notes: str | None = None

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingSchema":
        return cls(
            id=booking.id,
            slot=booking.slot.value,
            course_name=booking.course_name,
            course_resource_id=booking.course_resource_id,
            start_date=booking.start_date,
            end_date=booking.end_date,
            created_by=booking.created_by,
            department=booking.department.value,
            status=booking.status.value,
            external_schedule_id=booking.external_schedule_id,
            coursera_link=booking.coursera_link,
            notes=booking.notes,
        )


class DaySlotSchema(BaseModel):
    slot: str
    booking: BookingSchema | None = None

    @classmethod
    def from_day_slot(cls, day_slot: DaySlot) -> "DaySlotSchema":
        return cls(
            slot=day_slot.slot.value,
            booking=BookingSchema.from_booking(day_slot.booking) if day_slot.booking else None,
        )


class DaySlotsResponseSchema(BaseModel):
    day: date
    slots: list[DaySlotSchema] = Field(default_factory=list)


class CancellationResponseSchema(BaseModel):
    booking_id: str
    schedule_id: int | None = None
    already_cancelled: bool = False


class CourseSchema(BaseModel):
    id: int
    name: str

    @classmethod
    def from_course(cls, course: Course) -> "CourseSchema":
        return cls(id=course.id, name=course.name)


class ConflictDetailSchema(BaseModel):
    message: str
    ranges: list[str]
