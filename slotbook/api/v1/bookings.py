from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, Header, HTTPException, status

from slotbook.api.v1.schemas import (
    BookingRequestSchema,
    BookingSchema,
    CancellationResponseSchema,
    ConflictDetailSchema,
    CourseSchema,
    DaySlotSchema,
    DaySlotsResponseSchema,
)
from slotbook.application.dto.booking_draft import BookingDraft
from slotbook.application.exceptions import (
    BackendReadError,
    BookingError,
    InconsistentStateError,
    NotAuthorizedError,
    NotFoundError,
    SlotConflictError,
    StoreWriteError,
    UpstreamWriteError,
    ValidationError,
)
from slotbook.application.live_snapshot import LiveBookingSnapshot
from slotbook.application.use_cases.cancel_booking import CancelBookingUseCase
from slotbook.application.use_cases.create_booking import CreateBookingUseCase
from slotbook.application.use_cases.list_courses import ListCoursesUseCase
from slotbook.application.utils.day_slots import resolve_day_slots
from slotbook.wiring.dependencies import (
    get_cancel_booking_use_case,
    get_create_booking_use_case,
    get_list_courses_use_case,
    get_snapshot,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _to_http(e: BookingError) -> HTTPException:
    if isinstance(e, SlotConflictError):
        detail = ConflictDetailSchema(message=str(e), ranges=e.ranges)
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail.model_dump())
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, NotAuthorizedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, UpstreamWriteError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    if isinstance(e, BackendReadError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    if isinstance(e, (InconsistentStateError, StoreWriteError)):
        logger.error("Booking backends need attention", extra={"error": str(e)})
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


def _draft(req: BookingRequestSchema, created_by: str, booking_id: str | None = None) -> BookingDraft:
    return BookingDraft(
        id=booking_id,
        slot=req.slot,
        course_name=req.course_name,
        course_resource_id=req.course_resource_id,
        start_date=req.start_date,
        end_date=req.end_date,
        created_by=created_by,
        department=req.department,
        coursera_link=req.coursera_link,
        notes=req.notes,
    )


@router.get("/bookings", response_model=list[BookingSchema])
def list_bookings(snapshot: LiveBookingSnapshot = Depends(get_snapshot)):
    return [BookingSchema.from_booking(b) for b in snapshot.bookings()]


@router.get("/bookings/day/{day}", response_model=DaySlotsResponseSchema)
def day_slots(day: date, snapshot: LiveBookingSnapshot = Depends(get_snapshot)):
    slots = resolve_day_slots(day, snapshot.bookings())
    return DaySlotsResponseSchema(day=day, slots=[DaySlotSchema.from_day_slot(s) for s in slots])


@router.post("/bookings", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def create_booking(
    req: BookingRequestSchema,
    x_user_id: str = Header(...),
    uc: CreateBookingUseCase = Depends(get_create_booking_use_case),
):
    try:
        booking = uc.execute(_draft(req, created_by=x_user_id))
    except BookingError as e:
        raise _to_http(e)
    return BookingSchema.from_booking(booking)


@router.put("/bookings/{booking_id}", response_model=BookingSchema)
def update_booking(
    booking_id: str,
    req: BookingRequestSchema,
    x_user_id: str = Header(...),
    uc: CreateBookingUseCase = Depends(get_create_booking_use_case),
):
    try:
        booking = uc.execute(_draft(req, created_by=x_user_id, booking_id=booking_id))
    except BookingError as e:
        raise _to_http(e)
    return BookingSchema.from_booking(booking)


@router.delete("/bookings/{booking_id}", response_model=CancellationResponseSchema)
def cancel_booking(
    booking_id: str,
    x_user_id: str = Header(...),
    uc: CancelBookingUseCase = Depends(get_cancel_booking_use_case),
):
    try:
        result = uc.execute(booking_id, requested_by=x_user_id)
    except BookingError as e:
        raise _to_http(e)
    return CancellationResponseSchema(
        booking_id=result.booking_id,
        schedule_id=result.schedule_id,
        already_cancelled=result.already_cancelled,
    )


@router.get("/courses", response_model=list[CourseSchema])
def list_courses(uc: ListCoursesUseCase = Depends(get_list_courses_use_case)):
    try:
        courses = uc.execute()
    except BookingError as e:
        raise _to_http(e)
    return [CourseSchema.from_course(c) for c in courses]
