from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from zoneinfo import ZoneInfo

from slotbook.application.utils.dates import end_of_day, parse_iso_day, start_of_day, to_iso
from slotbook.domain.entities.booking import Booking, BookingStatus, Department
from slotbook.domain.entities.slot import Slot


@dataclass(frozen=True)
class DecodeError:
    document_id: str | None
    reason: str


def encode_booking(booking: Booking, tz: ZoneInfo) -> dict[str, Any]:
    """Booking to the `events/{id}` wire document."""
    doc: dict[str, Any] = {
        "id": booking.id,
        "title": booking.course_name,
        "slotNumber": booking.slot.value,
        "start": to_iso(start_of_day(booking.start_date, tz)),
        "end": to_iso(end_of_day(booking.end_date, tz)),
        "resources": [{"id": booking.course_resource_id}],
        "createdBy": booking.created_by,
        "department": booking.department.value,
        "status": booking.status.value,
    }
    if booking.coursera_link:
        doc["courseraLink"] = booking.coursera_link
    if booking.notes:
        doc["notes"] = booking.notes
    if booking.external_schedule_id is not None:
        doc["hourglassId"] = booking.external_schedule_id
    return doc


def decode_booking(doc: Any, tz: ZoneInfo) -> Booking | DecodeError:
    """Strict decode of a wire document. Anything malformed is rejected whole."""
    if not isinstance(doc, dict):
        return DecodeError(None, "document is not an object")

    booking_id = doc.get("id")
    if not isinstance(booking_id, str) or not booking_id:
        return DecodeError(None, "missing id")

    try:
        slot = Slot.parse(doc.get("slotNumber"))
    except ValueError:
        return DecodeError(booking_id, f"unknown slot {doc.get('slotNumber')!r}")

    title = doc.get("title")
    if not isinstance(title, str) or not title:
        return DecodeError(booking_id, "missing title")

    try:
        start_date = parse_iso_day(doc.get("start"), tz)
        end_date = parse_iso_day(doc.get("end"), tz)
    except (TypeError, ValueError):
        return DecodeError(booking_id, "unparseable start/end")
    if end_date < start_date:
        return DecodeError(booking_id, "end before start")

    resource_id = _first_resource_id(doc.get("resources"))
    if resource_id is None:
        return DecodeError(booking_id, "missing or invalid resource id")

    try:
        status = BookingStatus(doc.get("status", BookingStatus.CREATED.value))
    except ValueError:
        return DecodeError(booking_id, f"unknown status {doc.get('status')!r}")

    schedule_id = doc.get("hourglassId")
    if schedule_id is not None:
        schedule_id = _as_int(schedule_id)
        if schedule_id is None:
            return DecodeError(booking_id, "invalid hourglassId")

    created_by = doc.get("createdBy")
    if not isinstance(created_by, str) or not created_by:
        return DecodeError(booking_id, "missing createdBy")

    return Booking(
        id=booking_id,
        slot=slot,
        course_name=title,
        course_resource_id=resource_id,
        start_date=start_date,
        end_date=end_date,
        created_by=created_by,
        department=Department.parse(doc.get("department")),
        status=status,
        external_schedule_id=schedule_id,
        coursera_link=_optional_text(doc.get("courseraLink")),
        notes=_optional_text(doc.get("notes")),
    )


def _optional_text(value: Any) -> str | None:
    # Display-only; non-text values are dropped.
    if isinstance(value, str) and value:
        return value
    return None


def _first_resource_id(resources: Any) -> int | None:
    if not isinstance(resources, list) or not resources:
        return None
    first = resources[0]
    if not isinstance(first, dict):
        return None
    value = _as_int(first.get("id"))
    if value is None or value <= 0:
        return None
    return value


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    return None
