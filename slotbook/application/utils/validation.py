from __future__ import annotations

import re
import uuid
from datetime import date
from urllib.parse import urlsplit

from slotbook.application.dto.booking_draft import BookingDraft
from slotbook.application.exceptions import ValidationError
from slotbook.application.utils.dates import parse_day
from slotbook.domain.entities.booking import Booking, BookingStatus, Department
from slotbook.domain.entities.slot import Slot

_SCRIPT_RE = re.compile(r"<(script|style)\b[^>]*>.*?(</\1\s*>|$)", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")


def sanitize_text(value: str | None) -> str:
    """Trim and drop any HTML tags. Script and style elements lose their content too."""
    if not value:
        return ""
    return _TAG_RE.sub("", _SCRIPT_RE.sub("", value)).strip()


def parse_resource_id(raw: object) -> int:
    if isinstance(raw, bool):
        raise ValidationError("Course resource id must be a positive integer", field="course_resource_id")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.strip().isdecimal():
        value = int(raw.strip())
    else:
        raise ValidationError("Course resource id must be a positive integer", field="course_resource_id")
    if value <= 0:
        raise ValidationError("Course resource id must be a positive integer", field="course_resource_id")
    return value


def is_coursera_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if parts.scheme not in ("http", "https"):
        return False
    host = (parts.hostname or "").lower()
    return host == "coursera.org" or host.endswith(".coursera.org")


def validate_schedule_dates(start: date, end: date, earliest: date | None) -> None:
    """`earliest` is the first allowed day under the future-date policy, or None when it is off."""
    if earliest is not None:
        if start < earliest:
            raise ValidationError("Start date must be at least tomorrow or later", field="start_date")
        if end < earliest:
            raise ValidationError("End date must be at least tomorrow or later", field="end_date")
    if end < start:
        raise ValidationError("End date must be after start date", field="end_date")


def validate_draft(draft: BookingDraft, earliest: date | None) -> Booking:
    """
    Turn caller input into a provisional Booking or raise ValidationError.
    Nothing here touches the store or the scheduler.
    """
    resource_id = parse_resource_id(draft.course_resource_id)

    try:
        slot = Slot.parse(draft.slot)
    except ValueError:
        raise ValidationError(f"Unknown slot: {draft.slot!r}", field="slot")

    course_name = sanitize_text(draft.course_name)
    if not course_name:
        raise ValidationError("Course name is required", field="course_name")
    created_by = sanitize_text(draft.created_by)
    if not created_by:
        raise ValidationError("Creator is required", field="created_by")

    try:
        start = parse_day(draft.start_date)
        end = parse_day(draft.end_date)
    except ValueError:
        raise ValidationError("Start and end dates must be valid dates", field="start_date")
    validate_schedule_dates(start, end, earliest)

    link = sanitize_text(draft.coursera_link) or None
    if link and not is_coursera_url(link):
        raise ValidationError("Please enter a valid Coursera URL", field="coursera_link")

    booking_id = sanitize_text(draft.id) or uuid.uuid4().hex

    return Booking(
        id=booking_id,
        slot=slot,
        course_name=course_name,
        course_resource_id=resource_id,
        start_date=start,
        end_date=end,
        created_by=created_by,
        department=Department.parse(draft.department),
        status=BookingStatus.PENDING,
        coursera_link=link,
        notes=sanitize_text(draft.notes) or None,
    )
