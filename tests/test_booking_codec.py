"""
Tests for the realtime store wire format.
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from slotbook.application.utils.booking_codec import DecodeError, decode_booking, encode_booking
from slotbook.domain.entities.booking import Booking, BookingStatus, Department
from slotbook.domain.entities.slot import Slot

TZ = ZoneInfo("Asia/Manila")

BOOKING = Booking(
    id="b-1",
    slot=Slot.SLOT_2,
    course_name="Python for Everybody",
    course_resource_id=7,
    start_date=date(2025, 6, 1),
    end_date=date(2025, 6, 3),
    created_by="user-1",
    department=Department.DMR,
    external_schedule_id=1001,
    coursera_link="https://www.coursera.org/learn/python",
)


def test_encode_uses_wire_field_names():
    doc = encode_booking(BOOKING, TZ)
    assert doc["title"] == "Python for Everybody"
    assert doc["slotNumber"] == "SLOT 2"
    assert doc["resources"] == [{"id": 7}]
    assert doc["createdBy"] == "user-1"
    assert doc["department"] == "DMR"
    assert doc["status"] == "CREATED"
    assert doc["hourglassId"] == 1001
    assert doc["courseraLink"] == "https://www.coursera.org/learn/python"
    assert "notes" not in doc


def test_encode_normalizes_to_start_and_end_of_day():
    doc = encode_booking(BOOKING, TZ)
    start = datetime.fromisoformat(doc["start"])
    end = datetime.fromisoformat(doc["end"])
    assert (start.hour, start.minute, start.second) == (0, 0, 0)
    assert (end.hour, end.minute, end.second, end.microsecond) == (23, 59, 59, 999000)


def test_round_trip_keeps_calendar_days():
    decoded = decode_booking(encode_booking(BOOKING, TZ), TZ)
    assert decoded == BOOKING


def test_decode_utc_zulu_strings_in_local_zone():
    doc = encode_booking(BOOKING, TZ)
    # 2025-05-31T16:00Z is midnight June 1 in Manila (UTC+8).
    doc["start"] = "2025-05-31T16:00:00.000Z"
    doc["end"] = "2025-06-03T15:59:59.999Z"
    decoded = decode_booking(doc, TZ)
    assert isinstance(decoded, Booking)
    assert decoded.start_date == date(2025, 6, 1)
    assert decoded.end_date == date(2025, 6, 3)


def test_decode_rejects_unparseable_dates():
    doc = encode_booking(BOOKING, TZ)
    doc["start"] = "not a date"
    result = decode_booking(doc, TZ)
    assert isinstance(result, DecodeError)
    assert result.document_id == "b-1"


def test_decode_rejects_unknown_slot_and_bad_resource():
    doc = encode_booking(BOOKING, TZ)
    doc["slotNumber"] = "SLOT 9"
    assert isinstance(decode_booking(doc, TZ), DecodeError)

    doc = encode_booking(BOOKING, TZ)
    doc["resources"] = [{"id": "abc"}]
    assert isinstance(decode_booking(doc, TZ), DecodeError)


def test_decode_rejects_non_objects_and_missing_id():
    assert isinstance(decode_booking(None, TZ), DecodeError)
    doc = encode_booking(BOOKING, TZ)
    del doc["id"]
    assert isinstance(decode_booking(doc, TZ), DecodeError)


def test_decode_defaults_missing_status_and_unknown_department():
    doc = encode_booking(BOOKING, TZ)
    del doc["status"]
    doc["department"] = "Marketing"
    decoded = decode_booking(doc, TZ)
    assert isinstance(decoded, Booking)
    assert decoded.status == BookingStatus.CREATED
    assert decoded.department == Department.OTHERS


def test_decode_rejects_superscript_resource_id():
    doc = encode_booking(BOOKING, TZ)
    doc["resources"] = [{"id": "²"}]
    result = decode_booking(doc, TZ)
    assert isinstance(result, DecodeError)
    assert result.document_id == "b-1"


def test_decode_drops_non_text_optional_fields():
    doc = encode_booking(BOOKING, TZ)
    doc["courseraLink"] = 5
    doc["notes"] = {"a": 1}
    decoded = decode_booking(doc, TZ)
    assert isinstance(decoded, Booking)
    assert decoded.coursera_link is None
    assert decoded.notes is None
