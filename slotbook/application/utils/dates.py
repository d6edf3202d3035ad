from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

if TYPE_CHECKING:
    from slotbook.domain.entities.booking import Booking

END_OF_DAY = time(23, 59, 59, 999000)


def start_of_day(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def end_of_day(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, END_OF_DAY, tzinfo=tz)


def to_iso(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds")


def parse_iso_day(raw: str, tz: ZoneInfo) -> date:
    """
    Calendar day of an ISO-8601 string as seen in `tz`.
    Accepts a trailing Z, any offset, a naive datetime (taken as local to `tz`)
    or a bare date. Raises ValueError on anything else.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError(f"Not a date string: {raw!r}")
    text = raw.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.date()
    return parsed.astimezone(tz).date()


def parse_day(raw: object) -> date:
    """Date from a date, datetime or YYYY-MM-DD string. Raises ValueError."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        return date.fromisoformat(raw.strip()[:10])
    raise ValueError(f"Not a date: {raw!r}")


def today_in(tz: ZoneInfo) -> date:
    return datetime.now(tz).date()


def tomorrow_in(tz: ZoneInfo) -> date:
    return today_in(tz) + timedelta(days=1)


def format_day(day: date) -> str:
    return f"{day:%b} {day.day}"


def describe_range(booking: "Booking") -> str:
    """Human range used in conflict messages, e.g. "Jun 1 to Jun 5"."""
    return f"{format_day(booking.start_date)} to {format_day(booking.end_date)}"
