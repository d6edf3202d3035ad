from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class BookingDraft(BaseModel):
    """Caller input for a create or edit, before validation. Values may still be raw strings."""

    id: str | None = None
    slot: Any = None
    course_name: str = ""
    course_resource_id: Any = None
    start_date: Any = None
    end_date: Any = None
    created_by: str = ""
    department: str | None = None
    coursera_link: str | None = None
    notes: str | None = None
