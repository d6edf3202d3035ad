from __future__ import annotations

from datetime import date
from zoneinfo import ZoneInfo

import pytest

from slotbook.application.dto.booking_draft import BookingDraft
from slotbook.application.exceptions import StoreError
from slotbook.application.live_snapshot import LiveBookingSnapshot
from slotbook.application.use_cases.cancel_booking import CancelBookingUseCase
from slotbook.application.use_cases.create_booking import CreateBookingUseCase
from slotbook.infrastructure.scheduler.mock_scheduler import MockScheduler
from slotbook.infrastructure.store.memory_store import MemoryRealtimeStore

TODAY = date(2025, 5, 1)
TZ = ZoneInfo("Asia/Manila")


class FlakyStore(MemoryRealtimeStore):
    """Memory store whose writes can be made to fail on demand."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_puts_with_status: str | None = None
        self.fail_deletes = 0
        self.delete_attempts = 0

    def put(self, document_id, document):
        if self.fail_puts_with_status and document.get("status") == self.fail_puts_with_status:
            raise StoreError("write refused")
        super().put(document_id, document)

    def delete(self, document_id):
        self.delete_attempts += 1
        if self.fail_deletes:
            self.fail_deletes -= 1
            raise StoreError("delete refused")
        super().delete(document_id)


def make_draft(**overrides) -> BookingDraft:
    fields = {
        "slot": "SLOT 3",
        "course_name": "Google Data Analytics",
        "course_resource_id": 12,
        "start_date": date(2025, 6, 1),
        "end_date": date(2025, 6, 5),
        "created_by": "user-1",
        "department": "QA",
    }
    fields.update(overrides)
    return BookingDraft(**fields)


@pytest.fixture
def tz() -> ZoneInfo:
    return TZ


@pytest.fixture
def store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def scheduler() -> MockScheduler:
    return MockScheduler()


@pytest.fixture
def snapshot(store):
    live = LiveBookingSnapshot(store, TZ)
    live.start()
    yield live
    live.stop()


@pytest.fixture
def create_uc(store, scheduler, snapshot) -> CreateBookingUseCase:
    return CreateBookingUseCase(store, scheduler, snapshot, TZ, today=lambda: TODAY)


@pytest.fixture
def cancel_uc(store, scheduler) -> CancelBookingUseCase:
    return CancelBookingUseCase(store, scheduler, TZ)
