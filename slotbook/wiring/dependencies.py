from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from slotbook.core.config import settings
from slotbook.application.live_snapshot import LiveBookingSnapshot
from slotbook.application.ports.realtime_store import RealtimeStorePort
from slotbook.application.ports.scheduler import SchedulerPort
from slotbook.application.use_cases.cancel_booking import CancelBookingUseCase
from slotbook.application.use_cases.create_booking import CreateBookingUseCase
from slotbook.application.use_cases.list_courses import ListCoursesUseCase
from slotbook.infrastructure.scheduler.hourglass_client import HourglassScheduler
from slotbook.infrastructure.scheduler.mock_scheduler import MockScheduler
from slotbook.infrastructure.store.firebase_store import FirebaseRealtimeStore
from slotbook.infrastructure.store.json_store import JsonRealtimeStore
from slotbook.infrastructure.store.memory_store import MemoryRealtimeStore


logger = logging.getLogger(__name__)


@lru_cache
def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BOOKING_TIMEZONE)


@lru_cache
def get_realtime_store() -> RealtimeStorePort:
    provider = settings.STORE_PROVIDER.lower()
    if provider == "firebase":
        return FirebaseRealtimeStore()
    if provider == "json":
        return JsonRealtimeStore(path=settings.JSON_STORE_PATH)
    if provider != "memory":
        logger.warning("Unknown STORE_PROVIDER, using memory", extra={"reason": provider})
    return MemoryRealtimeStore()


@lru_cache
def get_scheduler() -> SchedulerPort:
    if not settings.HOURGLASS_API_KEY:
        if settings.ENV.lower() in {"dev", "local", "test"}:
            logger.info("Using MockScheduler (HOURGLASS_API_KEY missing, ENV=%s)", settings.ENV)
            return MockScheduler()
        raise ValueError("HOURGLASS_API_KEY is required outside dev/local.")
    return HourglassScheduler()


@lru_cache
def get_snapshot() -> LiveBookingSnapshot:
    return LiveBookingSnapshot(store=get_realtime_store(), timezone=get_timezone())


def get_create_booking_use_case() -> CreateBookingUseCase:
    return CreateBookingUseCase(
        store=get_realtime_store(),
        scheduler=get_scheduler(),
        snapshot=get_snapshot(),
        timezone=get_timezone(),
        require_future_start=settings.BOOKING_REQUIRE_FUTURE_START,
        compensation_attempts=settings.COMPENSATION_ATTEMPTS,
    )


def get_cancel_booking_use_case() -> CancelBookingUseCase:
    return CancelBookingUseCase(
        store=get_realtime_store(),
        scheduler=get_scheduler(),
        timezone=get_timezone(),
        mode=settings.BOOKING_CANCEL_MODE,
    )


def get_list_courses_use_case() -> ListCoursesUseCase:
    return ListCoursesUseCase(
        scheduler=get_scheduler(),
        service_offering_id=settings.HOURGLASS_SERVICE_OFFERING_ID,
    )


def close_adapters() -> None:
    """Close the HTTP clients of adapters that were built."""
    for getter in (get_realtime_store, get_scheduler):
        if not getter.cache_info().currsize:
            continue
        close = getattr(getter(), "close", None)
        if close is not None:
            close()


def reset_container() -> None:
    """Drop cached singletons; the snapshot is stopped and adapters closed first."""
    if get_snapshot.cache_info().currsize:
        get_snapshot().stop()
    close_adapters()
    for getter in (get_snapshot, get_scheduler, get_realtime_store, get_timezone):
        getter.cache_clear()
