from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any
from zoneinfo import ZoneInfo

from slotbook.application.ports.realtime_store import RealtimeStorePort, Unsubscribe
from slotbook.application.utils.booking_codec import DecodeError, decode_booking
from slotbook.domain.entities.booking import Booking

SnapshotListener = Callable[[list[Booking]], None]


class StaticBookingSnapshot:
    """Fixed list of bookings, for scripts and tests."""

    def __init__(self, bookings: Iterable[Booking] = ()) -> None:
        self._bookings = sorted(bookings, key=lambda b: b.start_date)

    def bookings(self) -> list[Booking]:
        return [b for b in self._bookings if b.is_active]

    def occupying(self) -> list[Booking]:
        return [b for b in self._bookings if b.occupies_slot]


class LiveBookingSnapshot:
    """
    In-process view of the `events` collection fed by the store's push subscription.

    Every notification replaces the whole snapshot. Undecodable documents are
    logged and dropped so they never reach the conflict check.
    """

    def __init__(self, store: RealtimeStorePort, timezone: ZoneInfo) -> None:
        self._store = store
        self._timezone = timezone
        self._lock = threading.Lock()
        self._all: list[Booking] = []
        self._listeners: list[SnapshotListener] = []
        self._unsubscribe: Unsubscribe | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def is_running(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._store.subscribe(self.replace)
        self._logger.info("Booking snapshot subscribed")

    def stop(self) -> None:
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()
            self._logger.info("Booking snapshot unsubscribed")

    def __enter__(self) -> "LiveBookingSnapshot":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    def replace(self, documents: list[dict[str, Any]]) -> None:
        decoded: list[Booking] = []
        for doc in documents:
            result = decode_booking(doc, self._timezone)
            if isinstance(result, DecodeError):
                self._logger.warning(
                    "Discarding malformed booking record",
                    extra={"booking_id": result.document_id, "reason": result.reason},
                )
                continue
            decoded.append(result)
        decoded.sort(key=lambda b: (b.start_date, b.id))

        with self._lock:
            self._all = decoded
            listeners = list(self._listeners)

        active = [b for b in decoded if b.is_active]
        for listener in listeners:
            listener(active)

    def bookings(self) -> list[Booking]:
        """Active bookings, ordered by start date."""
        with self._lock:
            return [b for b in self._all if b.is_active]

    def occupying(self) -> list[Booking]:
        """Active and provisional bookings; these hold their slot."""
        with self._lock:
            return [b for b in self._all if b.occupies_slot]

    def add_listener(self, listener: SnapshotListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove
