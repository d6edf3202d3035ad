from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from slotbook.application.exceptions import StoreError
from slotbook.application.ports.realtime_store import (
    Document,
    RealtimeStorePort,
    SnapshotCallback,
    Unsubscribe,
)
from slotbook.infrastructure.store.memory_store import order_by_start


class JsonRealtimeStore(RealtimeStorePort):
    """
    The `events` collection kept in one JSON file, keyed by booking id.
    Subscribers are notified in-process only; other processes see changes on their next read.
    """

    def __init__(self, path: str = "./data/events.json") -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._subscribers: list[SnapshotCallback] = []
        self._logger = logging.getLogger(__name__)

    def _load(self) -> dict[str, Document]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise StoreError(f"Cannot read {self._path}: {e}") from e
        events = data.get("events") if isinstance(data, dict) else None
        return events if isinstance(events, dict) else {}

    def _save(self, events: dict[str, Document]) -> None:
        """Write atomically through a temp file."""
        temp_path = self._path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump({"events": events, "version": 1}, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._path)
        except (OSError, TypeError, ValueError) as e:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise StoreError(f"Cannot write {self._path}: {e}") from e

    def get(self, document_id: str) -> Document | None:
        with self._lock:
            return self._load().get(document_id)

    def put(self, document_id: str, document: Document) -> None:
        with self._lock:
            events = self._load()
            events[document_id] = dict(document)
            self._save(events)
        self._logger.debug("Event written", extra={"booking_id": document_id})
        self._notify()

    def delete(self, document_id: str) -> None:
        with self._lock:
            events = self._load()
            if events.pop(document_id, None) is None:
                return
            self._save(events)
        self._logger.debug("Event deleted", extra={"booking_id": document_id})
        self._notify()

    def list_documents(self) -> list[Document]:
        with self._lock:
            return order_by_start(list(self._load().values()))

    def subscribe(self, callback: SnapshotCallback) -> Unsubscribe:
        with self._lock:
            self._subscribers.append(callback)
        callback(self.list_documents())

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
            snapshot = order_by_start(list(self._load().values()))
        for callback in subscribers:
            callback(snapshot)
