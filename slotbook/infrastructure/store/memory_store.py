from __future__ import annotations

import copy
import threading

from slotbook.application.ports.realtime_store import (
    Document,
    RealtimeStorePort,
    SnapshotCallback,
    Unsubscribe,
)


def order_by_start(documents: list[Document]) -> list[Document]:
    """Mirror of the realtime query ordered by `start`; documents without one sort first."""
    return sorted(documents, key=lambda d: str(d.get("start") or ""))


class MemoryRealtimeStore(RealtimeStorePort):
    def __init__(self, documents: dict[str, Document] | None = None) -> None:
        self._documents: dict[str, Document] = copy.deepcopy(documents or {})
        self._subscribers: list[SnapshotCallback] = []
        self._lock = threading.RLock()

    def get(self, document_id: str) -> Document | None:
        with self._lock:
            doc = self._documents.get(document_id)
            return copy.deepcopy(doc) if doc is not None else None

    def put(self, document_id: str, document: Document) -> None:
        with self._lock:
            self._documents[document_id] = copy.deepcopy(document)
        self._notify()

    def delete(self, document_id: str) -> None:
        with self._lock:
            removed = self._documents.pop(document_id, None)
        if removed is not None:
            self._notify()

    def list_documents(self) -> list[Document]:
        with self._lock:
            return order_by_start(copy.deepcopy(list(self._documents.values())))

    def subscribe(self, callback: SnapshotCallback) -> Unsubscribe:
        with self._lock:
            self._subscribers.append(callback)
        callback(self.list_documents())

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _notify(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        snapshot = self.list_documents()
        for callback in subscribers:
            callback(snapshot)
