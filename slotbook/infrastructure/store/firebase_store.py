from __future__ import annotations

import json
import logging
import threading
from typing import Any

import httpx

from slotbook.application.exceptions import StoreError
from slotbook.application.ports.realtime_store import (
    Document,
    RealtimeStorePort,
    SnapshotCallback,
    Unsubscribe,
)
from slotbook.core.config import settings
from slotbook.infrastructure.store.memory_store import order_by_start

COLLECTION = "events"


class FirebaseRealtimeStore(RealtimeStorePort):
    """
    Firebase Realtime Database over its REST API.

    Subscriptions use the server-sent event stream on `events.json`. Any
    put/patch event triggers a full re-read of the collection, which is then
    handed to the callback as one ordered list.
    """

    def __init__(
        self,
        database_url: str | None = None,
        auth_token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._database_url = (database_url or settings.FIREBASE_DATABASE_URL or "").rstrip("/")
        self._auth_token = auth_token or settings.FIREBASE_AUTH_TOKEN
        self._transport = transport
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._logger = logging.getLogger(__name__)

        if not self._database_url:
            raise ValueError("FIREBASE_DATABASE_URL is required for the Firebase store")

    def _url(self, path: str) -> str:
        return f"{self._database_url}/{path}.json"

    def _params(self) -> dict[str, str]:
        return {"auth": self._auth_token} if self._auth_token else {}

    def get(self, document_id: str) -> Document | None:
        try:
            response = self._client.get(self._url(f"{COLLECTION}/{document_id}"), params=self._params())
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(f"Firebase read failed for {document_id}: {e}") from e
        return data if isinstance(data, dict) else None

    def put(self, document_id: str, document: Document) -> None:
        try:
            response = self._client.put(
                self._url(f"{COLLECTION}/{document_id}"),
                params=self._params(),
                json=document,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._logger.error("Firebase write failed", extra={"booking_id": document_id, "error": str(e)})
            raise StoreError(f"Firebase write failed for {document_id}: {e}") from e

    def delete(self, document_id: str) -> None:
        try:
            response = self._client.delete(self._url(f"{COLLECTION}/{document_id}"), params=self._params())
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._logger.error("Firebase delete failed", extra={"booking_id": document_id, "error": str(e)})
            raise StoreError(f"Firebase delete failed for {document_id}: {e}") from e

    def list_documents(self) -> list[Document]:
        try:
            response = self._client.get(self._url(COLLECTION), params=self._params())
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise StoreError(f"Firebase list failed: {e}") from e
        if not isinstance(data, dict):
            return []
        return order_by_start([doc for doc in data.values() if isinstance(doc, dict)])

    def subscribe(self, callback: SnapshotCallback) -> Unsubscribe:
        stop = threading.Event()
        worker = threading.Thread(
            target=self._stream,
            args=(callback, stop),
            name="firebase-events-stream",
            daemon=True,
        )
        worker.start()

        def unsubscribe() -> None:
            stop.set()
            worker.join(timeout=5.0)

        return unsubscribe

    def close(self) -> None:
        self._client.close()

    def _stream(self, callback: SnapshotCallback, stop: threading.Event) -> None:
        delay = 1.0
        while not stop.is_set():
            try:
                if self._consume(callback, stop):
                    stop.wait(delay)
                    delay = min(delay * 2, 30.0)
                else:
                    delay = 1.0
            except (httpx.HTTPError, StoreError) as e:
                self._logger.warning("Firebase stream dropped", extra={"error": str(e), "reason": f"retry in {delay}s"})
                stop.wait(delay)
                delay = min(delay * 2, 30.0)

    def _consume(self, callback: SnapshotCallback, stop: threading.Event) -> bool:
        """Read one stream connection. Returns True when the server ended it."""
        # Keep-alives arrive every ~30s; the read timeout must stay above that.
        timeout = httpx.Timeout(10.0, read=45.0)
        headers = {"Accept": "text/event-stream"}
        with httpx.Client(timeout=timeout, transport=self._transport) as client:
            with client.stream("GET", self._url(COLLECTION), params=self._params(), headers=headers) as response:
                response.raise_for_status()
                event_name: str | None = None
                for line in response.iter_lines():
                    if stop.is_set():
                        return False
                    if line.startswith("event:"):
                        event_name = line[len("event:"):].strip()
                    elif line.startswith("data:"):
                        if self._handle_event(event_name, line[len("data:"):].strip(), callback):
                            return True
                        event_name = None
        return False

    def _handle_event(self, event_name: str | None, data: str, callback: SnapshotCallback) -> bool:
        """Returns True when the server ended the stream."""
        if event_name in ("put", "patch"):
            documents = self.list_documents()
            try:
                callback(documents)
            except Exception as e:
                # The stream thread must outlive a failing subscriber.
                self._logger.exception(
                    "Firebase subscriber failed",
                    extra={"reason": event_name, "error": f"{type(e).__name__}: {e}"},
                )
            return False
        if event_name in ("cancel", "auth_revoked"):
            payload: Any = _safe_json(data)
            self._logger.error("Firebase stream closed by server", extra={"reason": event_name, "error": str(payload)})
            return True
        return False


def _safe_json(data: str) -> Any:
    try:
        return json.loads(data)
    except ValueError:
        return data
