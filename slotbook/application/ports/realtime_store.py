from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

Document = dict[str, Any]
SnapshotCallback = Callable[[list[Document]], None]
Unsubscribe = Callable[[], None]


class RealtimeStorePort(ABC):
    """Push-subscribable document collection keyed by booking id."""

    @abstractmethod
    def get(self, document_id: str) -> Document | None:
        raise NotImplementedError

    @abstractmethod
    def put(self, document_id: str, document: Document) -> None:
        """Write the whole document, replacing any previous one."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, document_id: str) -> None:
        """Remove the document. Deleting a missing id is not an error."""
        raise NotImplementedError

    @abstractmethod
    def list_documents(self) -> list[Document]:
        """All documents ordered by their `start` field."""
        raise NotImplementedError

    @abstractmethod
    def subscribe(self, callback: SnapshotCallback) -> Unsubscribe:
        """
        Deliver the ordered document list now and after every change.
        Returns a callable that ends the subscription.
        """
        raise NotImplementedError
