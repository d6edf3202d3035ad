"""
Tests for the file-backed realtime store.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from slotbook.application.exceptions import StoreError
from slotbook.infrastructure.store.json_store import JsonRealtimeStore


def _doc(doc_id: str, start: str) -> dict:
    return {"id": doc_id, "start": start, "status": "CREATED"}


def test_json_store_persists_across_instances():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = str(Path(tmpdir) / "events.json")
        JsonRealtimeStore(path=path).put("a", _doc("a", "2025-06-01T00:00:00.000+08:00"))

        reopened = JsonRealtimeStore(path=path)
        assert reopened.get("a")["start"] == "2025-06-01T00:00:00.000+08:00"


def test_json_store_orders_by_start_and_deletes():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonRealtimeStore(path=str(Path(tmpdir) / "events.json"))
        store.put("late", _doc("late", "2025-07-01T00:00:00.000+08:00"))
        store.put("early", _doc("early", "2025-06-01T00:00:00.000+08:00"))
        assert [d["id"] for d in store.list_documents()] == ["early", "late"]

        store.delete("early")
        store.delete("never-existed")
        assert [d["id"] for d in store.list_documents()] == ["late"]


def test_json_store_pushes_to_subscribers():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonRealtimeStore(path=str(Path(tmpdir) / "events.json"))
        seen: list[int] = []
        unsubscribe = store.subscribe(lambda docs: seen.append(len(docs)))
        store.put("a", _doc("a", "2025-06-01"))
        unsubscribe()
        store.put("b", _doc("b", "2025-06-02"))

        assert seen == [0, 1]


def test_corrupted_file_raises_store_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "events.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonRealtimeStore(path=str(path))

        with pytest.raises(StoreError):
            store.get("a")
