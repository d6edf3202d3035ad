"""
HTTP surface tests; the wiring getters are overridden with in-memory backends.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from slotbook.application.exceptions import SchedulerUnavailableError
from slotbook.application.use_cases.list_courses import ListCoursesUseCase
from slotbook.main import app
from slotbook.wiring.dependencies import (
    get_cancel_booking_use_case,
    get_create_booking_use_case,
    get_list_courses_use_case,
    get_snapshot,
)

PAYLOAD = {
    "slot": "SLOT 3",
    "course_name": "Google Data Analytics",
    "course_resource_id": 12,
    "start_date": "2025-06-01",
    "end_date": "2025-06-05",
    "department": "QA",
}
USER = {"X-User-Id": "user-1"}


@pytest.fixture
def client(snapshot, scheduler, create_uc, cancel_uc):
    app.dependency_overrides[get_snapshot] = lambda: snapshot
    app.dependency_overrides[get_create_booking_use_case] = lambda: create_uc
    app.dependency_overrides[get_cancel_booking_use_case] = lambda: cancel_uc
    app.dependency_overrides[get_list_courses_use_case] = lambda: ListCoursesUseCase(scheduler, 7)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_create_booking_returns_created_record(client):
    resp = client.post("/api/v1/bookings", json=PAYLOAD, headers=USER)

    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "CREATED"
    assert body["created_by"] == "user-1"
    assert body["external_schedule_id"] is not None

    listed = client.get("/api/v1/bookings").json()
    assert [b["id"] for b in listed] == [body["id"]]


def test_overlapping_booking_is_conflict_with_ranges(client):
    client.post("/api/v1/bookings", json=PAYLOAD, headers=USER)

    resp = client.post(
        "/api/v1/bookings",
        json={**PAYLOAD, "start_date": "2025-06-04", "end_date": "2025-06-08"},
        headers={"X-User-Id": "user-2"},
    )

    assert resp.status_code == 409
    assert resp.json()["detail"]["ranges"] == ["Jun 1 to Jun 5"]


def test_bad_resource_id_is_bad_request(client, scheduler):
    resp = client.post("/api/v1/bookings", json={**PAYLOAD, "course_resource_id": "abc"}, headers=USER)

    assert resp.status_code == 400
    assert scheduler.create_calls == 0


def test_missing_user_header_is_rejected(client):
    assert client.post("/api/v1/bookings", json=PAYLOAD).status_code == 422


def test_cancel_requires_creator(client):
    booking_id = client.post("/api/v1/bookings", json=PAYLOAD, headers=USER).json()["id"]

    assert client.delete(f"/api/v1/bookings/{booking_id}", headers={"X-User-Id": "user-2"}).status_code == 403

    resp = client.delete(f"/api/v1/bookings/{booking_id}", headers=USER)
    assert resp.status_code == 200
    assert resp.json()["booking_id"] == booking_id
    assert client.get("/api/v1/bookings").json() == []


def test_cancel_unknown_booking_is_not_found(client):
    assert client.delete("/api/v1/bookings/nope", headers=USER).status_code == 404


def test_edit_moves_booking(client):
    booking_id = client.post("/api/v1/bookings", json=PAYLOAD, headers=USER).json()["id"]

    resp = client.put(
        f"/api/v1/bookings/{booking_id}",
        json={**PAYLOAD, "slot": "SLOT 5"},
        headers=USER,
    )

    assert resp.status_code == 200
    assert resp.json()["id"] == booking_id
    assert resp.json()["slot"] == "SLOT 5"


def test_day_slots_show_seven_slots(client):
    client.post("/api/v1/bookings", json=PAYLOAD, headers=USER)

    body = client.get("/api/v1/bookings/day/2025-06-03").json()

    assert body["day"] == "2025-06-03"
    assert [s["slot"] for s in body["slots"]] == [f"SLOT {n}" for n in range(1, 8)]
    booked = [s["slot"] for s in body["slots"] if s["booking"]]
    assert booked == ["SLOT 3"]


def test_courses_are_listed_by_name(client):
    names = [c["name"] for c in client.get("/api/v1/courses").json()]
    assert names == sorted(names)
    assert "Google Data Analytics" in names


def test_scheduler_outage_on_create_is_bad_gateway(client, scheduler):
    scheduler.fail_next_create = SchedulerUnavailableError("down")

    resp = client.post("/api/v1/bookings", json=PAYLOAD, headers=USER)

    assert resp.status_code == 502


def test_shutdown_closes_http_clients(monkeypatch):
    from slotbook.core.config import settings
    from slotbook.infrastructure.scheduler.hourglass_client import HourglassScheduler
    from slotbook.wiring.dependencies import get_scheduler, reset_container

    monkeypatch.setattr(settings, "HOURGLASS_API_KEY", "secret-key")
    monkeypatch.setattr(settings, "STORE_PROVIDER", "memory")
    reset_container()
    try:
        scheduler = get_scheduler()
        assert isinstance(scheduler, HourglassScheduler)

        with TestClient(app) as live:
            assert live.get("/health").status_code == 200

        assert scheduler._client.is_closed
    finally:
        reset_container()
