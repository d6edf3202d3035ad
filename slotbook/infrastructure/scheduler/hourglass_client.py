from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from slotbook.application.exceptions import SchedulerRejectedError, SchedulerUnavailableError
from slotbook.application.ports.scheduler import SchedulerPort
from slotbook.application.utils.dates import to_iso
from slotbook.core.config import settings
from slotbook.domain.entities.course import Course

# Failures where the request never reached the server; safe to resend.
_RETRYABLE = (httpx.ConnectError, httpx.ConnectTimeout, httpx.PoolTimeout)


class HourglassScheduler(SchedulerPort):
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_attempts: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or settings.HOURGLASS_API_KEY
        self._base_url = (base_url or settings.HOURGLASS_BASE_URL).rstrip("/")
        self._max_attempts = max(1, max_attempts or settings.HOURGLASS_MAX_ATTEMPTS)
        self._logger = logging.getLogger(__name__)

        if not self._api_key:
            raise ValueError("HOURGLASS_API_KEY is required for the Hourglass scheduler")

        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=timeout or settings.HOURGLASS_TIMEOUT_SECONDS,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "X-Api-Key": self._api_key,
            },
        )

    def create_schedule(self, resource_id: int, start: datetime, end: datetime) -> int:
        payload = {
            "resources": [{"id": resource_id}],
            "timeslot": {"start": to_iso(start), "end": to_iso(end)},
        }
        data = self._request("POST", "/api/schedules", json=payload)
        schedule_id = _extract_id(data)
        if schedule_id is None:
            raise SchedulerRejectedError("No schedule id returned from Hourglass")

        self._logger.info(
            "Hourglass schedule created",
            extra={"schedule_id": schedule_id, "reason": f"resource {resource_id}"},
        )
        return schedule_id

    def cancel_schedule(self, schedule_id: int) -> None:
        self._request(
            "PUT",
            f"/api/schedules/{schedule_id}/status",
            json={"id": schedule_id, "status": "CANCELLED"},
        )
        self._logger.info("Hourglass schedule cancelled", extra={"schedule_id": schedule_id})

    def list_courses(self, service_offering_id: int) -> list[Course]:
        params = {
            "activeOnly": "true",
            "resourceType": "Course",
            "serviceOffering": str(service_offering_id),
        }
        data = self._request("GET", "/api/resources", params=params)
        if not isinstance(data, list):
            raise SchedulerRejectedError("Unexpected course list payload from Hourglass")

        courses: list[Course] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            course_id = _extract_id(item)
            name = item.get("name")
            if course_id is None or not isinstance(name, str) or not name:
                continue
            courses.append(Course(id=course_id, name=name))
        return courses

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        last_error: Exception | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                response = self._client.request(method, path, **kwargs)
            except _RETRYABLE as e:
                last_error = e
                self._logger.warning(
                    "Hourglass connection failed",
                    extra={"reason": f"{method} {path} attempt {attempt}", "error": str(e)},
                )
                continue
            except httpx.HTTPError as e:
                raise SchedulerUnavailableError(f"{method} {path} failed: {e}") from e

            if response.status_code >= 400:
                self._logger.error(
                    "Hourglass request rejected",
                    extra={"reason": f"{method} {path} -> {response.status_code}", "error": response.text[:500]},
                )
                raise SchedulerRejectedError(
                    f"{method} {path} returned {response.status_code}",
                    status_code=response.status_code,
                )
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise SchedulerRejectedError(f"{method} {path} returned invalid JSON") from e

        raise SchedulerUnavailableError(f"{method} {path} unreachable: {last_error}") from last_error


def _extract_id(data: Any) -> int | None:
    if not isinstance(data, dict):
        return None
    value = data.get("id")
    if value is None:
        value = data.get("scheduleId")
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdecimal():
        return int(value)
    return None
