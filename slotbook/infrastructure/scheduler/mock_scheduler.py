from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from slotbook.application.exceptions import SchedulerRejectedError
from slotbook.application.ports.scheduler import SchedulerPort
from slotbook.domain.entities.course import Course

DEFAULT_COURSES = (
    Course(id=7, name="Python for Everybody"),
    Course(id=12, name="Google Data Analytics"),
    Course(id=15, name="Machine Learning Specialization"),
)


@dataclass
class MockSchedule:
    id: int
    resource_id: int
    start: datetime
    end: datetime
    status: str = "CREATED"


class MockScheduler(SchedulerPort):
    def __init__(self, courses: tuple[Course, ...] = DEFAULT_COURSES) -> None:
        self._schedules: dict[int, MockSchedule] = {}
        self._courses = list(courses)
        self._next_id = 1000
        self.fail_next_create: Exception | None = None
        self.fail_next_cancel: Exception | None = None
        self.create_calls = 0
        self.cancel_calls = 0
        self._logger = logging.getLogger(__name__)

    def create_schedule(self, resource_id: int, start: datetime, end: datetime) -> int:
        self.create_calls += 1
        if self.fail_next_create is not None:
            error, self.fail_next_create = self.fail_next_create, None
            raise error
        if end < start:
            raise SchedulerRejectedError("timeslot end before start", status_code=400)
        for other in self.active_schedules():
            if other.resource_id == resource_id and start <= other.end and end >= other.start:
                raise SchedulerRejectedError(
                    f"resource {resource_id} already scheduled as {other.id}",
                    status_code=409,
                )

        self._next_id += 1
        self._schedules[self._next_id] = MockSchedule(self._next_id, resource_id, start, end)
        self._logger.info(
            "Mock schedule created",
            extra={"schedule_id": self._next_id, "reason": f"resource {resource_id}"},
        )
        return self._next_id

    def cancel_schedule(self, schedule_id: int) -> None:
        self.cancel_calls += 1
        if self.fail_next_cancel is not None:
            error, self.fail_next_cancel = self.fail_next_cancel, None
            raise error
        schedule = self._schedules.get(schedule_id)
        if schedule is None:
            raise SchedulerRejectedError(f"schedule {schedule_id} not found", status_code=404)
        if schedule.status == "CANCELLED":
            raise SchedulerRejectedError(f"schedule {schedule_id} already cancelled", status_code=409)
        schedule.status = "CANCELLED"
        self._logger.info("Mock schedule cancelled", extra={"schedule_id": schedule_id})

    def list_courses(self, service_offering_id: int) -> list[Course]:
        return list(self._courses)

    def get(self, schedule_id: int) -> MockSchedule | None:
        return self._schedules.get(schedule_id)

    def active_schedules(self) -> list[MockSchedule]:
        return [s for s in self._schedules.values() if s.status == "CREATED"]
