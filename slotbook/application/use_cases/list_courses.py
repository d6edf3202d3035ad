from __future__ import annotations

import logging

from slotbook.application.exceptions import BackendReadError, SchedulerError
from slotbook.application.ports.scheduler import SchedulerPort
from slotbook.domain.entities.course import Course


class ListCoursesUseCase:
    def __init__(self, scheduler: SchedulerPort, service_offering_id: int) -> None:
        self._scheduler = scheduler
        self._service_offering_id = service_offering_id
        self._logger = logging.getLogger(__name__)

    def execute(self) -> list[Course]:
        try:
            courses = self._scheduler.list_courses(self._service_offering_id)
        except SchedulerError as e:
            self._logger.error("Failed to fetch courses", extra={"error": str(e)})
            raise BackendReadError(f"Could not load courses: {e}") from e
        return sorted(courses, key=lambda c: c.name.lower())
