from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from slotbook.domain.entities.course import Course


class SchedulerPort(ABC):
    @abstractmethod
    def create_schedule(self, resource_id: int, start: datetime, end: datetime) -> int:
        """Commit a resource for a time window. Returns the schedule id."""
        raise NotImplementedError

    @abstractmethod
    def cancel_schedule(self, schedule_id: int) -> None:
        """Move a schedule to CANCELLED."""
        raise NotImplementedError

    @abstractmethod
    def list_courses(self, service_offering_id: int) -> list[Course]:
        """Active course resources for a service offering."""
        raise NotImplementedError
