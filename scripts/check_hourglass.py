#!/usr/bin/env python3
"""
Smoke check against a live Hourglass instance.

Usage:
  HOURGLASS_API_KEY=... python3 scripts/check_hourglass.py [service_offering_id]

Lists the bookable courses for the service offering. Nothing is written.
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from slotbook.application.exceptions import SchedulerError
from slotbook.core.config import settings
from slotbook.infrastructure.scheduler.hourglass_client import HourglassScheduler


def main() -> int:
    if not settings.HOURGLASS_API_KEY:
        print("❌ HOURGLASS_API_KEY is not set")
        return 1

    key = settings.HOURGLASS_API_KEY
    print(f"API key loaded: {key[:6]}...{key[-4:]}")

    offering = int(sys.argv[1]) if len(sys.argv) > 1 else settings.HOURGLASS_SERVICE_OFFERING_ID
    scheduler = HourglassScheduler()
    try:
        courses = scheduler.list_courses(offering)
    except SchedulerError as e:
        print(f"❌ Request failed: {e}")
        return 1
    finally:
        scheduler.close()

    print(f"✅ {len(courses)} course(s) for service offering {offering}:")
    for course in courses:
        print(f"  {course.id:>5}  {course.name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
