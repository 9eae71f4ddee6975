"""
Shared fixtures for the engine tests
"""
import sys
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path

import pytest

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.api.flask_server import create_app
from src.availability.models import Candidate, DateAnchor, Priority, Slot, SlotKind
from src.availability.snapshot import ScheduleSnapshot
from src.scheduler.smart_scheduler import SmartScheduler

KST = timezone(timedelta(hours=9))
MONDAY = date(2025, 3, 3)


@pytest.fixture
def monday():
    return MONDAY


@pytest.fixture
def make_candidate():
    """Build a candidate from "HH:MM" strings on a date (default: Monday 2025-03-03)"""
    def build(start: str, end: str, title: str = "", day: date = MONDAY) -> Candidate:
        start_h, start_m = map(int, start.split(":"))
        end_h, end_m = map(int, end.split(":"))
        start_dt = datetime.combine(day, time(start_h, start_m), tzinfo=KST)
        end_dt = datetime.combine(day, time(end_h, end_m), tzinfo=KST)
        if end_dt <= start_dt:
            end_dt += timedelta(days=1)
        return Candidate(start_dt, end_dt, title)
    return build


@pytest.fixture
def review_event():
    """Monday 14:30-15:30 commitment"""
    return Slot(DateAnchor(MONDAY), 870, 930, priority=Priority.PREFERRED, kind=SlotKind.EVENT,
                title="Design review", slot_id="e1")


@pytest.fixture
def snapshot_data():
    return {
        "recurringSlots": [
            {"dayOfWeek": 0, "startTime": "09:00", "endTime": "09:10", "priority": 3},
        ],
        "dateOverrides": [
            {"specificDate": "2025-03-04", "startTime": "10:00", "endTime": "12:00", "priority": 2,
             "isHoliday": False},
        ],
        "exceptions": [
            {"id": "e1", "title": "Design review", "specificDate": "2025-03-03",
             "startTime": "14:30", "endTime": "15:30", "priority": 3, "location": None},
        ],
        "personalTimes": [
            {"id": "p1", "title": "Sleep", "days": [4], "startTime": "23:00", "endTime": "07:00"},
        ],
    }


@pytest.fixture
def busy_snapshot(snapshot_data):
    return ScheduleSnapshot.from_dict(snapshot_data)


@pytest.fixture
def scheduler():
    return SmartScheduler()


@pytest.fixture
def client():
    app = create_app()
    app.config["TESTING"] = True
    return app.test_client()
