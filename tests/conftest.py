"""
Pytest fixtures for the group scheduler tests.

Provides:
- UTC datetime factory
- Availability patterns and owner factories
- In-memory calendar store with explicit records
- Fake clock for session expiry
"""

from datetime import datetime

import pytest
import pytz

from models.entities import AvailabilityPattern, BookedRange, Calendar, Meeting, Owner, User
from services.calendar_service import CalendarService
from services.calendar_store_mock import CalendarStoreMock
from services.scheduling_engine import SchedulingEngine

# Monday; New York is UTC-4 and London UTC+1 on this date
MONDAY = datetime(2025, 6, 2).date()


# =============================================================================
# TIME FIXTURES
# =============================================================================

@pytest.fixture
def utc():
    """Build aware UTC datetimes: utc(hour, minute=0, day=2, month=6)."""
    def _utc(hour, minute=0, day=2, month=6, year=2025):
        return datetime(year, month, day, hour, minute, tzinfo=pytz.UTC)
    return _utc


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


# =============================================================================
# AVAILABILITY FIXTURES
# =============================================================================

@pytest.fixture
def office_hours():
    """Weekdays 9-5, weekends closed."""
    return AvailabilityPattern.from_dict({
        "weekdays": {"start": "9:00 AM", "end": "5:00 PM"},
        "weekends": {"available": False},
    })


@pytest.fixture
def make_owner(office_hours):
    """Factory for Owner snapshots with (start, end) booking tuples."""
    def _make_owner(owner_id="owner", timezone="UTC", pattern=None, bookings=()):
        return Owner(
            id=owner_id,
            timezone=timezone,
            pattern=office_hours if pattern is None else pattern,
            booked_ranges=[
                BookedRange(start=start, end=end, owner_id=owner_id)
                for start, end in bookings
            ],
        )
    return _make_owner


@pytest.fixture
def engine():
    return SchedulingEngine(timezone="UTC")


# =============================================================================
# STORE FIXTURES
# =============================================================================

OFFICE_HOURS_JSON = {"weekdays": {"start": "9:00 AM", "end": "5:00 PM"}}


@pytest.fixture
def store(utc):
    """Two UTC users with 9-5 weekday calendars and a few meetings on MONDAY."""
    users = [
        User(user_id="user_a", username="alice", timezone="UTC"),
        User(user_id="user_b", username="bob", timezone="UTC"),
    ]
    calendars = [
        Calendar(id="1", user_id="user_a", name="Work", is_default=True, availability=OFFICE_HOURS_JSON),
        Calendar(id="2", user_id="user_b", name="Work", is_default=True, availability=OFFICE_HOURS_JSON),
        Calendar(id="3", user_id="user_b", name="Side project", availability=None),
    ]
    meetings = [
        Meeting(id="m1", calendar_id="2", title="Sync", start_time=utc(10), end_time=utc(11)),
        Meeting(id="m2", calendar_id="2", title="Maybe", start_time=utc(13), end_time=utc(14),
                status="tentative"),
        Meeting(id="m3", calendar_id="2", title="Dropped", start_time=utc(15), end_time=utc(16),
                status="cancelled"),
        Meeting(id="m4", calendar_id="3", title="Hack night", start_time=utc(16), end_time=utc(16, 30)),
    ]
    return CalendarStoreMock(users=users, calendars=calendars, meetings=meetings)


@pytest.fixture
def calendar_service(store):
    return CalendarService(store)
