"""
Tests for the in-memory calendar store used when no data store is configured.
"""

from datetime import date, datetime, timedelta

import pytest
import pytz

from models.entities import Calendar, Meeting
from services.calendar_service import CalendarService
from services.calendar_store_mock import CalendarStoreMock
from services.errors import DataStoreError
from services.scheduling_engine import SchedulingEngine


def test_synthetic_users_have_default_calendars():
    store = CalendarStoreMock()
    users = store.get_users(["user_001", "user_002", "user_003", "user_004"])
    assert [u.timezone for u in users] == [
        "America/New_York", "Europe/London", "Asia/Kolkata", "America/Los_Angeles"
    ]
    for user in users:
        calendars = store.get_user_calendars(user.user_id)
        assert len(calendars) == 1
        assert calendars[0].is_default


def test_synthetic_meetings_are_filtered_and_sorted():
    store = CalendarStoreMock()
    confirmed = store.get_meetings(["1", "2"], status="confirmed")
    assert confirmed
    assert all(m.status == "confirmed" for m in confirmed)
    starts = [m.start_time for m in confirmed]
    assert starts == sorted(starts)


def test_meeting_span_filter(utc, store):
    touching = store.get_meetings(["2"], start=utc(11), end=utc(13))
    assert {m.id for m in touching} == {"m1", "m2"}


def test_synthetic_group_has_common_time():
    store = CalendarStoreMock()
    engine = SchedulingEngine(CalendarService(store), timezone="UTC")
    start = date.today()
    slots = engine.schedule_for_users(["user_001", "user_002"], start, start + timedelta(days=13), 30)
    assert slots
    now = datetime.now(pytz.UTC) - timedelta(days=1)
    assert all(slot.start > now for slot in slots)


class TestNaiveTimestamps:

    def test_naive_meetings_are_stored_as_utc(self, utc):
        store = CalendarStoreMock(
            users=[],
            calendars=[Calendar(id="1", user_id="u", name="Work")],
            meetings=[Meeting(id="m", calendar_id="1", title="Naive",
                              start_time=datetime(2025, 6, 2, 10), end_time=datetime(2025, 6, 2, 11))],
        )
        meetings = store.get_meetings(["1"], start=utc(9), end=utc(12))
        assert [m.id for m in meetings] == ["m"]
        assert meetings[0].start_time == utc(10)

    def test_naive_query_bounds(self, store):
        meetings = store.get_meetings(["2"], start=datetime(2025, 6, 2, 12), end=datetime(2025, 6, 2, 14))
        assert [m.id for m in meetings] == ["m2"]

    def test_created_meeting_is_aware(self, store, utc):
        meeting = store.create_meeting("1", "Naive", datetime(2025, 6, 2, 12), datetime(2025, 6, 2, 13))
        assert meeting.start_time == utc(12)
        assert [m.id for m in store.get_meetings(["1"], start=utc(11), end=utc(14))] == [meeting.id]


class TestCalendarWrites:

    def test_user_meetings_across_calendars(self, store):
        meetings = store.get_user_meetings("user_b", status="confirmed")
        assert [m.id for m in meetings] == ["m1", "m4"]

    def test_user_without_calendars(self, store):
        assert store.get_user_meetings("ghost") == []

    def test_create_calendar_gets_unused_id(self, store):
        calendar = store.create_calendar("user_a", "Personal", "Evenings")
        assert calendar.id not in {"1", "2", "3"}
        assert [c.name for c in store.get_user_calendars("user_a")] == ["Work", "Personal"]

    def test_update_availability(self, store):
        availability = {"weekdays": {"start": "10:00 AM", "end": "4:00 PM"}}
        updated = store.update_calendar_availability("1", availability)
        assert updated.availability == availability
        assert store.get_user_calendars("user_a")[0].availability == availability

    def test_update_unknown_calendar(self, store):
        with pytest.raises(DataStoreError):
            store.update_calendar_availability("99", {})
