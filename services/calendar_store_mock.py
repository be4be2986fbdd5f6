"""In-memory calendar store with synthetic data."""

import dataclasses
import itertools
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

import pytz

from models.entities import Calendar, Meeting, User
from services.errors import DataStoreError


def _as_utc(value: datetime) -> datetime:
    """Stored timestamps are timestamptz; naive values are taken as UTC."""
    return value.replace(tzinfo=pytz.UTC) if value.tzinfo is None else value


class CalendarStoreMock:
    """Mock data store exposing the same queries as SupabaseClient."""

    def __init__(
        self,
        users: Optional[list[User]] = None,
        calendars: Optional[list[Calendar]] = None,
        meetings: Optional[list[Meeting]] = None
    ):
        """Initialize with the given records, or synthetic data if none are given."""
        if users is None and calendars is None and meetings is None:
            users = self._generate_users()
            calendars = self._generate_calendars()
            meetings = self._generate_meetings(users, calendars)

        self._users = {u.user_id: u for u in users or []}
        self._calendars = list(calendars or [])
        self._meetings = [
            dataclasses.replace(m, start_time=_as_utc(m.start_time), end_time=_as_utc(m.end_time))
            for m in meetings or []
        ]
        self._meeting_ids = itertools.count(len(self._meetings) + 1)

    def _generate_users(self) -> list[User]:
        """Generate synthetic users."""
        return [
            User(user_id="user_001", username="alice", timezone="America/New_York"),
            User(user_id="user_002", username="bob", timezone="Europe/London"),
            User(user_id="user_003", username="chitra", timezone="Asia/Kolkata"),
            User(user_id="user_004", username="diego", timezone="America/Los_Angeles"),
        ]

    def _generate_calendars(self) -> list[Calendar]:
        """Generate one default calendar per synthetic user."""
        office_hours = {"weekdays": {"start": "9:00 AM", "end": "5:00 PM"}}
        return [
            Calendar(id="1", user_id="user_001", name="Work", is_default=True,
                     availability=office_hours),
            Calendar(id="2", user_id="user_002", name="Work", is_default=True,
                     availability={
                         "weekdays": {"start": "8:00 AM", "end": "6:00 PM"},
                         "weekends": {"available": True, "start": "10:00 AM", "end": "2:00 PM"},
                     }),
            Calendar(id="3", user_id="user_003", name="Work", is_default=True,
                     availability={
                         "weekdays": {"start": "10:00 AM", "end": "7:00 PM"},
                         "weekends": {"available": False},
                     }),
            Calendar(id="4", user_id="user_004", name="Work", is_default=True,
                     availability=office_hours),
        ]

    def _generate_meetings(self, users: list[User], calendars: list[Calendar]) -> list[Meeting]:
        """Generate a standup and an occasional review for the next 14 days."""
        timezones = {u.user_id: u.timezone for u in users}
        today = date.today()
        meetings = []

        for calendar in calendars:
            tz = pytz.timezone(timezones[calendar.user_id])
            for day_offset in range(14):
                current_date = today + timedelta(days=day_offset)
                if current_date.weekday() >= 5:
                    continue

                standup = tz.localize(datetime.combine(current_date, time(9, 30)))
                meetings.append(Meeting(
                    id=f"{calendar.id}_{day_offset}_standup",
                    calendar_id=calendar.id,
                    title="Daily Standup",
                    start_time=standup,
                    end_time=standup + timedelta(minutes=15),
                ))

                if day_offset % 3 == 0:
                    review = tz.localize(datetime.combine(current_date, time(14, 0)))
                    meetings.append(Meeting(
                        id=f"{calendar.id}_{day_offset}_review",
                        calendar_id=calendar.id,
                        title="Design Review",
                        start_time=review,
                        end_time=review + timedelta(hours=1),
                        # Tentative meetings never block a slot
                        status="tentative" if day_offset % 2 else "confirmed",
                    ))

        return meetings

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def get_users(self, user_ids: list[str]) -> list[User]:
        return [self._users[uid] for uid in user_ids if uid in self._users]

    def get_user_calendars(self, user_id: str) -> list[Calendar]:
        return self.get_calendars_for_users([user_id])

    def get_calendars_for_users(self, user_ids: list[str]) -> list[Calendar]:
        wanted = set(user_ids)
        return sorted(
            (c for c in self._calendars if c.user_id in wanted),
            key=lambda c: c.id
        )

    def get_meetings(
        self,
        calendar_ids: list[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[str] = None
    ) -> list[Meeting]:
        start = _as_utc(start) if start is not None else None
        end = _as_utc(end) if end is not None else None
        wanted = set(calendar_ids)
        result = [
            m for m in self._meetings
            if m.calendar_id in wanted
            and (start is None or m.end_time >= start)
            and (end is None or m.start_time <= end)
            and (status is None or m.status == status)
        ]
        return sorted(result, key=lambda m: m.start_time)

    def create_meeting(
        self,
        calendar_id: str,
        title: str,
        start_time: datetime,
        end_time: datetime,
        description: str = "",
        attendee_id: Optional[str] = None
    ) -> Meeting:
        meeting = Meeting(
            id=str(next(self._meeting_ids)),
            calendar_id=calendar_id,
            title=title,
            start_time=_as_utc(start_time),
            end_time=_as_utc(end_time),
            description=description,
            attendee_id=attendee_id,
        )
        self._meetings.append(meeting)
        return meeting

    def get_user_meetings(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[str] = None
    ) -> list[Meeting]:
        calendar_ids = [c.id for c in self.get_user_calendars(user_id)]
        return self.get_meetings(calendar_ids, start, end, status) if calendar_ids else []

    def create_calendar(
        self,
        user_id: str,
        name: str,
        description: str = "",
        availability: Optional[dict[str, Any]] = None,
        is_default: bool = False
    ) -> Calendar:
        taken = {c.id for c in self._calendars}
        new_id = next(str(i) for i in itertools.count(len(self._calendars) + 1) if str(i) not in taken)
        calendar = Calendar(
            id=new_id,
            user_id=user_id,
            name=name,
            is_default=is_default,
            availability=availability,
            description=description,
        )
        self._calendars.append(calendar)
        return calendar

    def update_calendar_availability(self, calendar_id: str, availability: dict[str, Any]) -> Calendar:
        for i, calendar in enumerate(self._calendars):
            if calendar.id == calendar_id:
                self._calendars[i] = dataclasses.replace(calendar, availability=availability)
                return self._calendars[i]
        raise DataStoreError(f"Calendar {calendar_id} not found")
