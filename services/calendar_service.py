"""Calendar service building per-request owner snapshots from the data store."""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

import pytz

from models.entities import AvailabilityPattern, BookedRange, Calendar, InstantRange, Meeting, Owner
from services.availability_evaluator import is_within_availability, validate_pattern
from services.conflict_detector import find_conflicts
from services.errors import InvalidRequest, SchedulingError
from services.timezone_normalizer import get_timezone

logger = logging.getLogger(__name__)

CONFIRMED = "confirmed"


class CalendarService:
    """
    Reads owners and their confirmed bookings from a calendar store.

    The store is either SupabaseClient or CalendarStoreMock. Nothing is
    cached: every call reads the store again, since bookings change between
    scheduling requests.
    """

    def __init__(self, store):
        """Initialize with a calendar data store."""
        self.store = store

    @staticmethod
    def _primary_calendar(calendars: list[Calendar]) -> Optional[Calendar]:
        """The default calendar, else the first one created."""
        if not calendars:
            return None
        for calendar in calendars:
            if calendar.is_default:
                return calendar
        return calendars[0]

    @staticmethod
    def _to_booked_range(meeting: Meeting, owner_id: str) -> Optional[BookedRange]:
        start = meeting.start_time
        end = meeting.end_time
        if start.tzinfo is None:
            start = start.replace(tzinfo=pytz.UTC)
        if end.tzinfo is None:
            end = end.replace(tzinfo=pytz.UTC)
        if start >= end:
            logger.warning("Skipping meeting %s with non-positive length", meeting.id)
            return None
        return BookedRange(start=start, end=end, owner_id=owner_id, meeting_id=meeting.id)

    @staticmethod
    def _span_bounds(start_date: date, end_date: date) -> tuple[datetime, datetime]:
        """
        UTC bounds for the booking query.

        Widened by a day on each side so slots generated in any timezone
        still see bookings near the span's edges.
        """
        span_start = datetime.combine(start_date - timedelta(days=1), time.min).replace(tzinfo=pytz.UTC)
        span_end = datetime.combine(end_date + timedelta(days=1), time.max).replace(tzinfo=pytz.UTC)
        return span_start, span_end

    def get_confirmed_bookings(
        self,
        calendars_by_user: dict[str, list[Calendar]],
        start_date: date,
        end_date: date
    ) -> dict[str, list[BookedRange]]:
        """
        Get confirmed bookings per user across all of their calendars.

        Tentative and cancelled meetings are left out.
        """
        owner_by_calendar = {
            calendar.id: user_id
            for user_id, calendars in calendars_by_user.items()
            for calendar in calendars
        }
        bookings: dict[str, list[BookedRange]] = {uid: [] for uid in calendars_by_user}
        if not owner_by_calendar:
            return bookings

        span_start, span_end = self._span_bounds(start_date, end_date)
        meetings = self.store.get_meetings(
            list(owner_by_calendar),
            start=span_start,
            end=span_end,
            status=CONFIRMED
        )

        for meeting in meetings:
            # The status filter is applied again in case a store ignores it
            if meeting.status != CONFIRMED:
                continue
            owner_id = owner_by_calendar.get(meeting.calendar_id)
            if owner_id is None:
                continue
            booked = self._to_booked_range(meeting, owner_id)
            if booked is not None:
                bookings[owner_id].append(booked)

        return bookings

    def get_owner_snapshots(
        self,
        user_ids: list[str],
        start_date: date,
        end_date: date
    ) -> list[Owner]:
        """
        Build one Owner per requested user, in request order.

        A user without a record or without a calendar still yields an Owner,
        with no timezone or an empty pattern, so that evaluation treats them
        as never available instead of silently dropping them from the group.
        """
        users = {u.user_id: u for u in self.store.get_users(user_ids)}
        calendars_by_user: dict[str, list[Calendar]] = {uid: [] for uid in user_ids}
        for calendar in self.store.get_calendars_for_users(user_ids):
            calendars_by_user.setdefault(calendar.user_id, []).append(calendar)

        bookings = self.get_confirmed_bookings(calendars_by_user, start_date, end_date)

        owners = []
        for user_id in user_ids:
            user = users.get(user_id)
            calendar = self._primary_calendar(calendars_by_user.get(user_id, []))
            if user is None:
                logger.warning("No user record for %s; treating as unavailable", user_id)
            if calendar is None:
                logger.warning("No calendar for %s; treating as unavailable", user_id)

            owners.append(Owner(
                id=user_id,
                timezone=user.timezone if user else "",
                pattern=AvailabilityPattern.from_dict(calendar.availability if calendar else None),
                booked_ranges=bookings.get(user_id, []),
                name=user.username if user else None,
            ))

        return owners

    def is_time_slot_available(self, user_id: str, start: datetime, end: datetime) -> bool:
        """
        Check one proposed booking for a single user.

        The range must fall inside the user's availability and must not clash
        with any confirmed meeting.
        """
        owners = self.get_owner_snapshots([user_id], start.date(), end.date())
        owner = owners[0]
        try:
            slot = InstantRange(start=start, end=end)
            if not is_within_availability(slot, owner.pattern, owner.timezone):
                return False
        except (SchedulingError, ValueError) as e:
            logger.warning("Cannot evaluate availability for %s: %s", user_id, e)
            return False

        conflicts = find_conflicts(slot, owner.booked_ranges)
        if conflicts:
            logger.info(
                "Slot %s-%s conflicts with %d meeting(s) for %s",
                start.isoformat(), end.isoformat(), len(conflicts), user_id
            )
            return False
        return True

    def book_meeting(
        self,
        user_ids: list[str],
        title: str,
        start: datetime,
        end: datetime,
        description: str = "",
        host_id: Optional[str] = None
    ) -> list[Meeting]:
        """Create a confirmed meeting on each participant's primary calendar."""
        created = []
        for user_id in user_ids:
            calendar = self._primary_calendar(self.store.get_user_calendars(user_id))
            if calendar is None:
                logger.warning("Cannot book for %s: no calendar", user_id)
                continue
            created.append(self.store.create_meeting(
                calendar.id,
                title,
                start,
                end,
                description=description,
                attendee_id=host_id if host_id != user_id else None,
            ))
        logger.info("Booked '%s' for %d participant(s)", title, len(created))
        return created

    # ------------------------------------------------------------------
    # Meetings
    # ------------------------------------------------------------------

    def list_meetings(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[str] = None,
        calendar_name: Optional[str] = None
    ) -> list[Meeting]:
        """
        A user's meetings starting in ``[start, end)``, earliest first.

        Args:
            user_id: Owner of the calendars to read
            start: Keep meetings starting at or after this instant
            end: Keep meetings starting before this instant
            status: Optional status filter (e.g. "confirmed")
            calendar_name: Only read the calendar with this name (case-insensitive)

        Raises:
            InvalidRequest: no calendar has the given name
        """
        if calendar_name:
            wanted = calendar_name.strip().lower()
            calendar_ids = [c.id for c in self.list_calendars(user_id) if c.name.lower() == wanted]
            if not calendar_ids:
                raise InvalidRequest(f"No calendar found with name \"{calendar_name}\".")
            meetings = self.store.get_meetings(calendar_ids, start=start, end=end, status=status)
        else:
            meetings = self.store.get_user_meetings(user_id, start=start, end=end, status=status)

        return sorted(
            (
                m for m in meetings
                if (start is None or m.start_time >= start)
                and (end is None or m.start_time < end)
            ),
            key=lambda m: m.start_time
        )

    def list_upcoming_meetings(
        self,
        user_id: str,
        calendar_name: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> list[Meeting]:
        now = now or datetime.now(pytz.UTC)
        return self.list_meetings(user_id, start=now, calendar_name=calendar_name)

    def list_today_meetings(self, user_id: str, timezone: str, now: Optional[datetime] = None) -> list[Meeting]:
        """Meetings starting on the current calendar day in ``timezone``."""
        tz = get_timezone(timezone)
        local_today = (now or datetime.now(pytz.UTC)).astimezone(tz).date()
        day_start = tz.localize(datetime.combine(local_today, time.min))
        day_end = tz.localize(datetime.combine(local_today + timedelta(days=1), time.min))
        return self.list_meetings(
            user_id,
            start=day_start.astimezone(pytz.UTC),
            end=day_end.astimezone(pytz.UTC),
        )

    # ------------------------------------------------------------------
    # Calendars and availability
    # ------------------------------------------------------------------

    def list_calendars(self, user_id: str) -> list[Calendar]:
        return self.store.get_user_calendars(user_id)

    def create_calendar(
        self,
        user_id: str,
        name: str,
        description: str = "",
        availability: Optional[dict] = None
    ) -> Calendar:
        """
        Create a calendar for a user.

        Without an explicit pattern the new calendar copies the user's
        current availability. The user's first calendar becomes the default.
        """
        if not name or not name.strip():
            raise InvalidRequest("A calendar name is required.")

        existing = self.list_calendars(user_id)
        if availability is None:
            primary = self._primary_calendar(existing)
            availability = dict(primary.availability or {}) if primary else {}
        if availability:
            validate_pattern(availability)

        calendar = self.store.create_calendar(
            user_id,
            name.strip(),
            description=description or "",
            availability=availability,
            is_default=not existing,
        )
        logger.info("Created calendar '%s' for %s", calendar.name, user_id)
        return calendar

    def get_availability(self, user_id: str) -> Optional[AvailabilityPattern]:
        """The pattern scheduling uses for a user, or None without a calendar."""
        calendar = self._primary_calendar(self.list_calendars(user_id))
        if calendar is None:
            return None
        return AvailabilityPattern.from_dict(calendar.availability)

    def update_availability(
        self,
        user_id: str,
        weekday_hours: tuple[str, str],
        weekend_hours: Optional[tuple[str, str]] = None
    ) -> AvailabilityPattern:
        """
        Replace a user's weekly availability on all of their calendars.

        ``weekend_hours`` of None marks weekends as not available.

        Raises:
            InvalidTimeFormat: a time is not ``h:mm AM/PM``
            InvalidRequest: a window ends before it starts, or the user has no calendar
        """
        availability = {"weekdays": {"start": weekday_hours[0], "end": weekday_hours[1]}}
        if weekend_hours is None:
            availability["weekends"] = {"available": False}
        else:
            availability["weekends"] = {
                "available": True,
                "start": weekend_hours[0],
                "end": weekend_hours[1],
            }
        pattern = validate_pattern(availability)

        calendars = self.list_calendars(user_id)
        if not calendars:
            raise InvalidRequest("Create a calendar before setting availability.")
        for calendar in calendars:
            self.store.update_calendar_availability(calendar.id, availability)
        logger.info("Updated availability on %d calendar(s) for %s", len(calendars), user_id)
        return pattern
