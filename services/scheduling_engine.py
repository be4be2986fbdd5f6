"""Core group scheduling algorithm."""

import logging
from datetime import date
from typing import Optional

from config.settings import Config
from models.entities import Owner, TimeSlot
from services.availability_evaluator import is_within_availability
from services.calendar_service import CalendarService
from services.conflict_detector import has_conflict
from services.errors import InvalidDateRange, SchedulingError, SchedulingLimitExceeded
from services.slot_generator import generate_slots

logger = logging.getLogger(__name__)


class SchedulingEngine:
    """Engine for finding meeting slots every participant can attend."""

    def __init__(
        self,
        calendar_service: Optional[CalendarService] = None,
        timezone: Optional[str] = None,
        max_owner_days: Optional[int] = None
    ):
        """
        Initialize scheduling engine.

        Args:
            calendar_service: Source of owner snapshots for schedule_for_users
            timezone: Generation context for the business-hours grid
            max_owner_days: Upper bound on (days in span) x (owners)
        """
        self.calendar_service = calendar_service
        self.timezone = timezone or Config.SCHEDULER_TIMEZONE
        self.max_owner_days = Config.MAX_OWNER_DAYS if max_owner_days is None else max_owner_days

    def _check_limits(self, owner_count: int, start_date: date, end_date: date):
        if end_date < start_date:
            raise InvalidDateRange(start_date, end_date)
        days = (end_date - start_date).days + 1
        if days * max(owner_count, 1) > self.max_owner_days:
            raise SchedulingLimitExceeded(
                f"{days} day(s) x {owner_count} participant(s) exceeds the limit of "
                f"{self.max_owner_days}"
            )

    def _owner_can_attend(self, owner: Owner, slot: TimeSlot) -> bool:
        """Availability and conflict check for one owner; malformed records mean no."""
        try:
            if not is_within_availability(slot, owner.pattern, owner.timezone):
                return False
        except (SchedulingError, ValueError) as e:
            logger.warning("Treating %s as unavailable at %s: %s", owner.id, slot.start.isoformat(), e)
            return False
        return not has_conflict(slot, owner.booked_ranges)

    def find_available_slots(
        self,
        owners: list[Owner],
        start_date: date,
        end_date: date,
        duration_minutes: int
    ) -> list[TimeSlot]:
        """
        Find slots where every owner is available and conflict-free.

        Args:
            owners: Participant snapshots for this request
            start_date: First date of the span (inclusive)
            end_date: Last date of the span (inclusive)
            duration_minutes: Meeting length

        Returns:
            Retained slots in chronological order, each listing the owner ids

        Raises:
            InvalidDateRange: end_date precedes start_date
            InvalidDuration: duration is not a positive integer
            SchedulingLimitExceeded: the span is too large for the group
        """
        # Zero participants trivially yield nothing
        if not owners:
            return []

        self._check_limits(len(owners), start_date, end_date)
        candidates = generate_slots(start_date, end_date, duration_minutes, timezone=self.timezone)

        owner_ids = [owner.id for owner in owners]
        available = []
        for slot in candidates:
            if all(self._owner_can_attend(owner, slot) for owner in owners):
                available.append(TimeSlot(
                    start=slot.start,
                    end=slot.end,
                    participants=list(owner_ids),
                    source="intersection"
                ))

        logger.info(
            "Found %d slot(s) for %d participant(s) between %s and %s",
            len(available), len(owners), start_date, end_date
        )
        return available

    def schedule_for_users(
        self,
        user_ids: list[str],
        start_date: date,
        end_date: date,
        duration_minutes: int
    ) -> list[TimeSlot]:
        """Read fresh owner snapshots for ``user_ids`` and intersect them."""
        if self.calendar_service is None:
            raise RuntimeError("SchedulingEngine needs a CalendarService to look up users")

        if not user_ids:
            return []

        # Fail fast before touching the store
        self._check_limits(len(user_ids), start_date, end_date)
        generate_slots(start_date, end_date, duration_minutes, timezone=self.timezone)

        owners = self.calendar_service.get_owner_snapshots(user_ids, start_date, end_date)
        return self.find_available_slots(owners, start_date, end_date, duration_minutes)
