"""Fixed business-hours grid of candidate meeting slots."""

from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional

import pytz

from config.settings import Config
from models.entities import TimeSlot
from services.errors import InvalidDateRange, InvalidDuration
from services.timezone_normalizer import get_timezone


class SlotSequence:
    """
    Lazy, restartable sequence of candidate slots.

    Every iteration walks the span again from ``start_date``; nothing is
    materialized up front.
    """

    def __init__(
        self,
        start_date: date,
        end_date: date,
        duration_minutes: int,
        timezone: str,
        business_hours_start: int,
        business_hours_end: int,
        step_minutes: int
    ):
        self.start_date = start_date
        self.end_date = end_date
        self.duration = timedelta(minutes=duration_minutes)
        self.tz = get_timezone(timezone)
        self.business_hours_start = business_hours_start
        self.business_hours_end = business_hours_end
        self.step = timedelta(minutes=step_minutes)

    def __iter__(self) -> Iterator[TimeSlot]:
        current_date = self.start_date
        while current_date <= self.end_date:
            yield from self._slots_for_date(current_date)
            current_date += timedelta(days=1)

    def _slots_for_date(self, current_date: date) -> Iterator[TimeSlot]:
        # Walk naive wall-clock times and localize each one so that a DST
        # change inside the window keeps the grid on local half hours.
        day_start = datetime.combine(current_date, time(self.business_hours_start, 0))
        day_end = datetime.combine(current_date, time(self.business_hours_end, 0))

        slot_start = day_start
        while slot_start + self.duration <= day_end:
            start_utc = self.tz.localize(slot_start).astimezone(pytz.UTC)
            yield TimeSlot(
                start=start_utc,
                end=start_utc + self.duration,
                source="business_hours_grid"
            )
            slot_start += self.step

    def __len__(self) -> int:
        return sum(1 for _ in self)


def generate_slots(
    start_date: date,
    end_date: date,
    duration_minutes: int,
    timezone: Optional[str] = None,
    business_hours_start: Optional[int] = None,
    business_hours_end: Optional[int] = None,
    step_minutes: Optional[int] = None
) -> SlotSequence:
    """
    Enumerate candidate slots across ``[start_date, end_date]``.

    For each date, a slot ``[t, t + duration)`` starts at every step point
    from the business-hours start up to the last point whose slot still ends
    by the business-hours end. Wall-clock times are read in ``timezone``,
    the generation context, which is independent of any owner.

    Args:
        start_date: First date (inclusive)
        end_date: Last date (inclusive)
        duration_minutes: Meeting length
        timezone: Generation context (defaults to Config.SCHEDULER_TIMEZONE)
        business_hours_start: Window start hour (defaults to 9)
        business_hours_end: Window end hour (defaults to 17)
        step_minutes: Spacing between slot starts (defaults to 30)

    Returns:
        SlotSequence in chronological order
    """
    if end_date < start_date:
        raise InvalidDateRange(start_date, end_date)
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
        raise InvalidDuration(f"Duration must be a positive number of minutes, got {duration_minutes!r}")

    return SlotSequence(
        start_date,
        end_date,
        duration_minutes,
        timezone or Config.SCHEDULER_TIMEZONE,
        Config.BUSINESS_HOURS_START if business_hours_start is None else business_hours_start,
        Config.BUSINESS_HOURS_END if business_hours_end is None else business_hours_end,
        step_minutes or Config.SLOT_STEP_MINUTES,
    )
