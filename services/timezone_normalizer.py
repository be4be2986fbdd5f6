"""Conversion between owners' local wall-clock times and absolute instants."""

import re
from datetime import date, datetime, time
from typing import Union

import pytz

from models.entities import DayClass, InstantRange
from services.errors import InvalidTimeFormat, InvalidTimezone

_WALL_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")


def get_timezone(timezone: str) -> pytz.BaseTzInfo:
    """Resolve an IANA identifier, raising InvalidTimezone if unknown."""
    if not timezone:
        raise InvalidTimezone(timezone)
    try:
        return pytz.timezone(timezone)
    except pytz.UnknownTimeZoneError:
        raise InvalidTimezone(timezone)


def parse_wall_clock(value: str) -> time:
    """Parse ``h:mm AM/PM`` (e.g. "9:00 AM", "12:30pm") into a time."""
    if not isinstance(value, str):
        raise InvalidTimeFormat(value)
    match = _WALL_CLOCK_RE.match(value)
    if not match:
        raise InvalidTimeFormat(value)

    hour, minute, meridiem = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if not 1 <= hour <= 12 or minute > 59:
        raise InvalidTimeFormat(value)

    # 12 AM is midnight, 12 PM is noon
    hour = hour % 12
    if meridiem == "PM":
        hour += 12
    return time(hour, minute)


def localize(local_date: date, wall_clock: time, timezone: str) -> datetime:
    """Attach ``timezone`` to a naive local date/time and return it in UTC."""
    tz = get_timezone(timezone)
    local_dt = tz.localize(datetime.combine(local_date, wall_clock))
    return local_dt.astimezone(pytz.UTC)


def to_instant_range(
    local_date: date,
    local_start_time: str,
    local_end_time: str,
    timezone: str
) -> InstantRange:
    """
    Combine a calendar date with wall-clock start/end strings.

    Both times are interpreted as local time in ``timezone`` on ``local_date``.

    Raises:
        InvalidTimeFormat: either time string is not ``h:mm AM/PM``
        InvalidTimezone: ``timezone`` is not a known identifier
        ValueError: the resulting start is not before the end
    """
    start = localize(local_date, parse_wall_clock(local_start_time), timezone)
    end = localize(local_date, parse_wall_clock(local_end_time), timezone)
    return InstantRange(start=start, end=end)


def to_local(instant: datetime, timezone: str) -> datetime:
    """Express an aware instant as wall-clock time in ``timezone``."""
    if instant.tzinfo is None:
        raise ValueError("Expected a timezone-aware datetime")
    return instant.astimezone(get_timezone(timezone))


def day_class(value: Union[date, datetime], timezone: str) -> DayClass:
    """
    Classify a day as weekday or weekend in ``timezone``.

    Aware datetimes are converted to the zone first; a plain date is
    already local and is classified as given.
    """
    if isinstance(value, datetime):
        value = to_local(value, timezone).date()
    else:
        # Still validate the zone so a broken owner record fails here
        get_timezone(timezone)

    # Monday=0 ... Saturday=5, Sunday=6
    return DayClass.WEEKEND if value.weekday() >= 5 else DayClass.WEEKDAY
