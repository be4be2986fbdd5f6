"""Check candidate ranges against an owner's declared weekly availability."""

import logging
from typing import Optional

from models.entities import AvailabilityPattern, InstantRange
from services.errors import InvalidRequest
from services.timezone_normalizer import day_class, parse_wall_clock, to_instant_range, to_local

logger = logging.getLogger(__name__)


def is_within_availability(
    instant_range: InstantRange,
    pattern: Optional[AvailabilityPattern],
    timezone: str
) -> bool:
    """
    Return True if ``instant_range`` lies inside the owner's open window.

    The window is chosen from the day class of the range's start instant in
    the owner's timezone and built on that local calendar date. Inclusion is
    closed at both ends. The end instant's day class is not checked, so a
    range running past local midnight is judged by the day it started on.

    Raises:
        InvalidTimezone: ``timezone`` is unknown
        InvalidTimeFormat: the window's start/end cannot be parsed
    """
    if pattern is None:
        return False

    local_start = to_local(instant_range.start, timezone)
    window = pattern.window_for(day_class(instant_range.start, timezone))

    if window is None or not window.available:
        return False
    if not window.start or not window.end:
        return False

    # Overnight windows are not supported
    if parse_wall_clock(window.start) >= parse_wall_clock(window.end):
        logger.debug("Ignoring non-increasing window %s-%s", window.start, window.end)
        return False

    open_range = to_instant_range(local_start.date(), window.start, window.end, timezone)
    return instant_range.start >= open_range.start and instant_range.end <= open_range.end


def validate_pattern(data: Optional[dict]) -> AvailabilityPattern:
    """
    Parse an availability record and reject windows that could never match.

    Every open window needs parseable ``h:mm AM/PM`` start and end times,
    with the end after the start.

    Raises:
        InvalidTimeFormat: an open window's start/end is missing or malformed
        InvalidRequest: an open window does not end after it starts
    """
    pattern = AvailabilityPattern.from_dict(data)
    for label, window in (("Weekday", pattern.weekday), ("Weekend", pattern.weekend)):
        if window is None or not window.available:
            continue
        start = parse_wall_clock(window.start)
        end = parse_wall_clock(window.end)
        if start >= end:
            raise InvalidRequest(f"{label} availability must end after it starts ({window.start} - {window.end})")
    return pattern
