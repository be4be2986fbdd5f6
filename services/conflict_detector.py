"""Detect clashes between a candidate range and existing confirmed bookings."""

from typing import Iterable

from models.entities import BookedRange, InstantRange


def conflicts_with(candidate: InstantRange, booked: InstantRange) -> bool:
    """
    Return True if ``candidate`` clashes with one booking.

    Besides a strict overlap, any shared boundary instant counts: equal
    starts, equal ends, and back-to-back ranges where one ends exactly when
    the other begins. Meetings are never scheduled gapless.
    """
    overlaps = candidate.start < booked.end and candidate.end > booked.start
    same_start = candidate.start == booked.start
    same_end = candidate.end == booked.end
    touching = candidate.end == booked.start or candidate.start == booked.end
    return overlaps or same_start or same_end or touching


def has_conflict(candidate: InstantRange, booked_ranges: Iterable[BookedRange]) -> bool:
    """Return True on the first booking that clashes with ``candidate``."""
    return any(conflicts_with(candidate, booked) for booked in booked_ranges)


def find_conflicts(candidate: InstantRange, booked_ranges: Iterable[BookedRange]) -> list[BookedRange]:
    """Return every booking that clashes with ``candidate``, in input order."""
    return [booked for booked in booked_ranges if conflicts_with(candidate, booked)]
