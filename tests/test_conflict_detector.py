"""
Tests for conflicts between candidate ranges and confirmed bookings.
"""

import pytest

from models.entities import BookedRange, InstantRange
from services.conflict_detector import conflicts_with, find_conflicts, has_conflict


@pytest.fixture
def booking(utc):
    """Confirmed booking 10:00-11:00."""
    return BookedRange(start=utc(10), end=utc(11), owner_id="owner")


class TestConflictsWith:

    def test_strict_overlap(self, utc, booking):
        assert conflicts_with(InstantRange(utc(10, 30), utc(11, 30)), booking)

    def test_contained(self, utc, booking):
        assert conflicts_with(InstantRange(utc(10, 15), utc(10, 45)), booking)

    def test_containing(self, utc, booking):
        assert conflicts_with(InstantRange(utc(9), utc(12)), booking)

    def test_same_start(self, utc, booking):
        assert conflicts_with(InstantRange(utc(10), utc(10, 30)), booking)

    def test_same_end(self, utc, booking):
        assert conflicts_with(InstantRange(utc(10, 30), utc(11)), booking)

    def test_ends_when_booking_starts(self, utc, booking):
        assert conflicts_with(InstantRange(utc(9, 30), utc(10)), booking)

    def test_starts_when_booking_ends(self, utc, booking):
        assert conflicts_with(InstantRange(utc(11), utc(11, 30)), booking)

    def test_gap_before(self, utc, booking):
        assert not conflicts_with(InstantRange(utc(9), utc(9, 30)), booking)

    def test_gap_after(self, utc, booking):
        assert not conflicts_with(InstantRange(utc(11, 30), utc(12)), booking)

    def test_boundary_law(self, utc):
        """[10:00,10:30) against [10:30,11:00) shares an instant and conflicts."""
        booked = BookedRange(start=utc(10, 30), end=utc(11), owner_id="owner")
        assert conflicts_with(InstantRange(utc(10), utc(10, 30)), booked)


class TestHasConflict:

    def test_no_bookings(self, utc):
        assert not has_conflict(InstantRange(utc(10), utc(10, 30)), [])

    def test_any_booking_conflicts(self, utc, booking):
        later = BookedRange(start=utc(14), end=utc(15), owner_id="owner")
        assert has_conflict(InstantRange(utc(14, 30), utc(15)), [booking, later])
        assert not has_conflict(InstantRange(utc(12), utc(12, 30)), [booking, later])

    def test_stops_at_first_match(self, utc, booking):
        seen = []

        def bookings():
            for b in (booking, BookedRange(start=utc(12), end=utc(13), owner_id="owner")):
                seen.append(b)
                yield b

        assert has_conflict(InstantRange(utc(10), utc(10, 30)), bookings())
        assert seen == [booking]

    def test_find_conflicts_lists_all(self, utc, booking):
        adjacent = BookedRange(start=utc(11), end=utc(12), owner_id="owner")
        far = BookedRange(start=utc(15), end=utc(16), owner_id="owner")
        result = find_conflicts(InstantRange(utc(10, 30), utc(11)), [booking, adjacent, far])
        assert result == [booking, adjacent]
