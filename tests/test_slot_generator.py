"""
Tests for the business-hours candidate grid.
"""

from datetime import date, datetime, timedelta

import pytest
import pytz

from services.errors import InvalidDateRange, InvalidDuration, InvalidTimezone
from services.slot_generator import SlotSequence, generate_slots

MONDAY = date(2025, 6, 2)


class TestGrid:

    def test_thirty_minute_slots_fill_the_day(self, utc):
        slots = list(generate_slots(MONDAY, MONDAY, 30, timezone="UTC"))
        assert len(slots) == 16
        assert slots[0].start == utc(9)
        assert slots[-1].start == utc(16, 30)
        assert slots[-1].end == utc(17)

    def test_every_slot_has_requested_duration(self):
        for slot in generate_slots(MONDAY, MONDAY, 45, timezone="UTC"):
            assert slot.end - slot.start == timedelta(minutes=45)

    def test_slots_never_pass_window_end(self, utc):
        slots = list(generate_slots(MONDAY, MONDAY, 60, timezone="UTC"))
        assert len(slots) == 15
        assert slots[-1].start == utc(16)
        assert all(slot.end <= utc(17) for slot in slots)

    def test_full_window_duration(self, utc):
        slots = list(generate_slots(MONDAY, MONDAY, 480, timezone="UTC"))
        assert [(s.start, s.end) for s in slots] == [(utc(9), utc(17))]

    def test_duration_longer_than_window(self):
        assert list(generate_slots(MONDAY, MONDAY, 481, timezone="UTC")) == []

    def test_weekends_are_not_skipped(self):
        saturday = date(2025, 6, 7)
        assert len(list(generate_slots(saturday, saturday, 30, timezone="UTC"))) == 16

    def test_chronological_across_days(self):
        slots = list(generate_slots(MONDAY, MONDAY + timedelta(days=2), 30, timezone="UTC"))
        assert len(slots) == 48
        starts = [s.start for s in slots]
        assert starts == sorted(starts)

    def test_generation_timezone(self):
        slots = list(generate_slots(MONDAY, MONDAY, 30, timezone="America/New_York"))
        assert slots[0].start == datetime(2025, 6, 2, 13, 0, tzinfo=pytz.UTC)

    def test_grid_follows_dst_change(self):
        before = list(generate_slots(date(2025, 3, 8), date(2025, 3, 8), 30, timezone="America/New_York"))
        after = list(generate_slots(date(2025, 3, 9), date(2025, 3, 9), 30, timezone="America/New_York"))
        assert before[0].start == datetime(2025, 3, 8, 14, 0, tzinfo=pytz.UTC)
        assert after[0].start == datetime(2025, 3, 9, 13, 0, tzinfo=pytz.UTC)
        assert len(before) == len(after) == 16


class TestSequence:

    def test_is_lazy_and_restartable(self):
        sequence = generate_slots(MONDAY, MONDAY + timedelta(days=1), 30, timezone="UTC")
        assert isinstance(sequence, SlotSequence)
        first = [(s.start, s.end) for s in sequence]
        second = [(s.start, s.end) for s in sequence]
        assert first == second
        assert len(sequence) == 32

    def test_single_iteration_can_stop_early(self, utc):
        sequence = generate_slots(MONDAY, MONDAY, 30, timezone="UTC")
        assert next(iter(sequence)).start == utc(9)


class TestValidation:

    def test_reversed_range(self):
        with pytest.raises(InvalidDateRange):
            generate_slots(MONDAY, MONDAY - timedelta(days=1), 30)

    @pytest.mark.parametrize("duration", [0, -30, 30.5, "30", True])
    def test_bad_duration(self, duration):
        with pytest.raises(InvalidDuration):
            generate_slots(MONDAY, MONDAY, duration)

    def test_unknown_generation_timezone(self):
        with pytest.raises(InvalidTimezone):
            generate_slots(MONDAY, MONDAY, 30, timezone="Atlantis/Capital")
