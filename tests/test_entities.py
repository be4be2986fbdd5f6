"""
Tests for availability records and instant ranges.
"""

from datetime import datetime

import pytest

from models.entities import AvailabilityPattern, DayClass, InstantRange, LocalWindow


class TestAvailabilityPattern:

    def test_missing_flag_defaults_by_day_class(self):
        pattern = AvailabilityPattern.from_dict({
            "weekdays": {"start": "9:00 AM", "end": "5:00 PM"},
            "weekends": {"start": "10:00 AM", "end": "2:00 PM"},
        })
        assert pattern.window_for(DayClass.WEEKDAY).available
        assert not pattern.window_for(DayClass.WEEKEND).available

    def test_explicit_flag_wins(self):
        pattern = AvailabilityPattern.from_dict({
            "weekdays": {"available": False, "start": "9:00 AM", "end": "5:00 PM"},
            "weekends": {"available": True, "start": "10:00 AM", "end": "2:00 PM"},
        })
        assert not pattern.weekday.available
        assert pattern.weekend.available

    def test_empty_record(self):
        pattern = AvailabilityPattern.from_dict(None)
        assert pattern.weekday is None
        assert pattern.weekend is None
        assert pattern.to_dict() == {}

    def test_blank_times_become_none(self):
        window = LocalWindow.from_dict({"available": True, "start": "", "end": "5:00 PM"}, DayClass.WEEKDAY)
        assert window.start is None

    def test_to_dict_keeps_stored_keys(self):
        data = {"weekdays": {"available": True, "start": "9:00 AM", "end": "5:00 PM"}}
        assert AvailabilityPattern.from_dict(data).to_dict() == data


class TestInstantRange:

    def test_duration(self, utc):
        assert InstantRange(utc(9), utc(10, 30)).duration_minutes == 90

    def test_rejects_naive(self):
        with pytest.raises(ValueError):
            InstantRange(datetime(2025, 6, 2, 9), datetime(2025, 6, 2, 10))

    @pytest.mark.parametrize("end_hour", [9, 8])
    def test_rejects_empty_or_reversed(self, utc, end_hour):
        with pytest.raises(ValueError):
            InstantRange(utc(9), utc(end_hour))
