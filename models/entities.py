"""Domain models for the group availability scheduler."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Literal, Optional


class DayClass(str, Enum):
    """Weekday (Mon-Fri) or weekend (Sat-Sun) in an owner's local timezone."""
    WEEKDAY = "weekday"
    WEEKEND = "weekend"


@dataclass(frozen=True)
class LocalWindow:
    """An owner's open wall-clock interval for one day class."""
    available: bool
    start: Optional[str] = None  # e.g. "9:00 AM"
    end: Optional[str] = None    # e.g. "5:00 PM"

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]], day_class: DayClass) -> Optional["LocalWindow"]:
        """
        Build a window from its stored JSON shape.

        Weekday records are written without an ``available`` flag, weekend
        records carry one; a missing flag therefore means open on weekdays
        and closed on weekends.
        """
        if not data:
            return None
        default_available = day_class == DayClass.WEEKDAY
        return cls(
            available=bool(data.get("available", default_available)),
            start=data.get("start") or None,
            end=data.get("end") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"available": self.available, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class AvailabilityPattern:
    """Weekly availability keyed by day class."""
    weekday: Optional[LocalWindow] = None
    weekend: Optional[LocalWindow] = None

    def window_for(self, day_class: DayClass) -> Optional[LocalWindow]:
        return self.weekday if day_class == DayClass.WEEKDAY else self.weekend

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "AvailabilityPattern":
        """Parse the ``{"weekdays": {...}, "weekends": {...}}`` calendar column."""
        data = data or {}
        return cls(
            weekday=LocalWindow.from_dict(data.get("weekdays"), DayClass.WEEKDAY),
            weekend=LocalWindow.from_dict(data.get("weekends"), DayClass.WEEKEND),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.weekday:
            result["weekdays"] = self.weekday.to_dict()
        if self.weekend:
            result["weekends"] = self.weekend.to_dict()
        return result


@dataclass(frozen=True)
class InstantRange:
    """Absolute, timezone-aware ``[start, end)`` pair."""
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("InstantRange requires timezone-aware datetimes")
        if self.start >= self.end:
            raise ValueError(f"InstantRange start {self.start} must precede end {self.end}")

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


@dataclass(frozen=True)
class BookedRange(InstantRange):
    """A confirmed booking belonging to one owner."""
    owner_id: str = ""
    meeting_id: Optional[str] = None


@dataclass
class TimeSlot:
    """Candidate meeting slot of the requested duration."""
    start: datetime
    end: datetime
    participants: list[str] = field(default_factory=list)  # owner ids verified free
    source: Optional[str] = None  # e.g. "business_hours_grid"


@dataclass
class Owner:
    """Read-only snapshot of one participant for a scheduling request."""
    id: str
    timezone: str
    pattern: AvailabilityPattern
    booked_ranges: list[BookedRange] = field(default_factory=list)
    name: Optional[str] = None


@dataclass
class User:
    """Stored user record."""
    user_id: str
    username: str
    timezone: str = "UTC"


@dataclass
class Calendar:
    """Stored calendar record; ``availability`` is the raw pattern JSON."""
    id: str
    user_id: str
    name: str
    is_default: bool = False
    availability: Optional[dict[str, Any]] = None
    description: Optional[str] = None


MeetingStatus = Literal["confirmed", "tentative", "cancelled"]


@dataclass
class Meeting:
    """Stored meeting record."""
    id: str
    calendar_id: str
    title: str
    start_time: datetime
    end_time: datetime
    status: MeetingStatus = "confirmed"
    description: str = ""
    attendee_id: Optional[str] = None


@dataclass
class SchedulingRequest:
    """Finalized request handed to the engine by the front-end."""
    host_id: str
    title: str
    duration_minutes: int
    participants: list[str] = field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    description: str = ""
