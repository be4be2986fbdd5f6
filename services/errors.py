"""Error types raised by the scheduling services."""


class SchedulingError(Exception):
    """Base class for scheduling failures."""


class InvalidTimeFormat(SchedulingError, ValueError):
    """A wall-clock string is not in ``h:mm AM/PM`` form."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid time format: {value!r}. Expected h:mm AM/PM")


class InvalidTimezone(SchedulingError, ValueError):
    """A timezone identifier is not in the IANA catalog."""

    def __init__(self, timezone):
        self.timezone = timezone
        super().__init__(f"Unknown timezone: {timezone!r}")


class InvalidDateRange(SchedulingError, ValueError):
    """End date precedes start date."""

    def __init__(self, start_date, end_date):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(f"End date {end_date} must not be before start date {start_date}")


class InvalidDuration(SchedulingError, ValueError):
    """Meeting duration is not a positive number of minutes."""


class SchedulingLimitExceeded(SchedulingError):
    """The requested span times the number of owners exceeds the work bound."""


class InvalidRequest(SchedulingError, ValueError):
    """User input for the scheduling flow is malformed."""


class InvalidTransition(SchedulingError):
    """A scheduling flow step was attempted from the wrong state."""


class SessionExpired(SchedulingError):
    """No live scheduling context exists for the session id."""


class DataStoreError(SchedulingError):
    """The calendar data store could not be read or written."""
