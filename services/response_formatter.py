"""Structured response formatter for scheduling replies."""

from datetime import date
from typing import Any, Dict, List, Optional

import pytz

from models.entities import AvailabilityPattern, Calendar, LocalWindow, Meeting, TimeSlot
from services.errors import (
    DataStoreError,
    InvalidDateRange,
    InvalidDuration,
    InvalidRequest,
    InvalidTimeFormat,
    InvalidTimezone,
    SchedulingError,
    SchedulingLimitExceeded,
    SessionExpired,
)


class ResponseFormatter:
    """Formats scheduling replies in a consistent, structured manner."""

    @staticmethod
    def format_section(title: str, content: List[str], icon: str = "📋") -> str:
        """Format a section with title and content."""
        lines = [f"**{icon} {title}**", ""]
        lines.extend(content)
        return "\n".join(lines)

    @staticmethod
    def describe_slot(slot: TimeSlot, timezone: str) -> Dict[str, str]:
        """Human-readable date, time and weekday of a slot in the viewer's timezone."""
        tz = pytz.timezone(timezone)
        local_start = slot.start.astimezone(tz)
        local_end = slot.end.astimezone(tz)
        return {
            "date": local_start.strftime("%Y-%m-%d"),
            "time": local_start.strftime("%I:%M %p").lstrip("0"),
            "end_time": local_end.strftime("%I:%M %p").lstrip("0"),
            "day": local_start.strftime("%A"),
            "start": slot.start.isoformat(),
            "end": slot.end.isoformat(),
        }

    @staticmethod
    def format_slots(
        slots: List[TimeSlot],
        timezone: str,
        title: str,
        show_all: bool = False,
        limit: int = 25
    ) -> tuple[str, List[Dict[str, Any]]]:
        """
        Format offered slots with option information.

        Returns:
            tuple: (formatted_text, option_info_list)
            option_info_list has a 'label' and 'index' per displayed slot
        """
        if not slots:
            return ResponseFormatter.format_no_overlap(), []

        shown = slots if show_all else slots[:limit]
        lines = [
            "**🎯 Available Times**",
            "",
            f"Found **{len(slots)}** time(s) when everyone is free for \"{title}\".",
            f"Times are shown in {timezone}.",
            "",
        ]

        options = []
        current_day = None
        for i, slot in enumerate(shown):
            info = ResponseFormatter.describe_slot(slot, timezone)
            if info["date"] != current_day:
                current_day = info["date"]
                lines.append(f"**{info['day']}, {info['date']}**")
            lines.append(f"   • {info['time']} - {info['end_time']}")
            options.append({
                "label": f"{info['day'][:3]} {info['date']} {info['time']}",
                "index": i,
            })

        if len(slots) > len(shown):
            lines.append("")
            lines.append(f"*+ {len(slots) - len(shown)} more time(s) available.*")

        return "\n".join(lines), options

    @staticmethod
    def format_no_overlap(start_date: Optional[date] = None, end_date: Optional[date] = None) -> str:
        """No slot satisfies everyone; the request itself was fine."""
        span = f" between {start_date} and {end_date}" if start_date and end_date else ""
        return ResponseFormatter.format_error(
            "No Common Availability",
            f"There is no time{span} when every participant is free.",
            suggestions=[
                "Try a wider date range",
                "Try a shorter duration",
                "Ask participants to review their availability",
            ]
        )

    @staticmethod
    def format_request_error(error: SchedulingError) -> str:
        """Explain why a request was rejected, by error kind."""
        if isinstance(error, InvalidDateRange):
            return ResponseFormatter.format_error(
                "Invalid Date Range", "End date must be after start date.")
        if isinstance(error, InvalidDuration):
            return ResponseFormatter.format_error(
                "Invalid Duration", "Please enter a positive number of minutes.")
        if isinstance(error, SchedulingLimitExceeded):
            return ResponseFormatter.format_error(
                "Request Too Large", str(error),
                suggestions=["Choose a shorter date range", "Invite fewer participants"])
        if isinstance(error, (InvalidTimeFormat, InvalidTimezone)):
            return ResponseFormatter.format_error(
                "Invalid Availability Settings", str(error),
                suggestions=["Use times like 9:00 AM", "Check the timezone in your profile"])
        if isinstance(error, SessionExpired):
            return ResponseFormatter.format_error(
                "Session Expired", "Your session has expired. Please start over.")
        if isinstance(error, DataStoreError):
            return ResponseFormatter.format_error(
                "Calendar Unavailable", "Calendars could not be loaded. Please try again later.")
        if isinstance(error, InvalidRequest):
            return ResponseFormatter.format_error("Invalid Input", str(error))
        return ResponseFormatter.format_error("Request Failed", str(error))

    @staticmethod
    def format_confirmation(title: str, slot: TimeSlot, timezone: str, participants: List[str]) -> str:
        info = ResponseFormatter.describe_slot(slot, timezone)
        return ResponseFormatter.format_success(
            "Meeting Scheduled",
            f"\"{title}\" is booked.",
            details=[
                f"Time: {info['day']}, {info['date']} at {info['time']} ({timezone})",
                f"Duration: {int((slot.end - slot.start).total_seconds() // 60)} minutes",
                f"Participants: {', '.join(participants)}",
            ]
        )

    @staticmethod
    def _window_text(window: Optional[LocalWindow]) -> str:
        if window is None:
            return "Not set"
        if not window.available:
            return "Not available"
        return f"{window.start} - {window.end}"

    @staticmethod
    def format_availability(pattern: Optional[AvailabilityPattern], timezone: str) -> str:
        """Weekly availability as shown on the availability page."""
        pattern = pattern or AvailabilityPattern()
        return ResponseFormatter.format_section("Your Availability", [
            f"• Timezone: {timezone or 'Not set'}",
            f"• Weekdays (Mon-Fri): {ResponseFormatter._window_text(pattern.weekday)}",
            f"• Weekends (Sat-Sun): {ResponseFormatter._window_text(pattern.weekend)}",
        ], icon="🕘")

    @staticmethod
    def format_calendars(calendars: List[Calendar]) -> str:
        if not calendars:
            return ResponseFormatter.format_section(
                "Your Calendars", ["You don't have any calendars yet."], icon="📅")

        lines = [f"You have {len(calendars)} calendar(s).", ""]
        for i, calendar in enumerate(calendars, 1):
            pattern = AvailabilityPattern.from_dict(calendar.availability)
            default = " (default)" if calendar.is_default else ""
            lines.append(f"**{i}. {calendar.name}**{default}")
            lines.append(f"   {calendar.description or 'No description'}")
            lines.append(f"   Weekdays: {ResponseFormatter._window_text(pattern.weekday)}")
            lines.append(f"   Weekends: {ResponseFormatter._window_text(pattern.weekend)}")
        return ResponseFormatter.format_section("Your Calendars", lines, icon="📅")

    @staticmethod
    def format_meetings(
        meetings: List[Meeting],
        timezone: str,
        title: str,
        calendar_names: Optional[Dict[str, str]] = None,
        limit: int = 10
    ) -> str:
        """List meetings in the viewer's timezone, earliest first."""
        if not meetings:
            return ResponseFormatter.format_section(title, ["You have no meetings scheduled."])

        tz = pytz.timezone(timezone)
        calendar_names = calendar_names or {}
        lines = [f"You have {len(meetings)} meeting(s).", ""]
        for meeting in meetings[:limit]:
            start = meeting.start_time.astimezone(tz)
            end = meeting.end_time.astimezone(tz)
            minutes = int((meeting.end_time - meeting.start_time).total_seconds() // 60)
            lines.append(f"**{meeting.title}**")
            lines.append(
                f"   {start.strftime('%B %d, %Y')} {start.strftime('%I:%M %p').lstrip('0')}"
                f" - {end.strftime('%I:%M %p').lstrip('0')} ({minutes} min)"
            )
            if meeting.calendar_id in calendar_names:
                lines.append(f"   Calendar: {calendar_names[meeting.calendar_id]}")
            if meeting.status != "confirmed":
                lines.append(f"   Status: {meeting.status}")
        if len(meetings) > limit:
            lines.append("")
            lines.append(f"*Showing {limit} of {len(meetings)} meetings.*")
        return ResponseFormatter.format_section(title, lines)

    @staticmethod
    def format_success(title: str, message: str, details: Optional[List[str]] = None) -> str:
        """Format a success message."""
        lines = [
            f"**✅ {title}**",
            "",
            message
        ]

        if details:
            lines.append("")
            for detail in details:
                lines.append(f"• {detail}")

        return "\n".join(lines)

    @staticmethod
    def format_error(title: str, message: str, suggestions: Optional[List[str]] = None) -> str:
        """Format an error message."""
        lines = [
            f"**❌ {title}**",
            "",
            message
        ]

        if suggestions:
            lines.append("")
            lines.append("**Suggestions:**")
            for suggestion in suggestions:
                lines.append(f"• {suggestion}")

        return "\n".join(lines)
