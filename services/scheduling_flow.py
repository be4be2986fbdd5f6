"""Step-by-step group scheduling flow as an explicit state machine."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from config.settings import Config
from models.entities import Meeting, SchedulingRequest, TimeSlot
from services.calendar_service import CalendarService
from services.errors import InvalidDateRange, InvalidDuration, InvalidRequest, InvalidTransition
from services.scheduling_engine import SchedulingEngine
from services.session_store import SessionStore

logger = logging.getLogger(__name__)


class FlowState(str, Enum):
    COLLECTING_PARTICIPANTS = "collecting_participants"
    COLLECTING_DATE_RANGE = "collecting_date_range"
    SELECTING_SLOT = "selecting_slot"
    CONFIRMING = "confirming"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


TERMINAL_STATES = {FlowState.CONFIRMED, FlowState.CANCELLED}

_TRANSITIONS = {
    FlowState.COLLECTING_PARTICIPANTS: {FlowState.COLLECTING_DATE_RANGE},
    FlowState.COLLECTING_DATE_RANGE: {FlowState.COLLECTING_DATE_RANGE, FlowState.SELECTING_SLOT},
    # A new date range may be tried while choosing
    FlowState.SELECTING_SLOT: {
        FlowState.COLLECTING_DATE_RANGE, FlowState.SELECTING_SLOT, FlowState.CONFIRMING
    },
    FlowState.CONFIRMING: {FlowState.SELECTING_SLOT, FlowState.CONFIRMED},
}


@dataclass
class SchedulingContext:
    """Everything one in-progress scheduling conversation has collected."""
    session_id: str
    request: SchedulingRequest
    state: FlowState = FlowState.COLLECTING_PARTICIPANTS
    slots: list[TimeSlot] = field(default_factory=list)
    selected_slot: Optional[TimeSlot] = None
    meetings: list[Meeting] = field(default_factory=list)
    cancel_reason: Optional[str] = None
    notice: Optional[str] = None

    @property
    def owner_ids(self) -> list[str]:
        """Host first, then participants, without duplicates."""
        ids = [self.request.host_id] + self.request.participants
        return list(dict.fromkeys(ids))

    def transition(self, new_state: FlowState):
        if new_state == FlowState.CANCELLED:
            if self.state in TERMINAL_STATES:
                raise InvalidTransition(f"Cannot cancel a session that is already {self.state.value}")
        elif new_state not in _TRANSITIONS.get(self.state, set()):
            raise InvalidTransition(f"Cannot move from {self.state.value} to {new_state.value}")
        logger.debug("Session %s: %s -> %s", self.session_id, self.state.value, new_state.value)
        self.state = new_state


def parse_date(value: str, label: str) -> date:
    """Parse ``YYYY-MM-DD`` user input."""
    try:
        return datetime.strptime(value.strip(), Config.DATE_INPUT_FORMAT).date()
    except (AttributeError, ValueError):
        raise InvalidRequest(f"Invalid {label} {value!r}. Please use YYYY-MM-DD.")


class SchedulingFlow:
    """
    Drives a group scheduling session from participant selection to booking.

    States: collecting participants -> collecting date range -> selecting
    slot -> confirming -> confirmed. Any non-terminal state can be cancelled,
    explicitly or by the session timing out in the store.
    """

    def __init__(
        self,
        engine: SchedulingEngine,
        calendar_service: CalendarService,
        store: Optional[SessionStore] = None
    ):
        self.engine = engine
        self.calendar_service = calendar_service
        self.store = store if store is not None else SessionStore()
        self.store.on_expire = self._on_timeout

    def _on_timeout(self, session_id: str, context: SchedulingContext):
        if context.state not in TERMINAL_STATES:
            context.transition(FlowState.CANCELLED)
            context.cancel_reason = "timeout"
            logger.info("Scheduling session %s timed out", session_id)

    def _load(self, session_id: str, *allowed: FlowState) -> SchedulingContext:
        context = self.store.get(session_id)
        if allowed and context.state not in allowed:
            raise InvalidTransition(
                f"Session {session_id} is {context.state.value}, expected one of "
                f"{', '.join(s.value for s in allowed)}"
            )
        return context

    def start(
        self,
        host_id: str,
        title: str,
        duration_minutes,
        description: str = ""
    ) -> SchedulingContext:
        """Open a new session from the title/duration form."""
        if not title or not title.strip():
            raise InvalidRequest("A session title is required.")
        try:
            duration = int(duration_minutes)
        except (TypeError, ValueError):
            raise InvalidDuration(f"Invalid duration {duration_minutes!r}. Please enter a positive number of minutes.")
        if duration <= 0:
            raise InvalidDuration(f"Invalid duration {duration}. Please enter a positive number of minutes.")

        context = SchedulingContext(
            session_id=uuid.uuid4().hex,
            request=SchedulingRequest(
                host_id=host_id,
                title=title.strip(),
                duration_minutes=duration,
                description=description or "",
            ),
        )
        self.store.put(context.session_id, context)
        logger.info("Started scheduling session %s for host %s", context.session_id, host_id)
        return context

    def set_participants(self, session_id: str, participant_ids: list[str]) -> SchedulingContext:
        context = self._load(session_id, FlowState.COLLECTING_PARTICIPANTS)
        participants = list(dict.fromkeys(p for p in participant_ids if p))
        if not participants:
            raise InvalidRequest("Please select at least one participant before continuing.")
        if len(participants) > Config.MAX_PARTICIPANTS:
            raise InvalidRequest(f"At most {Config.MAX_PARTICIPANTS} participants can be selected.")

        context.request.participants = participants
        context.transition(FlowState.COLLECTING_DATE_RANGE)
        self.store.put(session_id, context)
        return context

    def set_date_range(self, session_id: str, start_text: str, end_text: str) -> SchedulingContext:
        """
        Record the date span and compute the group's open slots.

        With no overlap the session stays in COLLECTING_DATE_RANGE with an
        empty slot list so another span can be tried. Malformed input raises.
        """
        context = self._load(session_id, FlowState.COLLECTING_DATE_RANGE, FlowState.SELECTING_SLOT)
        start_date = parse_date(start_text, "start date")
        end_date = parse_date(end_text, "end date")
        if end_date < start_date:
            raise InvalidDateRange(start_date, end_date)

        context.request.start_date = start_date
        context.request.end_date = end_date
        context.slots = self.engine.schedule_for_users(
            context.owner_ids, start_date, end_date, context.request.duration_minutes
        )
        context.selected_slot = None

        if context.slots:
            context.notice = None
            context.transition(FlowState.SELECTING_SLOT)
        else:
            context.notice = "no_overlap"
            context.transition(FlowState.COLLECTING_DATE_RANGE)
        self.store.put(session_id, context)
        return context

    def select_slot(self, session_id: str, index: int) -> SchedulingContext:
        context = self._load(session_id, FlowState.SELECTING_SLOT)
        if not 0 <= index < len(context.slots):
            raise InvalidRequest(f"Slot {index + 1} is not one of the offered times.")

        context.selected_slot = context.slots[index]
        context.transition(FlowState.CONFIRMING)
        self.store.put(session_id, context)
        return context

    def confirm(self, session_id: str) -> SchedulingContext:
        """
        Book the selected slot for every participant.

        Bookings may have changed since the slots were offered, so each
        participant is checked again; if anyone is no longer free the slot
        is dropped and the session returns to slot selection.
        """
        context = self._load(session_id, FlowState.CONFIRMING)
        slot = context.selected_slot

        busy = [
            uid for uid in context.owner_ids
            if not self.calendar_service.is_time_slot_available(uid, slot.start, slot.end)
        ]
        if busy:
            logger.info("Session %s: slot no longer free for %s", session_id, ", ".join(busy))
            context.slots = [s for s in context.slots if s is not slot]
            context.selected_slot = None
            context.notice = "slot_taken"
            context.transition(FlowState.SELECTING_SLOT)
            self.store.put(session_id, context)
            return context

        context.meetings = self.calendar_service.book_meeting(
            context.owner_ids,
            context.request.title,
            slot.start,
            slot.end,
            description=context.request.description,
            host_id=context.request.host_id,
        )
        context.notice = None
        context.transition(FlowState.CONFIRMED)
        self.store.put(session_id, context)
        return context

    def cancel(self, session_id: str, reason: str = "cancelled") -> SchedulingContext:
        context = self._load(session_id)
        context.transition(FlowState.CANCELLED)
        context.cancel_reason = reason
        self.store.delete(session_id)
        logger.info("Scheduling session %s cancelled (%s)", session_id, reason)
        return context

    def timeout(self, session_id: str) -> SchedulingContext:
        """Cancel a session whose user stopped responding."""
        return self.cancel(session_id, reason="timeout")
