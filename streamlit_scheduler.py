"""Group Scheduling Assistant - Streamlit front-end."""

import logging
from datetime import date, timedelta

import streamlit as st

from config.settings import Config
from services.calendar_service import CalendarService
from services.calendar_store_mock import CalendarStoreMock
from services.errors import SchedulingError
from services.response_formatter import ResponseFormatter
from services.scheduling_engine import SchedulingEngine
from services.scheduling_flow import FlowState, SchedulingFlow
from services.session_store import SessionStore
from services.supabase_client import SupabaseClient
from utils.logger import SchedulerLogger

# ============================================================================
# CONFIGURATION
# ============================================================================

SchedulerLogger.setup_logging(Config.LOG_LEVEL, Config.LOG_FILE)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="Group Scheduler",
    page_icon="🗓️",
    layout="wide"
)

# ============================================================================
# SERVICE INITIALIZATION
# ============================================================================

@st.cache_resource
def get_services():
    """Initialize and cache services; the mock store is used without credentials."""
    if Config.has_data_store():
        store = SupabaseClient()
    else:
        logger.info("No data store configured, using synthetic calendars")
        store = CalendarStoreMock()

    calendar_service = CalendarService(store)
    engine = SchedulingEngine(calendar_service)
    flow = SchedulingFlow(engine, calendar_service, SessionStore())
    return store, calendar_service, flow


store, calendar_service, flow = get_services()

# ============================================================================
# SESSION STATE INITIALIZATION
# ============================================================================

if "session_id" not in st.session_state:
    st.session_state.session_id = None
    st.session_state.message = None

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def current_context():
    """The live scheduling context, or None once it is gone."""
    if not st.session_state.session_id:
        return None
    context = flow.store.find(st.session_state.session_id)
    if context is None:
        st.session_state.session_id = None
        st.session_state.message = ResponseFormatter.format_error(
            "Session Expired", "Your session timed out. Please start over.")
    return context


def run_step(step, *args):
    """Run a flow step, showing request errors instead of raising."""
    try:
        return step(st.session_state.session_id, *args)
    except SchedulingError as e:
        st.session_state.message = ResponseFormatter.format_request_error(e)
        return None


def viewer_timezone(user_id: str) -> str:
    user = store.get_user(user_id)
    return user.timezone if user else Config.SCHEDULER_TIMEZONE

# ============================================================================
# ACCOUNT SIDEBAR
# ============================================================================

def render_account_sidebar(calendar_service: CalendarService):
    """Meetings, availability and calendars for one user."""
    with st.sidebar:
        st.header("My Account")
        user_id = st.text_input("User id", value="user_001", key="account_user_id")
        tz = viewer_timezone(user_id)
        view = st.radio("View", ["Upcoming meetings", "Today", "Availability", "Calendars"])

        try:
            calendars = calendar_service.list_calendars(user_id)
            calendar_names = {c.id: c.name for c in calendars}

            if view == "Upcoming meetings":
                calendar_name = st.selectbox("Calendar", ["All calendars"] + [c.name for c in calendars])
                meetings = calendar_service.list_upcoming_meetings(
                    user_id, calendar_name=None if calendar_name == "All calendars" else calendar_name)
                st.markdown(ResponseFormatter.format_meetings(
                    meetings, tz, "Upcoming Meetings", calendar_names))

            elif view == "Today":
                meetings = calendar_service.list_today_meetings(user_id, tz)
                st.markdown(ResponseFormatter.format_meetings(
                    meetings, tz, "Today's Meetings", calendar_names))

            elif view == "Availability":
                st.markdown(ResponseFormatter.format_availability(
                    calendar_service.get_availability(user_id), tz))
                with st.form("availability_form"):
                    weekday_start = st.text_input("Weekday start", placeholder="9:00 AM")
                    weekday_end = st.text_input("Weekday end", placeholder="5:00 PM")
                    weekends_open = st.checkbox("Available on weekends")
                    weekend_start = st.text_input("Weekend start", placeholder="10:00 AM")
                    weekend_end = st.text_input("Weekend end", placeholder="2:00 PM")
                    save = st.form_submit_button("Update Availability")
                if save:
                    calendar_service.update_availability(
                        user_id,
                        (weekday_start, weekday_end),
                        (weekend_start, weekend_end) if weekends_open else None,
                    )
                    st.session_state.message = ResponseFormatter.format_success(
                        "Availability Updated", "Your availability has been updated successfully.")
                    st.rerun()

            else:
                st.markdown(ResponseFormatter.format_calendars(calendars))
                with st.form("calendar_form"):
                    name = st.text_input("Calendar name", placeholder="Work")
                    description = st.text_area("Description (optional)")
                    create = st.form_submit_button("Create Calendar")
                if create:
                    calendar = calendar_service.create_calendar(user_id, name, description)
                    st.session_state.message = ResponseFormatter.format_success(
                        "Calendar Created", f"Your calendar \"{calendar.name}\" has been created successfully.")
                    st.rerun()

        except SchedulingError as e:
            st.markdown(ResponseFormatter.format_request_error(e))

# ============================================================================
# MAIN INTERFACE
# ============================================================================

st.title("🗓️ Group Scheduler")
render_account_sidebar(calendar_service)

if st.session_state.message:
    st.markdown(st.session_state.message)
    st.session_state.message = None

context = current_context()

if context is None:
    st.subheader("Session Details")
    with st.form("session_details_form"):
        host_id = st.text_input("Your user id", value="user_001")
        title = st.text_input("Session Title", placeholder="Team Planning Session")
        duration = st.text_input("Duration (minutes)", placeholder="60")
        description = st.text_area("Description (optional)")
        submitted = st.form_submit_button("Continue")

    if submitted:
        try:
            context = flow.start(host_id, title, duration, description)
            st.session_state.session_id = context.session_id
        except SchedulingError as e:
            st.session_state.message = ResponseFormatter.format_request_error(e)
        st.rerun()

elif context.state == FlowState.COLLECTING_PARTICIPANTS:
    st.subheader(f"Add Participants to \"{context.request.title}\"")
    raw_ids = st.text_input("Participant user ids (comma separated)", placeholder="user_002, user_003")
    selected = [uid.strip() for uid in raw_ids.split(",") if uid.strip()]
    col1, col2 = st.columns(2)
    if col1.button("Continue to Scheduling", type="primary"):
        run_step(flow.set_participants, selected)
        st.rerun()
    if col2.button("Cancel"):
        run_step(flow.cancel)
        st.session_state.session_id = None
        st.session_state.message = "Group session cancelled."
        st.rerun()

elif context.state in (FlowState.COLLECTING_DATE_RANGE, FlowState.SELECTING_SLOT):
    tz = viewer_timezone(context.request.host_id)
    st.subheader("Select Date Range")
    with st.form("date_range_form"):
        start_text = st.text_input("Start Date (YYYY-MM-DD)", value=date.today().isoformat())
        end_text = st.text_input("End Date (YYYY-MM-DD)", value=(date.today() + timedelta(days=7)).isoformat())
        find = st.form_submit_button("Find Times")
    if find:
        updated = run_step(flow.set_date_range, start_text, end_text)
        if updated is not None and updated.notice == "no_overlap":
            st.session_state.message = ResponseFormatter.format_no_overlap(
                updated.request.start_date, updated.request.end_date)
        st.rerun()

    if context.state == FlowState.SELECTING_SLOT:
        if context.notice == "slot_taken":
            st.warning("That time was just taken. Please pick another.")
        text, options = ResponseFormatter.format_slots(context.slots, tz, context.request.title)
        st.markdown(text)
        for option in options:
            if st.button(option["label"], key=f"slot_{option['index']}"):
                run_step(flow.select_slot, option["index"])
                st.rerun()

    if st.button("Cancel"):
        run_step(flow.cancel)
        st.session_state.session_id = None
        st.rerun()

elif context.state == FlowState.CONFIRMING:
    tz = viewer_timezone(context.request.host_id)
    info = ResponseFormatter.describe_slot(context.selected_slot, tz)
    st.markdown(ResponseFormatter.format_section(
        f"Confirm \"{context.request.title}\"",
        [
            f"• Time: {info['day']}, {info['date']} at {info['time']} ({tz})",
            f"• Duration: {context.request.duration_minutes} minutes",
            f"• Participants: {', '.join(context.owner_ids)}",
        ],
    ))
    col1, col2 = st.columns(2)
    if col1.button("Confirm", type="primary"):
        run_step(flow.confirm)
        st.rerun()
    if col2.button("Cancel"):
        run_step(flow.cancel)
        st.session_state.session_id = None
        st.rerun()

elif context.state == FlowState.CONFIRMED:
    tz = viewer_timezone(context.request.host_id)
    st.markdown(ResponseFormatter.format_confirmation(
        context.request.title, context.selected_slot, tz, context.owner_ids))
    if st.button("Schedule Another"):
        flow.store.delete(context.session_id)
        st.session_state.session_id = None
        st.rerun()
