"""
Configuration settings for the group availability scheduler
"""
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


class Config:
    # Slot generation context
    SCHEDULER_TIMEZONE = os.getenv("SCHEDULER_TIMEZONE", "UTC")
    BUSINESS_HOURS_START = _env_int("BUSINESS_HOURS_START", 9)   # 9 AM
    BUSINESS_HOURS_END = _env_int("BUSINESS_HOURS_END", 17)      # 5 PM
    SLOT_STEP_MINUTES = _env_int("SLOT_STEP_MINUTES", 30)

    # Upper bound on (days in span) x (owners) per request
    MAX_OWNER_DAYS = _env_int("MAX_OWNER_DAYS", 620)

    # Scheduling flow sessions
    SESSION_TTL_SECONDS = _env_int("SESSION_TTL_SECONDS", 600)  # 10 minutes
    MAX_PARTICIPANTS = _env_int("MAX_PARTICIPANTS", 10)

    # External data store (PostgREST interface)
    SUPABASE_URL = os.getenv("SUPABASE_URL", "")
    SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")
    DATA_STORE_TIMEOUT = 30.0

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE") or None

    # Date/Time Formats
    DATE_INPUT_FORMAT = "%Y-%m-%d"
    WALL_CLOCK_FORMAT = "%I:%M %p"

    @classmethod
    def has_data_store(cls) -> bool:
        """Whether credentials for the remote data store are configured"""
        return bool(cls.SUPABASE_URL and cls.SUPABASE_KEY)
