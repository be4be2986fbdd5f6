"""REST client for the calendar data store (users, calendars, meetings)."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from config.settings import Config
from models.entities import Calendar, Meeting, User
from services.errors import DataStoreError

logger = logging.getLogger(__name__)


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _in_filter(values: List[Any]) -> str:
    return "in.(" + ",".join(str(v) for v in values) + ")"


class SupabaseClient:
    """Client for the data store's PostgREST interface."""

    def __init__(
        self,
        base_url: str = None,
        api_key: str = None,
        timeout: float = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize the data store client.

        Args:
            base_url: Project URL (defaults to Config.SUPABASE_URL)
            api_key: Service key (defaults to Config.SUPABASE_KEY)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self.base_url = (base_url or Config.SUPABASE_URL).rstrip("/")
        self.api_key = api_key or Config.SUPABASE_KEY
        if not self.base_url or not self.api_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be configured")
        self.timeout = timeout or Config.DATA_STORE_TIMEOUT
        self._transport = transport

    def _get_headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=f"{self.base_url}/rest/v1",
            headers=self._get_headers(),
            timeout=self.timeout,
            transport=self._transport,
        )

    def _select(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        try:
            with self._client() as client:
                response = client.get(f"/{table}", params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            logger.error("HTTP error reading %s from data store: %s", table, e)
            raise DataStoreError(f"Failed to read {table}: {e}") from e
        except ValueError as e:
            logger.error("Invalid JSON reading %s from data store", table)
            raise DataStoreError(f"Invalid response for {table}") from e

    def _insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        try:
            with self._client() as client:
                response = client.post(
                    f"/{table}",
                    json=row,
                    headers={"Prefer": "return=representation"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error("HTTP error writing %s to data store: %s", table, e)
            raise DataStoreError(f"Failed to write {table}: {e}") from e
        except ValueError as e:
            raise DataStoreError(f"Invalid response for {table}") from e

        return data[0] if isinstance(data, list) else data

    def _update(self, table: str, filters: Dict[str, str], changes: Dict[str, Any]) -> List[Dict[str, Any]]:
        try:
            with self._client() as client:
                response = client.patch(
                    f"/{table}",
                    params=filters,
                    json=changes,
                    headers={"Prefer": "return=representation"},
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            logger.error("HTTP error updating %s in data store: %s", table, e)
            raise DataStoreError(f"Failed to update {table}: {e}") from e
        except ValueError as e:
            raise DataStoreError(f"Invalid response for {table}") from e

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _map_user(row: Dict[str, Any]) -> User:
        return User(
            user_id=str(row["user_id"]),
            username=row.get("username", ""),
            timezone=row.get("timezone") or "UTC",
        )

    @staticmethod
    def _map_calendar(row: Dict[str, Any]) -> Calendar:
        return Calendar(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            name=row.get("name", ""),
            is_default=bool(row.get("is_default", False)),
            availability=row.get("availability"),
            description=row.get("description"),
        )

    @staticmethod
    def _map_meeting(row: Dict[str, Any]) -> Meeting:
        return Meeting(
            id=str(row["id"]),
            calendar_id=str(row["calendar_id"]),
            title=row.get("title", ""),
            start_time=_parse_timestamp(row["start_time"]),
            end_time=_parse_timestamp(row["end_time"]),
            status=row.get("status") or "confirmed",
            description=row.get("description") or "",
            attendee_id=row.get("attendee_id"),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        rows = self._select("users", {"select": "*", "user_id": f"eq.{user_id}"})
        return self._map_user(rows[0]) if rows else None

    def get_users(self, user_ids: List[str]) -> List[User]:
        if not user_ids:
            return []
        rows = self._select("users", {"select": "*", "user_id": _in_filter(user_ids)})
        return [self._map_user(row) for row in rows]

    def get_user_calendars(self, user_id: str) -> List[Calendar]:
        return self.get_calendars_for_users([user_id])

    def get_calendars_for_users(self, user_ids: List[str]) -> List[Calendar]:
        if not user_ids:
            return []
        rows = self._select("calendars", {
            "select": "*",
            "user_id": _in_filter(user_ids),
            "order": "id.asc",
        })
        return [self._map_calendar(row) for row in rows]

    def get_meetings(
        self,
        calendar_ids: List[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[str] = None
    ) -> List[Meeting]:
        """
        Get meetings on the given calendars that touch ``[start, end]``.

        Args:
            calendar_ids: Calendars to read
            start: Keep meetings ending at or after this instant
            end: Keep meetings starting at or before this instant
            status: Optional status filter (e.g. "confirmed")
        """
        if not calendar_ids:
            return []

        params = {
            "select": "*",
            "calendar_id": _in_filter(calendar_ids),
            "order": "start_time.asc",
        }
        if start is not None:
            params["end_time"] = f"gte.{start.isoformat()}"
        if end is not None:
            params["start_time"] = f"lte.{end.isoformat()}"
        if status:
            params["status"] = f"eq.{status}"

        rows = self._select("meetings", params)
        return [self._map_meeting(row) for row in rows]

    def create_meeting(
        self,
        calendar_id: str,
        title: str,
        start_time: datetime,
        end_time: datetime,
        description: str = "",
        attendee_id: Optional[str] = None
    ) -> Meeting:
        row = self._insert("meetings", {
            "calendar_id": calendar_id,
            "title": title,
            "description": description,
            "start_time": start_time.isoformat(),
            "end_time": end_time.isoformat(),
            "attendee_id": attendee_id,
            "status": "confirmed",
        })
        logger.info("Created meeting %s on calendar %s", row.get("id"), calendar_id)
        return self._map_meeting(row)

    def get_user_meetings(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[str] = None
    ) -> List[Meeting]:
        """Meetings on every calendar the user owns."""
        calendar_ids = [c.id for c in self.get_user_calendars(user_id)]
        return self.get_meetings(calendar_ids, start, end, status)

    def create_calendar(
        self,
        user_id: str,
        name: str,
        description: str = "",
        availability: Optional[Dict[str, Any]] = None,
        is_default: bool = False
    ) -> Calendar:
        row = self._insert("calendars", {
            "user_id": user_id,
            "name": name,
            "description": description,
            "availability": availability,
            "is_default": is_default,
        })
        logger.info("Created calendar %s for %s", row.get("id"), user_id)
        return self._map_calendar(row)

    def update_calendar_availability(self, calendar_id: str, availability: Dict[str, Any]) -> Calendar:
        rows = self._update("calendars", {"id": f"eq.{calendar_id}"}, {"availability": availability})
        if not rows:
            raise DataStoreError(f"Calendar {calendar_id} not found")
        return self._map_calendar(rows[0])
