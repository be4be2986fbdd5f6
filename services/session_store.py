"""Short-lived store for in-progress scheduling contexts."""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from config.settings import Config
from services.errors import SessionExpired

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Holds one scheduling context per session id until it expires.

    Each store instance is owned by its caller; entries live for ``ttl_seconds``
    after their last write and are purged on access. One store may be shared
    by several UI sessions running in their own threads.
    """

    def __init__(
        self,
        ttl_seconds: int = None,
        clock: Callable[[], float] = time.monotonic,
        on_expire: Optional[Callable[[str, Any], None]] = None
    ):
        self.ttl_seconds = Config.SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self.on_expire = on_expire
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def _pop_expired(self) -> List[Tuple[str, Any]]:
        """Remove expired entries; caller holds the lock."""
        now = self._clock()
        expired = []
        for sid in [sid for sid, (expires_at, _) in self._entries.items() if expires_at <= now]:
            entry = self._entries.pop(sid, None)
            if entry is not None:
                expired.append((sid, entry[1]))
        return expired

    def _notify_expired(self, expired: List[Tuple[str, Any]]):
        # Callbacks run outside the lock so they may use the store
        for sid, context in expired:
            logger.info("Scheduling session %s expired", sid)
            if self.on_expire is not None:
                self.on_expire(sid, context)

    def put(self, session_id: str, context: Any):
        with self._lock:
            expired = self._pop_expired()
            self._entries[session_id] = (self._clock() + self.ttl_seconds, context)
        self._notify_expired(expired)

    def get(self, session_id: str) -> Any:
        """Return the live context, raising SessionExpired if there is none."""
        with self._lock:
            expired = self._pop_expired()
            entry = self._entries.get(session_id)
        self._notify_expired(expired)
        if entry is None:
            raise SessionExpired(f"No active scheduling session for {session_id}")
        return entry[1]

    def find(self, session_id: str) -> Optional[Any]:
        try:
            return self.get(session_id)
        except SessionExpired:
            return None

    def delete(self, session_id: str):
        with self._lock:
            self._entries.pop(session_id, None)

    def __contains__(self, session_id: str) -> bool:
        return self.find(session_id) is not None

    def __len__(self) -> int:
        with self._lock:
            expired = self._pop_expired()
            count = len(self._entries)
        self._notify_expired(expired)
        return count
