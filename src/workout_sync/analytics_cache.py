"""
Short-lived memo of analyzed progress per user.

Avoids re-aggregating a large history when the user navigates back and forth
between screens. A forced refresh bypasses it.
"""

import threading
from datetime import timedelta
from typing import Any, Optional

from workout_sync.clock import Clock, SystemClock

DEFAULT_TTL_SECONDS = 120


class AnalyticsResultCache:
    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Clock = None):
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or SystemClock()
        self._entries: dict = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[Any]:
        """Cached result, or None if absent or older than the TTL."""
        with self._lock:
            entry = self._entries.get(user_id)
            if entry is None:
                return None
            stored_at, value = entry
            if self._clock.now() - stored_at > self._ttl:
                return None
            return value

    def put(self, user_id: str, value: Any) -> None:
        with self._lock:
            self._entries[user_id] = (self._clock.now(), value)

    def invalidate(self, user_id: str) -> None:
        with self._lock:
            self._entries.pop(user_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
