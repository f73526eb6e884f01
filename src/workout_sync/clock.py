"""
Time sources.

Everything that compares ages (CacheStore, AnalyticsResultCache, volume
summaries) takes a Clock so tests can pin time.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = None):
        self._now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float = 0, **kwargs) -> None:
        self._now += timedelta(seconds=seconds, **kwargs)

    def set(self, value: datetime) -> None:
        self._now = value
