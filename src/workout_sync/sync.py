"""
Cache-first loading with an authoritative background refresh.

A load publishes whatever the cache holds right away, then asks the backend.
The backend's answer replaces the published data unless it is empty while
the published data is not: a lagging replica or a transient hiccup must
never make a user's history vanish. Failures fall back to stale cache and
only reach the UI when there is nothing at all to show.
"""

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from workout_sync.cache_store import USER_WORKOUTS, CacheStore, Dataset
from workout_sync.clock import Clock, SystemClock
from workout_sync.errors import FetchCancelled, TransientFetchFailure, WorkoutSyncError
from workout_sync.retry import RetryingFetcher

logger = logging.getLogger(__name__)

SOURCE_CACHE = "cache"
SOURCE_REMOTE = "remote"


@dataclass(frozen=True)
class PublishedState:
    """What the UI currently shows for one user."""
    records: list = field(default_factory=list)
    error: Optional[WorkoutSyncError] = None
    source: Optional[str] = None
    stored_at: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return not self.records


EMPTY_STATE = PublishedState()


class StateCell:
    """A subscribable value holding the latest PublishedState."""

    def __init__(self, initial: PublishedState = EMPTY_STATE):
        self._value = initial
        self._subscribers: list = []
        self._queues: set = set()

    @property
    def value(self) -> PublishedState:
        return self._value

    def publish(self, state: PublishedState) -> None:
        self._value = state
        for callback in list(self._subscribers):
            callback(state)
        for queue in list(self._queues):
            queue.put_nowait(state)

    def subscribe(self, callback: Callable[[PublishedState], None]) -> Callable[[], None]:
        """Call callback on every publish. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def updates(self):
        """Async iterator yielding the current state, then every published one."""
        queue: asyncio.Queue = asyncio.Queue()
        self._queues.add(queue)
        try:
            yield self._value
            while True:
                yield await queue.get()
        finally:
            self._queues.discard(queue)


class SyncCoordinator:
    """
    Keeps a per-user published state in step with cache and backend.

    Concurrent calls for the same user are not coalesced; callers that want
    single-flight behaviour cancel the superseded call.
    """

    def __init__(
        self,
        cache_store: CacheStore,
        fetcher: RetryingFetcher,
        remote: Callable[[str], Any],
        dataset: Dataset = USER_WORKOUTS,
        clock: Clock = None,
    ):
        self._cache = cache_store
        self._fetcher = fetcher
        self._remote = remote
        self._dataset = dataset
        self._clock = clock or SystemClock()
        self._cells: dict = {}

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    def state(self, user_id: str) -> StateCell:
        cell = self._cells.get(user_id)
        if cell is None:
            cell = self._cells[user_id] = StateCell()
        return cell

    async def load(self, user_id: str, cancel_event: Optional[asyncio.Event] = None) -> PublishedState:
        """Publish cached data immediately (if nothing is shown yet), then sync with the backend."""
        return await self._sync(user_id, cancel_event, fast_path=True)

    async def refresh(self, user_id: str, cancel_event: Optional[asyncio.Event] = None) -> PublishedState:
        """User-initiated refresh: same as load without the cache fast path."""
        return await self._sync(user_id, cancel_event, fast_path=False)

    async def _sync(self, user_id: str, cancel_event: Optional[asyncio.Event], fast_path: bool) -> PublishedState:
        cell = self.state(user_id)
        found = cell.value
        fast = None

        if fast_path and cell.value.is_empty:
            entry = self._cache.get_entry(user_id, self._dataset)
            if entry is not None and entry.value:
                fast = PublishedState(
                    records=list(entry.value),
                    source=SOURCE_CACHE,
                    stored_at=entry.stored_at,
                )
                cell.publish(fast)

        try:
            records = await self._fetcher.fetch(
                functools.partial(self._remote, user_id),
                cancel_event=cancel_event,
            )
        except FetchCancelled:
            logger.debug("Sync of %s for %s cancelled", self._dataset.name, user_id)
            self._restore(cell, found, fast)
            return cell.value
        except asyncio.CancelledError:
            self._restore(cell, found, fast)
            raise
        except Exception as e:
            if cancel_event is not None and cancel_event.is_set():
                logger.debug("Sync of %s for %s cancelled after a failed attempt: %s", self._dataset.name, user_id, e)
                self._restore(cell, found, fast)
                return cell.value
            return self._fall_back(user_id, cell, e)

        if cancel_event is not None and cancel_event.is_set():
            logger.debug("Sync of %s for %s cancelled before publishing", self._dataset.name, user_id)
            self._restore(cell, found, fast)
            return cell.value

        records = list(records)
        if records or cell.value.is_empty:
            cell.publish(PublishedState(
                records=records,
                source=SOURCE_REMOTE,
                stored_at=self._clock.now(),
            ))
            self._cache.put(user_id, self._dataset, records)
        else:
            logger.warning(
                "Backend returned no %s for %s; keeping %d published records",
                self._dataset.name, user_id, len(cell.value.records),
            )
        return cell.value

    def _fall_back(self, user_id: str, cell: StateCell, error: Exception) -> PublishedState:
        if not cell.value.is_empty:
            logger.warning("Sync of %s for %s failed, keeping published data: %s", self._dataset.name, user_id, error)
            return cell.value

        entry = self._cache.get_entry(user_id, self._dataset)
        if entry is not None and entry.value:
            logger.warning("Sync of %s for %s failed, showing cache from %s", self._dataset.name, user_id, entry.stored_at)
            cell.publish(PublishedState(
                records=list(entry.value),
                source=SOURCE_CACHE,
                stored_at=entry.stored_at,
            ))
            return cell.value

        logger.error("Sync of %s for %s failed with no cached data: %s", self._dataset.name, user_id, error)
        failure = TransientFetchFailure(f"Could not load {self._dataset.name}: {error}")
        failure.__cause__ = error
        cell.publish(PublishedState(error=failure))
        return cell.value

    @staticmethod
    def _restore(cell: StateCell, found: PublishedState, fast: Optional[PublishedState]) -> None:
        # Undo only our own fast-path publish, not another call's result
        if fast is not None and cell.value is fast:
            cell.publish(found)
