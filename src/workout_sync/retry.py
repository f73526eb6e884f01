"""
Bounded retries for remote calls.

Fixed delay between attempts (no exponential backoff). Cancellation is
cooperative: an asyncio.Event checked before each attempt and after each
sleep. Setting the event also cuts a pending sleep short.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

from workout_sync.errors import FetchCancelled

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_DELAY = 0.5


class RetryingFetcher:
    """Runs an operation, retrying failures a bounded number of times."""

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        delay: float = DEFAULT_DELAY,
        sleep: Callable = asyncio.sleep,
    ):
        self.max_retries = max_retries
        self.delay = delay
        self._sleep = sleep

    async def fetch(
        self,
        operation: Callable[[], Any],
        max_retries: Optional[int] = None,
        delay: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Any:
        """
        Call operation until it succeeds or the retries run out.

        Args:
            operation: Zero-argument callable. May return an awaitable; plain
                (blocking) callables run in a worker thread.
            max_retries: Extra attempts after the first failure (default 3)
            delay: Seconds to wait between attempts (default 0.5)
            cancel_event: When set, abort before the next attempt

        Returns:
            The operation's result

        Raises:
            FetchCancelled: If cancel_event was set between attempts
            Exception: The last failure, unchanged, once retries are exhausted
        """
        retries = self.max_retries if max_retries is None else max_retries
        wait = self.delay if delay is None else delay
        attempts = retries + 1

        for attempt in range(1, attempts + 1):
            _check_cancelled(cancel_event)
            try:
                return await _call(operation)
            except FetchCancelled:
                raise
            except Exception as e:
                logger.warning("Attempt %d/%d failed: %s", attempt, attempts, e)
                if attempt == attempts:
                    logger.warning("All %d attempts failed", attempts)
                    raise
            await self._pause(wait, cancel_event)
            _check_cancelled(cancel_event)

    async def _pause(self, wait: float, cancel_event: Optional[asyncio.Event]) -> None:
        """Sleep between attempts, waking early when cancel_event is set."""
        if cancel_event is None:
            await self._sleep(wait)
            return
        sleeper = asyncio.ensure_future(self._sleep(wait))
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
            if sleeper.done():
                sleeper.result()
        finally:
            for pending in (sleeper, waiter):
                pending.cancel()


def _check_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise FetchCancelled()


async def _call(operation: Callable[[], Any]) -> Any:
    if inspect.iscoroutinefunction(operation):
        return await operation()
    result = await asyncio.to_thread(operation)
    if inspect.isawaitable(result):
        return await result
    return result
