"""Tests for retry.py - bounded retries with cooperative cancellation."""

import asyncio

import pytest

from workout_sync.errors import FetchCancelled
from workout_sync.retry import RetryingFetcher
from tests.conftest import no_sleep


class Flaky:
    """Fails a fixed number of times, then returns a value."""

    def __init__(self, failures, value="ok"):
        self.failures = failures
        self.value = value
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError(f"failure {self.calls}")
        return self.value


class TestFetch:
    @pytest.mark.asyncio
    async def test_success_first_try(self, fetcher):
        op = Flaky(0)
        assert await fetcher.fetch(op) == "ok"
        assert op.calls == 1

    @pytest.mark.asyncio
    async def test_retries_until_success(self, fetcher):
        op = Flaky(2)
        assert await fetcher.fetch(op) == "ok"
        assert op.calls == 3

    @pytest.mark.asyncio
    async def test_raises_last_error_after_exhaustion(self, fetcher):
        op = Flaky(10)
        with pytest.raises(ConnectionError, match="failure 4"):
            await fetcher.fetch(op)
        assert op.calls == 4

    @pytest.mark.asyncio
    async def test_zero_retries(self, fetcher):
        op = Flaky(10)
        with pytest.raises(ConnectionError):
            await fetcher.fetch(op, max_retries=0)
        assert op.calls == 1

    @pytest.mark.asyncio
    async def test_sleeps_fixed_delay_between_attempts(self):
        delays = []

        async def record_sleep(seconds):
            delays.append(seconds)

        fetcher = RetryingFetcher(max_retries=3, delay=0.5, sleep=record_sleep)
        with pytest.raises(ConnectionError):
            await fetcher.fetch(Flaky(10))
        assert delays == [0.5, 0.5, 0.5]

    @pytest.mark.asyncio
    async def test_delay_override(self):
        delays = []

        async def record_sleep(seconds):
            delays.append(seconds)

        fetcher = RetryingFetcher(sleep=record_sleep)
        await fetcher.fetch(Flaky(1), delay=2.0)
        assert delays == [2.0]

    @pytest.mark.asyncio
    async def test_blocking_callable_runs_in_thread(self, fetcher):
        def blocking():
            return [1, 2]

        assert await fetcher.fetch(blocking) == [1, 2]

    @pytest.mark.asyncio
    async def test_callable_returning_awaitable(self, fetcher):
        async def coro():
            return "done"

        assert await fetcher.fetch(lambda: coro()) == "done"


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_before_first_attempt(self, fetcher):
        event = asyncio.Event()
        event.set()
        op = Flaky(0)
        with pytest.raises(FetchCancelled):
            await fetcher.fetch(op, cancel_event=event)
        assert op.calls == 0

    @pytest.mark.asyncio
    async def test_cancelled_during_sleep(self):
        event = asyncio.Event()

        async def cancelling_sleep(_seconds):
            event.set()

        fetcher = RetryingFetcher(max_retries=3, sleep=cancelling_sleep)
        op = Flaky(10)
        with pytest.raises(FetchCancelled):
            await fetcher.fetch(op, cancel_event=event)
        assert op.calls == 1

    @pytest.mark.asyncio
    async def test_cancel_does_not_interrupt_running_attempt(self, fetcher):
        event = asyncio.Event()

        async def op():
            event.set()
            return "finished"

        assert await fetcher.fetch(op, cancel_event=event) == "finished"

    @pytest.mark.asyncio
    async def test_fetch_cancelled_from_operation_is_not_retried(self):
        calls = []

        async def op():
            calls.append(1)
            raise FetchCancelled()

        fetcher = RetryingFetcher(sleep=no_sleep)
        with pytest.raises(FetchCancelled):
            await fetcher.fetch(op)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_cancel_cuts_long_sleep_short(self):
        event = asyncio.Event()
        op = Flaky(10)
        fetcher = RetryingFetcher(max_retries=3, delay=3600)

        async def cancel_soon():
            await asyncio.sleep(0.01)
            event.set()

        canceller = asyncio.create_task(cancel_soon())
        with pytest.raises(FetchCancelled):
            await asyncio.wait_for(fetcher.fetch(op, cancel_event=event), timeout=1)
        await canceller
        assert op.calls == 1
