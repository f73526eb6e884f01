"""Tests for api/progress.py - progress service and rendering."""

import pytest

from workout_sync.analytics_cache import AnalyticsResultCache
from workout_sync.api.progress import ProgressService, progress_to_dict
from workout_sync.cache_store import USER_WORKOUTS
from workout_sync.errors import TransientFetchFailure
from workout_sync.retry import RetryingFetcher
from workout_sync.sync import SyncCoordinator
from tests.conftest import gym_record, no_sleep


class CountingRemote:
    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error
        self.calls = 0

    async def fetch(self, user_id):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.records)


def make_service(cache_store, clock, remote):
    coordinator = SyncCoordinator(
        cache_store,
        RetryingFetcher(max_retries=0, sleep=no_sleep),
        remote.fetch,
        dataset=USER_WORKOUTS,
        clock=clock,
    )
    return ProgressService(coordinator, result_cache=AnalyticsResultCache(ttl_seconds=120, clock=clock))


class TestGetProgress:
    @pytest.mark.asyncio
    async def test_analyzes_records(self, cache_store, clock, bench_records):
        service = make_service(cache_store, clock, CountingRemote(bench_records))
        progress = await service.get_progress("user-1")
        assert len(progress) == 1
        assert progress[0].history.name == "Bänkpress"
        assert progress[0].personal_best_weight == 95.0

    @pytest.mark.asyncio
    async def test_result_cache_hit_skips_sync(self, cache_store, clock, bench_records):
        remote = CountingRemote(bench_records)
        service = make_service(cache_store, clock, remote)
        first = await service.get_progress("user-1")
        second = await service.get_progress("user-1")
        assert second is first
        assert remote.calls == 1

    @pytest.mark.asyncio
    async def test_result_cache_expires(self, cache_store, clock, bench_records):
        remote = CountingRemote(bench_records)
        service = make_service(cache_store, clock, remote)
        await service.get_progress("user-1")
        clock.advance(seconds=121)
        await service.get_progress("user-1")
        assert remote.calls == 2

    @pytest.mark.asyncio
    async def test_force_refresh_bypasses_result_cache(self, cache_store, clock, bench_records):
        remote = CountingRemote(bench_records)
        service = make_service(cache_store, clock, remote)
        await service.get_progress("user-1")
        await service.get_progress("user-1", force_refresh=True)
        assert remote.calls == 2

    @pytest.mark.asyncio
    async def test_failure_with_no_data_raises(self, cache_store, clock):
        service = make_service(cache_store, clock, CountingRemote(error=ConnectionError("down")))
        with pytest.raises(TransientFetchFailure):
            await service.get_progress("user-1")
        assert service.result_cache.get("user-1") is None

    @pytest.mark.asyncio
    async def test_failure_uses_cached_records(self, cache_store, clock, bench_records):
        cache_store.put("user-1", USER_WORKOUTS, bench_records)
        service = make_service(cache_store, clock, CountingRemote(error=ConnectionError("down")))
        progress = await service.get_progress("user-1")
        assert progress[0].history.name == "Bänkpress"

    @pytest.mark.asyncio
    async def test_no_workouts(self, cache_store, clock):
        service = make_service(cache_store, clock, CountingRemote([]))
        assert await service.get_progress("user-1") == []


class TestGetExercise:
    @pytest.mark.asyncio
    async def test_exact_match(self, cache_store, clock, bench_records):
        service = make_service(cache_store, clock, CountingRemote(bench_records))
        assert (await service.get_exercise("user-1", "Bänkpress")).history.name == "Bänkpress"
        assert await service.get_exercise("user-1", "bänkpress") is None


class TestProgressToDict:
    def test_summary(self, bench_records):
        service = ProgressService(coordinator=None)
        progress = service.analyze(bench_records)[0]

        result = progress_to_dict(progress)

        assert result["name"] == "Bänkpress"
        assert result["category"] == "Bröst"
        assert result["sessions"] == 2
        assert result["last_trained"] == "2026-02-08T10:00:00+00:00"
        assert result["latest_best_set"] == {"weight_kg": 95.0, "reps": 3}
        assert result["latest_1rm"] == 104.5
        assert result["personal_best_weight"] == 95.0
        assert result["trend"] == "increase"
        assert result["percent_change"] == 5.56
        assert "snapshots" not in result

    def test_detail(self, bench_records):
        progress = ProgressService(coordinator=None).analyze(bench_records)[0]

        result = progress_to_dict(progress, detail=True)

        assert result["regression"]["trend"] == "increase"
        assert result["regression"]["slope_per_session"] == 5.0
        assert len(result["snapshots"]) == 2
        assert result["snapshots"][0]["estimated_1rm"] == 99.0
        assert len(result["snapshots"][0]["sets"]) == 3
        assert result["changes"] == [
            {"delta_weight": 5.0, "delta_reps": 0, "delta_volume": 15.0, "direction": "up"},
        ]
