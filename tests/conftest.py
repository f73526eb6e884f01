"""
Shared pytest fixtures for workout_sync testing.
"""
from datetime import datetime, timezone

import pytest

from workout_sync.cache_store import CacheStore
from workout_sync.clock import FrozenClock
from workout_sync.models import ActivityType, ExerciseEntry, WorkoutRecord
from workout_sync.retry import RetryingFetcher


def get_tool_result_text(result):
    """Extract text from tool result.

    FastMCP call_tool returns a tuple (list_of_TextContent, metadata_dict).
    This helper extracts the text from the first TextContent item.
    """
    # Handle tuple return: (content_list, metadata)
    if isinstance(result, tuple) and len(result) > 0:
        result = result[0]
    if isinstance(result, list) and len(result) > 0:
        if hasattr(result[0], 'text'):
            return result[0].text
    return str(result)


def gym_record(record_id, created_at, exercises, user_id="user-1"):
    """Build a gym WorkoutRecord from (name, weights, reps[, category]) tuples."""
    entries = []
    for ex in exercises:
        name, weights, reps = ex[:3]
        category = ex[3] if len(ex) > 3 else None
        entries.append(ExerciseEntry(
            name=name,
            category=category,
            weights_kg=tuple(float(w) for w in weights),
            reps=tuple(reps),
        ))
    return WorkoutRecord(
        id=record_id,
        user_id=user_id,
        activity_type=ActivityType.GYM,
        created_at=created_at,
        duration_seconds=3600,
        exercises=tuple(entries),
    )


def run_record(record_id, created_at, user_id="user-1"):
    return WorkoutRecord(
        id=record_id,
        user_id=user_id,
        activity_type=ActivityType.RUN,
        created_at=created_at,
        duration_seconds=1800,
        distance_km=5.0,
    )


async def no_sleep(_seconds):
    return None


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 2, 16, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def cache_store(tmp_path, clock):
    return CacheStore(tmp_path / "cache", clock=clock)


@pytest.fixture
def fetcher():
    """Retrying fetcher that does not actually wait between attempts."""
    return RetryingFetcher(max_retries=3, delay=0.5, sleep=no_sleep)


@pytest.fixture
def bench_records():
    """Two bench press sessions a week apart, plus a run."""
    return [
        gym_record("w1", "2026-02-01T10:00:00.123Z", [
            ("Bänkpress", [80, 85, 90], [5, 4, 3], "Bröst"),
        ]),
        run_record("r1", "2026-02-03T07:00:00Z"),
        gym_record("w2", "2026-02-08T10:00:00Z", [
            ("Bänkpress", [95], [3], "Bröst"),
        ]),
    ]
