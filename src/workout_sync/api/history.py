"""
Workout history: what has the user done?

Decodes backend rows into WorkoutRecords and renders published state for
presentation.
"""

import logging

from workout_sync.errors import DecodeFailure
from workout_sync.models import WorkoutRecord
from workout_sync.sdk.client import WorkoutApiClient
from workout_sync.sdk import workouts as sdk_workouts
from workout_sync.sync import PublishedState
from workout_sync.utils import clean_nones, format_duration, format_timestamp

logger = logging.getLogger(__name__)


def decode_records(rows: list) -> list:
    """Decode rows, dropping the malformed ones instead of failing the batch."""
    records = []
    for row in rows:
        try:
            records.append(WorkoutRecord.from_dict(row))
        except DecodeFailure as e:
            logger.warning("Dropping malformed workout row: %s", e)
    return records


def fetch_user_workout_records(client: WorkoutApiClient, user_id: str) -> list:
    """All of a user's workouts as WorkoutRecords, newest first."""
    rows = sdk_workouts.get_user_workout_posts(client, user_id)
    return decode_records(rows)


def state_to_dict(state: PublishedState) -> dict:
    """Published state as a plain dict for the UI."""
    result = clean_nones({
        "source": state.source,
        "stored_at": format_timestamp(state.stored_at) if state.stored_at else None,
        "count": len(state.records),
        "workouts": [
            clean_nones({
                "id": r.id,
                "date": r.created_at,
                "activity": r.activity_type.value,
                "duration": format_duration(r.duration_seconds) if r.duration_seconds is not None else None,
                "distance_km": r.distance_km,
                "exercise_count": len(r.exercises) or None,
            })
            for r in state.records
        ],
    })
    if state.error is not None:
        result.update(state.error.to_dict())
    return result
