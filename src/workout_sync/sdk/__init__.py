"""
Workout backend low-level SDK.

Thin wrapper over the backend's REST interface.
Each function maps 1:1 to an endpoint.
"""

from workout_sync.sdk.client import WorkoutApiClient
from workout_sync.sdk.workouts import WORKOUT_POSTS_TABLE, get_user_workout_posts

__all__ = [
    "WorkoutApiClient",
    "WORKOUT_POSTS_TABLE",
    "get_user_workout_posts",
]
