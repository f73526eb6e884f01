"""
Workout post SDK functions.

Each function maps 1:1 to a backend endpoint and returns raw rows.
"""

from typing import Any, Dict, List, Optional

from workout_sync.sdk.client import WorkoutApiClient

WORKOUT_POSTS_TABLE = "rest/v1/workout_posts"


def get_user_workout_posts(
    client: WorkoutApiClient,
    user_id: str,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    Get all workout posts of one user, newest first.

    GET rest/v1/workout_posts?user_id=eq.{user_id}&select=*&order=created_at.desc

    Returns:
        [{id, user_id, activity_type, created_at, duration, distance, exercises_data, ...}]

    Raises:
        ValueError: If the backend does not return a list of rows
    """
    params = {
        "select": "*",
        "user_id": f"eq.{user_id}",
        "order": "created_at.desc",
    }
    if limit:
        params["limit"] = str(limit)

    rows = client.make_request("GET", WORKOUT_POSTS_TABLE, params=params)
    if not isinstance(rows, list):
        raise ValueError(f"Unexpected workout_posts response: {type(rows).__name__}")
    return rows
