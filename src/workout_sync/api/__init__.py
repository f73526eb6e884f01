"""
High-Level API: workout history and progress for presentation layers.

Every function returns plain data a UI can render.
Composes with the SDK internally.

Modules:
    history  : What has the user done?         (decode, published state)
    progress : Is the user getting stronger?   (aggregation, trends, memo)
"""

from workout_sync.api.history import decode_records, fetch_user_workout_records, state_to_dict
from workout_sync.api.progress import ProgressService, progress_to_dict

__all__ = [
    # History
    "decode_records", "fetch_user_workout_records", "state_to_dict",
    # Progress
    "ProgressService", "progress_to_dict",
]
