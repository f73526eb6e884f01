"""
Workout progress tools for the MCP server.

Thin presentation layer: each tool delegates to the engine and returns JSON.
"""

import json

from workout_sync.api.history import state_to_dict
from workout_sync.api.progress import progress_to_dict
from workout_sync.client_factory import Engine
from workout_sync.errors import TransientFetchFailure
from workout_sync.records import detect_personal_record, session_volume
from workout_sync.utils import clean_nones, format_weight, parse_timestamp
from workout_sync.volume import weekly_volume


def register_tools(app, engine: Engine):
    """Register workout tools with the MCP app."""

    @app.tool()
    async def get_workout_history(user_id: str) -> str:
        """
        Get a user's workout history.

        Shows cached workouts immediately when nothing is loaded yet, then
        syncs with the backend. Stale data is returned rather than an error
        whenever any earlier sync succeeded.

        Args:
            user_id: The user's id

        Returns:
            JSON with source ("cache" or "remote"), count and workouts
        """
        state = await engine.coordinator.load(user_id)
        return json.dumps(state_to_dict(state), indent=2, ensure_ascii=False)

    @app.tool()
    async def refresh_workout_history(user_id: str) -> str:
        """
        Force a sync of a user's workout history with the backend.

        An empty backend answer never replaces workouts already shown.

        Args:
            user_id: The user's id

        Returns:
            JSON with source, count and workouts
        """
        state = await engine.coordinator.refresh(user_id)
        engine.progress.result_cache.invalidate(user_id)
        return json.dumps(state_to_dict(state), indent=2, ensure_ascii=False)

    @app.tool()
    async def get_exercise_progress(user_id: str, force_refresh: bool = False) -> str:
        """
        Get progressive-overload trends for every exercise a user has logged.

        Per exercise: latest best set (by estimated 1RM), personal bests and
        a trend from the first to the latest session.

        Args:
            user_id: The user's id
            force_refresh: Bypass the 2-minute result cache and resync

        Returns:
            JSON list of exercises, most recently trained first
        """
        try:
            progress = await engine.progress.get_progress(user_id, force_refresh=force_refresh)
        except TransientFetchFailure as e:
            return json.dumps(e.to_dict(), indent=2, ensure_ascii=False)

        result = {
            "count": len(progress),
            "exercises": [progress_to_dict(p) for p in progress],
        }
        return json.dumps(result, indent=2, ensure_ascii=False)

    @app.tool()
    async def get_exercise_detail(user_id: str, exercise_name: str) -> str:
        """
        Get the full history and regression trend of one exercise.

        Args:
            user_id: The user's id
            exercise_name: Exact exercise name as logged (e.g. "Bänkpress")

        Returns:
            JSON with every session, session-to-session changes and the
            regression trend (slope per session, R²)
        """
        progress = await engine.progress.get_exercise(user_id, exercise_name)
        if progress is None:
            raise ValueError(f"No history for exercise '{exercise_name}'")
        return json.dumps(progress_to_dict(progress, detail=True), indent=2, ensure_ascii=False)

    @app.tool()
    async def get_weekly_volume(user_id: str, weeks: int = 12) -> str:
        """
        Get weekly gym volume (weight × reps) for the last weeks.

        Args:
            user_id: The user's id
            weeks: Number of weeks, including the current one (default: 12, max: 52)

        Returns:
            JSON list of weeks, oldest first
        """
        state = await engine.coordinator.load(user_id)
        weeks_data = weekly_volume(state.records, engine.clock.now(), weeks=min(weeks, 52))
        result = {
            "weeks": [
                {
                    "week_start": w.week_start.isoformat(),
                    "volume_kg": round(w.volume_kg, 1),
                    "sets": w.set_count,
                    "workouts": w.workout_count,
                }
                for w in weeks_data
            ],
        }
        if state.error is not None:
            result.update(state.error.to_dict())
        return json.dumps(result, indent=2, ensure_ascii=False)

    @app.tool()
    async def get_personal_records(user_id: str, workout_id: str) -> str:
        """
        Check which exercises of one gym workout were personal records.

        Each exercise is compared with the same exercise (case-insensitive)
        in the user's earlier workouts; a first-time exercise is never a PR.

        Args:
            user_id: The user's id
            workout_id: Id of the workout to check

        Returns:
            JSON list of exercises with weight/volume PR flags and increases
        """
        state = await engine.coordinator.load(user_id)
        workout = next((r for r in state.records if r.id == workout_id), None)
        if workout is None:
            raise ValueError(f"No workout '{workout_id}' for user {user_id}")

        performed_at = parse_timestamp(workout.created_at)
        if performed_at is None:
            raise ValueError(f"Workout '{workout_id}' has an unreadable date: {workout.created_at}")

        exercises = []
        for entry in workout.exercises:
            pr = detect_personal_record(entry, state.records, performed_at)
            exercises.append(clean_nones({
                "name": entry.name,
                "heaviest_set": format_weight(max(entry.weights_kg, default=None)),
                "volume_kg": round(session_volume(entry), 1),
                "weight_pr": pr.has_weight_pr,
                "volume_pr": pr.has_volume_pr,
                "increase_percent": round(pr.display_percent, 1) if pr.display_percent else None,
            }))

        result = {"workout_id": workout_id, "date": workout.created_at, "exercises": exercises}
        return json.dumps(result, indent=2, ensure_ascii=False)

    return app
