"""
Exercise progress: is the user getting stronger?

Combines the synced workout history with aggregation and trend analysis,
memoized per user for a short TTL.
"""

import asyncio
import logging
from typing import Optional

from workout_sync.aggregation import HistoryAggregator
from workout_sync.analytics_cache import AnalyticsResultCache
from workout_sync.models import ExerciseProgress, ExerciseSnapshot
from workout_sync.sync import SyncCoordinator
from workout_sync.trends import TrendAnalyzer, estimated_1rm
from workout_sync.utils import clean_nones, format_timestamp

logger = logging.getLogger(__name__)


class ProgressService:
    """Loads a user's workouts and turns them into per-exercise progress."""

    def __init__(
        self,
        coordinator: SyncCoordinator,
        aggregator: HistoryAggregator = None,
        analyzer: TrendAnalyzer = None,
        result_cache: AnalyticsResultCache = None,
    ):
        self._coordinator = coordinator
        self._aggregator = aggregator or HistoryAggregator()
        self._analyzer = analyzer or TrendAnalyzer()
        self._result_cache = result_cache or AnalyticsResultCache()

    @property
    def result_cache(self) -> AnalyticsResultCache:
        return self._result_cache

    def analyze(self, records: list) -> list:
        """Aggregate and analyze records (pure, CPU-bound)."""
        return self._analyzer.analyze_all(self._aggregator.aggregate(records))

    async def get_progress(
        self,
        user_id: str,
        force_refresh: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> list:
        """
        Per-exercise progress for a user, most recently trained first.

        Args:
            user_id: User to analyze
            force_refresh: Skip the result cache and the cache fast path
            cancel_event: Cooperative cancellation for the underlying fetch

        Returns:
            List of ExerciseProgress

        Raises:
            TransientFetchFailure: If nothing could be loaded from backend or cache
        """
        if not force_refresh:
            cached = self._result_cache.get(user_id)
            if cached is not None:
                return cached
            state = await self._coordinator.load(user_id, cancel_event)
        else:
            state = await self._coordinator.refresh(user_id, cancel_event)

        if state.error is not None and state.is_empty:
            raise state.error

        # Aggregation is CPU-bound; keep it off the event loop
        progress = await asyncio.to_thread(self.analyze, state.records)

        if cancel_event is None or not cancel_event.is_set():
            self._result_cache.put(user_id, progress)
        return progress

    async def get_exercise(self, user_id: str, name: str, force_refresh: bool = False) -> Optional[ExerciseProgress]:
        """Progress of one exercise (exact name match), or None."""
        for progress in await self.get_progress(user_id, force_refresh=force_refresh):
            if progress.history.name == name:
                return progress
        return None


def _snapshot_to_dict(snapshot: ExerciseSnapshot) -> dict:
    best = snapshot.best_set
    return {
        "date": format_timestamp(snapshot.date),
        "best_set": {"weight_kg": best.weight_kg, "reps": best.reps},
        "estimated_1rm": round(estimated_1rm(best.weight_kg, best.reps), 2),
        "sets": [{"weight_kg": s.weight_kg, "reps": s.reps} for s in snapshot.all_sets],
    }


def progress_to_dict(progress: ExerciseProgress, detail: bool = False) -> dict:
    """
    Render progress for the UI.

    The list view uses the simple trend; the detail view adds the regression
    trend, every snapshot and the session-to-session changes.
    """
    history = progress.history
    latest = history.latest_snapshot
    result = {
        "name": history.name,
        "category": history.category,
        "sessions": len(history.snapshots),
        "last_trained": format_timestamp(latest.date) if latest else None,
        "latest_best_set": {
            "weight_kg": latest.best_set.weight_kg,
            "reps": latest.best_set.reps,
        } if latest else None,
        "latest_1rm": round(progress.latest_1rm, 2),
        "personal_best_1rm": round(progress.personal_best_1rm, 2),
        "personal_best_weight": progress.personal_best_weight,
        "trend": progress.simple_trend.classification.value,
        "percent_change": round(progress.simple_trend.percent_change, 2),
    }

    if detail:
        regression = progress.regression_trend
        result["regression"] = {
            "trend": regression.classification.value,
            "slope_per_session": round(regression.slope_per_session, 3),
            "r_squared": round(regression.r_squared, 3),
            "percent_change": round(regression.percent_change, 2),
        }
        result["snapshots"] = [_snapshot_to_dict(s) for s in history.snapshots]
        result["changes"] = [
            {
                "delta_weight": round(c.delta_weight, 2),
                "delta_reps": c.delta_reps,
                "delta_volume": round(c.delta_volume, 2),
                "direction": c.direction,
            }
            for c in progress.changes
        ]

    return clean_nones(result)
