"""
Progressive-overload trend analysis.

Both trend modes operate on the weight trace of an exercise history (the
best-set weight of every snapshot). Nothing here raises: degenerate inputs
resolve to 0 or NEEDS_MORE_DATA.
"""

from workout_sync.models import (
    ExerciseHistory,
    ExerciseProgress,
    TrendClassification,
    TrendResult,
)
from workout_sync.records import compare_snapshots


# Simple trend: percent change thresholds
SIMPLE_STRONG_PERCENT = 5.0
SIMPLE_STRONG_MIN_SNAPSHOTS = 4

# Regression trend: slope thresholds (kg per session)
SMALL_SAMPLE_SLOPE = 0.5
STRONG_SLOPE = 1.0
MODERATE_SLOPE = 0.3
STRONG_R_SQUARED = 0.5
REGRESSION_MIN_SNAPSHOTS = 3


def estimated_1rm(weight: float, reps: int) -> float:
    """Estimated one-rep max, Epley formula.

    Single reps and non-positive reps return the weight itself.
    """
    if reps <= 1:
        return weight
    return weight * (1 + reps / 30)


def percent_change(trace: list) -> float:
    """Change from first to last value, in percent. 0 if undefined."""
    if len(trace) < 2:
        return 0.0
    first, last = trace[0], trace[-1]
    if first == 0:
        return 0.0
    return (last - first) / first * 100


def linear_fit(values: list) -> tuple:
    """Least-squares fit of values against their 0-based index.

    Returns:
        (slope, intercept, r_squared). Slope is 0 when the x variance is 0,
        r_squared is 0 when the y variance is 0.
    """
    n = len(values)
    if n == 0:
        return 0.0, 0.0, 0.0

    x_mean = (n - 1) / 2
    y_mean = sum(values) / n

    num = sum((i - x_mean) * (y - y_mean) for i, y in enumerate(values))
    den = sum((i - x_mean) ** 2 for i in range(n))
    slope = num / den if den != 0 else 0.0
    intercept = y_mean - slope * x_mean

    ss_tot = sum((y - y_mean) ** 2 for y in values)
    if ss_tot == 0:
        return slope, intercept, 0.0
    ss_res = sum((y - (slope * i + intercept)) ** 2 for i, y in enumerate(values))
    return slope, intercept, 1 - ss_res / ss_tot


class TrendAnalyzer:
    """Best-set, 1RM and trend computations over exercise histories."""

    def simple_trend(self, history: ExerciseHistory) -> TrendResult:
        """Cheap first-vs-last classification used for list views."""
        trace = history.weight_trace
        if len(trace) < 2:
            return TrendResult(TrendClassification.NEEDS_MORE_DATA)

        change = percent_change(trace)
        strong = len(trace) >= SIMPLE_STRONG_MIN_SNAPSHOTS

        if change > SIMPLE_STRONG_PERCENT:
            classification = (
                TrendClassification.STRONG_INCREASE if strong else TrendClassification.INCREASE
            )
        elif change > 0:
            classification = TrendClassification.INCREASE
        elif change < -SIMPLE_STRONG_PERCENT:
            classification = (
                TrendClassification.STRONG_DECREASE if strong else TrendClassification.DECREASE
            )
        elif change < 0:
            classification = TrendClassification.DECREASE
        else:
            classification = TrendClassification.PLATEAU

        return TrendResult(classification, percent_change=change)

    def regression_trend(self, history: ExerciseHistory) -> TrendResult:
        """Least-squares classification used for detail views.

        With fewer than 3 snapshots only the slope is trusted; from 3 on, the
        strong classes also require R² above 0.5.
        """
        trace = history.weight_trace
        if len(trace) < 2:
            return TrendResult(TrendClassification.NEEDS_MORE_DATA)

        slope, _, r_squared = linear_fit(trace)

        if len(trace) < REGRESSION_MIN_SNAPSHOTS:
            if slope > SMALL_SAMPLE_SLOPE:
                classification = TrendClassification.INCREASE
            elif slope < -SMALL_SAMPLE_SLOPE:
                classification = TrendClassification.DECREASE
            else:
                classification = TrendClassification.STABLE
        elif slope > STRONG_SLOPE and r_squared > STRONG_R_SQUARED:
            classification = TrendClassification.STRONG_INCREASE
        elif slope > MODERATE_SLOPE:
            classification = TrendClassification.INCREASE
        elif slope < -STRONG_SLOPE and r_squared > STRONG_R_SQUARED:
            classification = TrendClassification.STRONG_DECREASE
        elif slope < -MODERATE_SLOPE:
            classification = TrendClassification.DECREASE
        else:
            classification = TrendClassification.PLATEAU

        return TrendResult(
            classification,
            slope_per_session=slope,
            r_squared=r_squared,
            percent_change=percent_change(trace),
        )

    @staticmethod
    def personal_best_1rm(history: ExerciseHistory) -> float:
        return max(
            (estimated_1rm(s.best_set.weight_kg, s.best_set.reps) for s in history.snapshots),
            default=0.0,
        )

    @staticmethod
    def personal_best_weight(history: ExerciseHistory) -> float:
        """Heaviest single set across every snapshot, not only best sets."""
        return max(
            (st.weight_kg for s in history.snapshots for st in s.all_sets),
            default=0.0,
        )

    def analyze(self, history: ExerciseHistory) -> ExerciseProgress:
        latest = history.latest_snapshot
        latest_1rm = estimated_1rm(latest.best_set.weight_kg, latest.best_set.reps) if latest else 0.0
        changes = tuple(
            compare_snapshots(prev, cur)
            for prev, cur in zip(history.snapshots, history.snapshots[1:])
        )
        return ExerciseProgress(
            history=history,
            simple_trend=self.simple_trend(history),
            regression_trend=self.regression_trend(history),
            personal_best_1rm=self.personal_best_1rm(history),
            personal_best_weight=self.personal_best_weight(history),
            latest_1rm=latest_1rm,
            changes=changes,
        )

    def analyze_all(self, histories: list) -> list:
        return [self.analyze(h) for h in histories]
