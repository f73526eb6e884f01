"""
Personal records and session-to-session changes.

A new session is a PR when it beats the heaviest set or the largest session
volume of every earlier workout for the same exercise.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from workout_sync.models import ActivityType, ExerciseEntry, ExerciseSnapshot
from workout_sync.utils import parse_timestamp


# Volume change (kg) below which two sessions count as unchanged
FLAT_VOLUME_DELTA = 0.5


@dataclass(frozen=True)
class PersonalRecord:
    has_weight_pr: bool
    has_volume_pr: bool
    weight_increase_percent: float = 0.0
    volume_increase_percent: float = 0.0

    @property
    def display_percent(self) -> Optional[float]:
        """Largest increase, or None when nothing improved."""
        best = max(self.weight_increase_percent, self.volume_increase_percent)
        return best if best > 0 else None


NO_RECORD = PersonalRecord(has_weight_pr=False, has_volume_pr=False)


@dataclass(frozen=True)
class SnapshotChange:
    """Difference between two consecutive snapshots' best sets."""
    delta_weight: float
    delta_reps: int
    delta_volume: float
    direction: str  # "up", "down" or "flat"


def session_volume(entry: ExerciseEntry) -> float:
    """Total weight × reps over the paired sets of an entry."""
    return sum(w * r for w, r in zip(entry.weights_kg, entry.reps))


def detect_personal_record(entry: ExerciseEntry, records: list, before: datetime) -> PersonalRecord:
    """Check an exercise entry against the user's earlier gym workouts.

    Only workouts strictly before ``before`` count. Exercise names are
    compared case-insensitively. An exercise never logged before is not a PR.

    Args:
        entry: The exercise as performed in the new workout
        records: The user's WorkoutRecords
        before: Timestamp of the new workout

    Returns:
        PersonalRecord with percentage increases over the previous bests
    """
    name = entry.name.lower()
    previous_weight = None
    previous_volume = None

    for record in records:
        if record.activity_type is not ActivityType.GYM:
            continue
        created = parse_timestamp(record.created_at)
        if created is None or created >= before:
            continue
        for other in record.exercises:
            if other.name.lower() != name:
                continue
            weight = max(other.weights_kg, default=0.0)
            volume = session_volume(other)
            previous_weight = weight if previous_weight is None else max(previous_weight, weight)
            previous_volume = volume if previous_volume is None else max(previous_volume, volume)

    if previous_weight is None:
        return NO_RECORD

    current_weight = max(entry.weights_kg, default=0.0)
    current_volume = session_volume(entry)

    weight_increase = 0.0
    if previous_weight > 0 and current_weight > previous_weight:
        weight_increase = (current_weight - previous_weight) / previous_weight * 100

    volume_increase = 0.0
    if previous_volume > 0 and current_volume > previous_volume:
        volume_increase = (current_volume - previous_volume) / previous_volume * 100

    return PersonalRecord(
        has_weight_pr=weight_increase > 0,
        has_volume_pr=volume_increase > 0,
        weight_increase_percent=weight_increase,
        volume_increase_percent=volume_increase,
    )


def compare_snapshots(previous: ExerciseSnapshot, current: ExerciseSnapshot) -> SnapshotChange:
    delta_weight = current.best_set.weight_kg - previous.best_set.weight_kg
    delta_reps = current.best_set.reps - previous.best_set.reps
    delta_volume = current.best_set.volume - previous.best_set.volume

    if delta_volume > FLAT_VOLUME_DELTA:
        direction = "up"
    elif delta_volume < -FLAT_VOLUME_DELTA:
        direction = "down"
    else:
        direction = "flat"

    return SnapshotChange(delta_weight, delta_reps, delta_volume, direction)
