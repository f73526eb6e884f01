"""
Exercise history aggregation.

Turns a flat list of workout records into one chronological history per
exercise name. Records that are not gym workouts, carry no exercises or have
an unparseable timestamp are dropped silently; the batch never fails.
"""

import logging
from collections import defaultdict

from workout_sync.models import (
    ActivityType,
    ExerciseEntry,
    ExerciseHistory,
    ExerciseSnapshot,
    SetEntry,
)
from workout_sync.trends import estimated_1rm
from workout_sync.utils import parse_timestamp

logger = logging.getLogger(__name__)


def build_sets(entry: ExerciseEntry) -> list:
    """Pair weights with reps up to the shorter list, dropping sets with reps <= 0."""
    return [
        SetEntry(weight_kg=weight, reps=reps)
        for weight, reps in zip(entry.weights_kg, entry.reps)
        if reps > 0
    ]


def best_set(sets: list) -> SetEntry:
    """Set with the highest estimated 1RM; the first one wins ties."""
    best = sets[0]
    for candidate in sets[1:]:
        if estimated_1rm(candidate.weight_kg, candidate.reps) > estimated_1rm(best.weight_kg, best.reps):
            best = candidate
    return best


class HistoryAggregator:
    """Groups per-workout exercise entries into per-exercise histories."""

    def aggregate(self, records: list) -> list:
        """Build exercise histories from workout records.

        Args:
            records: WorkoutRecords in any order

        Returns:
            ExerciseHistory list, most recently trained exercise first
        """
        snapshots_by_name = defaultdict(list)

        for record in records:
            if record.activity_type is not ActivityType.GYM:
                continue
            if not record.exercises:
                continue
            date = parse_timestamp(record.created_at)
            if date is None:
                logger.debug("Dropping workout %s: unparseable created_at %r", record.id, record.created_at)
                continue

            for entry in record.exercises:
                sets = build_sets(entry)
                if not sets:
                    continue
                snapshots_by_name[entry.name].append(ExerciseSnapshot(
                    date=date,
                    best_set=best_set(sets),
                    all_sets=tuple(sets),
                    category=entry.category,
                ))

        histories = []
        for name, snapshots in snapshots_by_name.items():
            # sorted() is stable, so same-date snapshots keep record order
            ordered = tuple(sorted(snapshots, key=lambda s: s.date))
            if not ordered:
                continue
            histories.append(ExerciseHistory(
                name=name,
                category=ordered[-1].category,
                snapshots=ordered,
            ))

        histories.sort(key=lambda h: h.latest_snapshot.date, reverse=True)
        return histories
