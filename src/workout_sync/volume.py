"""
Weekly training volume.

Sums weight × reps of every gym set per ISO week (Monday start, UTC).
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from workout_sync.models import ActivityType
from workout_sync.utils import parse_timestamp


@dataclass(frozen=True)
class WeekVolume:
    week_start: date
    volume_kg: float = 0.0
    set_count: int = 0
    workout_count: int = 0


def week_start(moment: datetime) -> date:
    day = moment.astimezone(timezone.utc).date()
    return day - timedelta(days=day.weekday())


def weekly_volume(records: list, now: datetime, weeks: int = 12) -> list:
    """
    Gym volume for the last ``weeks`` weeks, oldest first.

    Args:
        records: WorkoutRecords
        now: Reference time; its week is the last one returned
        weeks: Number of weeks

    Returns:
        List of WeekVolume, one per week including empty weeks
    """
    if weeks <= 0:
        return []

    current = week_start(now)
    starts = [current - timedelta(weeks=offset) for offset in reversed(range(weeks))]
    totals = {start: [0.0, 0, 0] for start in starts}

    for record in records:
        if record.activity_type is not ActivityType.GYM:
            continue
        created = parse_timestamp(record.created_at)
        if created is None:
            continue
        bucket = totals.get(week_start(created))
        if bucket is None:
            continue
        bucket[2] += 1
        for entry in record.exercises:
            for weight, reps in zip(entry.weights_kg, entry.reps):
                if reps <= 0:
                    continue
                bucket[0] += weight * reps
                bucket[1] += 1

    return [
        WeekVolume(week_start=start, volume_kg=v, set_count=s, workout_count=w)
        for start, (v, s, w) in totals.items()
    ]
