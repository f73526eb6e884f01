"""
Domain types for workout synchronization and progress analytics.

WorkoutRecord and ExerciseEntry come from the remote backend and are never
mutated locally. Snapshots, histories and trend results are derived on every
aggregation pass and are cheap to throw away.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from workout_sync.errors import DecodeFailure


class ActivityType(Enum):
    """Activity kinds the client records."""
    RUN = "Run"
    GOLF = "Golf"
    GYM = "Gym"
    CLIMB = "Climb"
    SKI = "Ski"
    OTHER = "Other"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "ActivityType":
        """Map a backend activity label (English or Swedish) to an ActivityType.

        The backend stores free-form labels such as "Gympass", "Löpning" or
        "weight_training"; matching is by keyword, unknown labels are OTHER.
        """
        if not label:
            return cls.OTHER
        text = label.lower()
        exact = _ACTIVITY_LABELS.get(text)
        if exact is not None:
            return exact
        for activity, keywords in _ACTIVITY_KEYWORDS:
            if any(k in text for k in keywords):
                return activity
        return cls.OTHER


# Labels the client writes, matched before keywords ("Golfrunda" contains "run")
_ACTIVITY_LABELS = {
    "gympass": ActivityType.GYM,
    "löppass": ActivityType.RUN,
    "golfrunda": ActivityType.GOLF,
    "klättring": ActivityType.CLIMB,
    "skidåkning": ActivityType.SKI,
}

# Order matters: golf before run
_ACTIVITY_KEYWORDS = (
    (ActivityType.GYM, ("gym", "strength", "weight_training")),
    (ActivityType.GOLF, ("golf",)),
    (ActivityType.RUN, ("run", "löp")),
    (ActivityType.CLIMB, ("climb", "klätt")),
    (ActivityType.SKI, ("ski", "skid")),
)


class TrendClassification(Enum):
    STRONG_INCREASE = "strong_increase"
    INCREASE = "increase"
    STABLE = "stable"
    PLATEAU = "plateau"
    DECREASE = "decrease"
    STRONG_DECREASE = "strong_decrease"
    NEEDS_MORE_DATA = "needs_more_data"


@dataclass(frozen=True)
class ExerciseEntry:
    """One exercise inside a gym workout, with parallel weight/rep lists."""
    name: str
    category: Optional[str] = None
    weights_kg: tuple = ()
    reps: tuple = ()

    @classmethod
    def from_dict(cls, d: dict) -> "ExerciseEntry":
        """Create an entry from a backend row ({name, category, kg, reps}).

        Raises:
            DecodeFailure: If the name is missing or the set lists are malformed.
        """
        if not isinstance(d, dict):
            raise DecodeFailure(f"Exercise must be an object, got {type(d).__name__}")
        name = d.get("name")
        if not isinstance(name, str) or not name:
            raise DecodeFailure("Exercise is missing a name")

        weights = d.get("weights_kg", d.get("kg", []))
        reps = d.get("reps", [])
        if not isinstance(weights, list) or not isinstance(reps, list):
            raise DecodeFailure(f"Exercise '{name}' has malformed sets")
        try:
            weights = tuple(float(w) for w in weights)
            reps = tuple(int(r) for r in reps)
        except (TypeError, ValueError):
            raise DecodeFailure(f"Exercise '{name}' has non-numeric sets")

        return cls(name=name, category=d.get("category"), weights_kg=weights, reps=reps)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "category": self.category,
            "weights_kg": list(self.weights_kg),
            "reps": list(self.reps),
        }


@dataclass(frozen=True)
class WorkoutRecord:
    """A single logged workout."""
    id: str
    user_id: str
    activity_type: ActivityType
    created_at: str  # raw ISO-8601, parsed during aggregation
    duration_seconds: Optional[int] = None
    distance_km: Optional[float] = None
    exercises: tuple = ()

    @classmethod
    def from_dict(cls, d: dict) -> "WorkoutRecord":
        """Create a record from a backend row or from ``to_dict`` output.

        Raises:
            DecodeFailure: If required fields are missing or values are invalid.
        """
        if not isinstance(d, dict):
            raise DecodeFailure(f"Workout must be an object, got {type(d).__name__}")

        record_id = d.get("id")
        user_id = d.get("user_id")
        created_at = d.get("created_at")
        if not record_id or not user_id or not isinstance(created_at, str):
            raise DecodeFailure(f"Workout {record_id!r} is missing id, user_id or created_at")

        duration = _optional_number(d, ("duration_seconds", "duration"), int, record_id)
        distance = _optional_number(d, ("distance_km", "distance"), float, record_id)

        raw_exercises = d.get("exercises", d.get("exercises_data")) or []
        if not isinstance(raw_exercises, list):
            raise DecodeFailure(f"Workout {record_id!r} has malformed exercises")

        return cls(
            id=str(record_id),
            user_id=str(user_id),
            activity_type=ActivityType.from_label(d.get("activity_type")),
            created_at=created_at,
            duration_seconds=duration,
            distance_km=distance,
            exercises=tuple(ExerciseEntry.from_dict(e) for e in raw_exercises),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "activity_type": self.activity_type.value,
            "created_at": self.created_at,
            "duration_seconds": self.duration_seconds,
            "distance_km": self.distance_km,
            "exercises": [e.to_dict() for e in self.exercises],
        }


def _optional_number(d: dict, keys: tuple, kind, record_id: Any):
    for key in keys:
        value = d.get(key)
        if value is None:
            continue
        try:
            number = kind(value)
        except (TypeError, ValueError):
            raise DecodeFailure(f"Workout {record_id!r} has invalid {key}: {value!r}")
        if number < 0:
            raise DecodeFailure(f"Workout {record_id!r} has negative {key}")
        return number
    return None


@dataclass(frozen=True)
class SetEntry:
    """A performed set: weight × reps."""
    weight_kg: float
    reps: int

    @property
    def volume(self) -> float:
        return self.weight_kg * self.reps


@dataclass(frozen=True)
class ExerciseSnapshot:
    """One exercise as performed in one workout."""
    date: datetime
    best_set: SetEntry
    all_sets: tuple
    category: Optional[str] = None


@dataclass(frozen=True)
class ExerciseHistory:
    """All snapshots of one exercise name, oldest first."""
    name: str
    category: Optional[str]
    snapshots: tuple

    @property
    def latest_snapshot(self) -> Optional[ExerciseSnapshot]:
        return self.snapshots[-1] if self.snapshots else None

    @property
    def weight_trace(self) -> list:
        """Best-set weights, one per snapshot."""
        return [s.best_set.weight_kg for s in self.snapshots]


@dataclass(frozen=True)
class TrendResult:
    classification: TrendClassification
    slope_per_session: float = 0.0
    r_squared: float = 0.0
    percent_change: float = 0.0


@dataclass(frozen=True)
class ExerciseProgress:
    """An analyzed exercise history."""
    history: ExerciseHistory
    simple_trend: TrendResult
    regression_trend: TrendResult
    personal_best_1rm: float
    personal_best_weight: float
    latest_1rm: float = 0.0
    changes: tuple = field(default=())
