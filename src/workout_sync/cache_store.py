"""
Persistent last-known-good cache.

One JSON file per (dataset, user) under the cache directory:
    {cache_dir}/{dataset}/{sha256(user_id)}.json -> {"user_id", "stored_at", "value"}

Reads never raise: a missing or unreadable file is simply "no entry".
Writes go through a temp file and os.replace, under a per-key lock, so a
reader never sees a half-written entry and concurrent writers to the same
key do not interleave.
"""

import hashlib
import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Optional

from workout_sync.clock import Clock, SystemClock
from workout_sync.errors import DecodeFailure
from workout_sync.models import WorkoutRecord

logger = logging.getLogger(__name__)


def _identity(value):
    return value


@dataclass(frozen=True)
class Dataset:
    """A cached dataset type: its name, maximum age and JSON codec."""
    name: str
    max_age: timedelta
    encode: Callable[[Any], Any] = _identity
    decode: Callable[[Any], Any] = _identity


def _encode_cached_records(records: list) -> list:
    return [r.to_dict() for r in records]


def _decode_cached_records(rows: list) -> list:
    return [WorkoutRecord.from_dict(r) for r in rows]


USER_WORKOUTS = Dataset("user_workouts", timedelta(days=7), _encode_cached_records, _decode_cached_records)
SOCIAL_FEED = Dataset("social_feed", timedelta(minutes=5), _encode_cached_records, _decode_cached_records)


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: datetime
    user_id: str


class CacheStore:
    """File-backed cache of the last successful value per (user, dataset)."""

    def __init__(self, directory, clock: Clock = None):
        self._directory = Path(directory)
        self._clock = clock or SystemClock()
        self._locks: dict = {}
        self._locks_guard = threading.Lock()

    @property
    def directory(self) -> Path:
        return self._directory

    def _lock_for(self, key: tuple) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def path_for(self, user_id: str, dataset: Dataset) -> Path:
        """File holding the (user_id, dataset) entry.

        Named by a digest of the raw id: distinct ids never share a file and
        no id can escape the dataset directory.
        """
        digest = hashlib.sha256(user_id.encode("utf-8")).hexdigest()
        return self._directory / dataset.name / f"{digest}.json"

    def put(self, user_id: str, dataset: Dataset, value: Any) -> None:
        """Store value for (user_id, dataset), replacing any previous entry."""
        path = self.path_for(user_id, dataset)
        with self._lock_for((dataset.name, user_id)):
            try:
                payload = json.dumps({
                    "user_id": user_id,
                    "stored_at": self._clock.now().isoformat(),
                    "value": dataset.encode(value),
                }, ensure_ascii=False)
                path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        f.write(payload)
                    os.replace(tmp_name, path)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except (OSError, TypeError, ValueError) as e:
                # The cache is not authoritative; a failed write only costs a fast path
                logger.warning("Failed to write %s cache for %s: %s", dataset.name, user_id, e)

    def get_entry(self, user_id: str, dataset: Dataset) -> Optional[CacheEntry]:
        """Return the stored entry regardless of age, or None."""
        path = self.path_for(user_id, dataset)
        with self._lock_for((dataset.name, user_id)):
            if not path.exists():
                return None
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if data["user_id"] != user_id:
                    logger.warning("Ignoring %s cache stored for another user", dataset.name)
                    return None
                return CacheEntry(
                    value=dataset.decode(data["value"]),
                    stored_at=datetime.fromisoformat(data["stored_at"]),
                    user_id=data["user_id"],
                )
            except (OSError, KeyError, TypeError, ValueError, DecodeFailure) as e:
                logger.warning("Ignoring unreadable %s cache for %s: %s", dataset.name, user_id, e)
                return None

    def get(self, user_id: str, dataset: Dataset, allow_expired: bool = False) -> Any:
        """Return the cached value, or None.

        Args:
            user_id: Owner of the data
            dataset: Dataset type (determines the maximum age)
            allow_expired: Ignore the entry's age. Only for fallback display,
                never for deciding whether to overwrite fresher data.
        """
        entry = self.get_entry(user_id, dataset)
        if entry is None:
            return None
        if not allow_expired and self._is_expired(entry, dataset):
            return None
        return entry.value

    def is_valid(self, user_id: str, dataset: Dataset) -> bool:
        """True if an unexpired entry exists."""
        entry = self.get_entry(user_id, dataset)
        return entry is not None and not self._is_expired(entry, dataset)

    def _is_expired(self, entry: CacheEntry, dataset: Dataset) -> bool:
        return self._clock.now() - entry.stored_at > dataset.max_age

    def clear_user(self, user_id: str) -> None:
        """Remove every dataset cached for one user."""
        if not self._directory.exists():
            return
        for dataset_dir in self._directory.iterdir():
            if not dataset_dir.is_dir():
                continue
            dataset = Dataset(dataset_dir.name, timedelta(0))
            with self._lock_for((dataset.name, user_id)):
                self.path_for(user_id, dataset).unlink(missing_ok=True)

    def clear_all(self) -> None:
        """Remove every cached entry."""
        if not self._directory.exists():
            return
        for path in self._directory.glob("*/*.json"):
            path.unlink(missing_ok=True)
