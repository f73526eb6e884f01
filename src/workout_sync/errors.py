"""
Error taxonomy for workout synchronization.

Cancellation is not a failure: callers suppress FetchCancelled.
TransientFetchFailure is what the UI sees when no fallback data exists.
DecodeFailure marks a single malformed record that is dropped.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Stable codes for published error states."""
    CANCELLED = "CANCELLED"
    FETCH_FAILED = "FETCH_FAILED"
    DECODE_FAILED = "DECODE_FAILED"


class WorkoutSyncError(Exception):
    """Base exception for workout_sync."""

    code = ErrorCode.FETCH_FAILED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message, "error_code": self.code.value}


class FetchCancelled(WorkoutSyncError):
    """The fetch was cancelled between attempts."""

    code = ErrorCode.CANCELLED

    def __init__(self, message: str = "Fetch cancelled"):
        super().__init__(message)


class TransientFetchFailure(WorkoutSyncError):
    """Remote fetch failed after all retries and no cached data was available."""

    code = ErrorCode.FETCH_FAILED


class DecodeFailure(WorkoutSyncError):
    """A remote record could not be decoded."""

    code = ErrorCode.DECODE_FAILED
