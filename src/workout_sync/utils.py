"""
Shared utility functions for workout_sync.

Timestamp parsing and formatting helpers used across domain modules.
"""

from datetime import datetime
from typing import Optional


# Fractional seconds first, then whole seconds
_TIMESTAMP_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
)


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp with a UTC offset.

    Accepts "2026-02-10T08:30:00Z", "2026-02-10T08:30:00.123456+00:00" and
    the like. Timestamps without an offset are rejected.

    Args:
        value: Timestamp string from the backend

    Returns:
        Timezone-aware datetime, or None if the string does not parse
    """
    if not isinstance(value, str):
        return None
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ISO-8601 (inverse of parse_timestamp)."""
    return value.isoformat()


def format_weight(kg: float) -> str:
    """Format a weight like "92.5 kg" (whole numbers without decimals)."""
    if kg is None:
        return None
    if float(kg).is_integer():
        return f"{int(kg)} kg"
    return f"{kg:.1f} kg"


def format_duration(seconds: int) -> str:
    """Format seconds into human-readable duration.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string like "1h01m01s" or "25m30s"
    """
    if not seconds or seconds <= 0:
        return "0s"
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    if h > 0:
        return f"{h}h{m:02d}m{s:02d}s"
    if m > 0:
        return f"{m}m{s:02d}s"
    return f"{s}s"


def clean_nones(d):
    """Recursively remove None values from a dict."""
    if isinstance(d, dict):
        return {k: clean_nones(v) for k, v in d.items() if v is not None}
    if isinstance(d, list):
        return [clean_nones(i) for i in d]
    return d
