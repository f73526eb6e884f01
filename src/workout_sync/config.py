"""
Configuration from environment variables.

Environment variables:
- WORKOUT_API_URL: Backend base URL (required to fetch)
- WORKOUT_API_KEY: Backend API key
- WORKOUT_API_TOKEN: Bearer token for the signed-in user (optional)
- WORKOUT_SYNC_CACHE_DIR: Cache directory (default: ~/.cache/workout_sync)
- WORKOUT_SYNC_MAX_RETRIES: Retries after the first failure (default: 3)
- WORKOUT_SYNC_RETRY_DELAY: Seconds between attempts (default: 0.5)
- WORKOUT_SYNC_ANALYTICS_TTL: Seconds analyzed progress stays cached (default: 120)
- WORKOUT_SYNC_LOG_LEVEL: Logging level for the server entry point (default: INFO)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from workout_sync.analytics_cache import DEFAULT_TTL_SECONDS
from workout_sync.retry import DEFAULT_DELAY, DEFAULT_MAX_RETRIES

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "workout_sync"


@dataclass
class Settings:
    api_url: str = ""
    api_key: str = ""
    api_token: Optional[str] = None
    cache_dir: Path = DEFAULT_CACHE_DIR
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_DELAY
    analytics_ttl: float = DEFAULT_TTL_SECONDS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Read settings from the environment.

        Raises:
            ValueError: If a numeric variable does not parse or is negative
        """
        env = os.environ if environ is None else environ
        settings = cls(
            api_url=env.get("WORKOUT_API_URL", ""),
            api_key=env.get("WORKOUT_API_KEY", ""),
            api_token=env.get("WORKOUT_API_TOKEN") or None,
            cache_dir=Path(env.get("WORKOUT_SYNC_CACHE_DIR", str(DEFAULT_CACHE_DIR))).expanduser(),
            max_retries=int(env.get("WORKOUT_SYNC_MAX_RETRIES", str(DEFAULT_MAX_RETRIES))),
            retry_delay=float(env.get("WORKOUT_SYNC_RETRY_DELAY", str(DEFAULT_DELAY))),
            analytics_ttl=float(env.get("WORKOUT_SYNC_ANALYTICS_TTL", str(DEFAULT_TTL_SECONDS))),
            log_level=env.get("WORKOUT_SYNC_LOG_LEVEL", "INFO").upper(),
        )
        if settings.max_retries < 0:
            raise ValueError("WORKOUT_SYNC_MAX_RETRIES must be >= 0")
        if settings.retry_delay < 0:
            raise ValueError("WORKOUT_SYNC_RETRY_DELAY must be >= 0")
        if settings.analytics_ttl < 0:
            raise ValueError("WORKOUT_SYNC_ANALYTICS_TTL must be >= 0")
        return settings
