"""
Composition root for workout_sync.

Builds one Engine per process from Settings: the HTTP client, the persistent
cache, the retrying fetcher, the sync coordinator and the progress service.
Consumers receive the Engine explicitly; nothing here is a module global.
"""

import functools
from dataclasses import dataclass

from workout_sync.analytics_cache import AnalyticsResultCache
from workout_sync.api.history import fetch_user_workout_records
from workout_sync.api.progress import ProgressService
from workout_sync.cache_store import USER_WORKOUTS, CacheStore
from workout_sync.clock import Clock, SystemClock
from workout_sync.config import Settings
from workout_sync.retry import RetryingFetcher
from workout_sync.sdk.client import WorkoutApiClient
from workout_sync.sync import SyncCoordinator


@dataclass
class Engine:
    """Wired-up services shared by every presentation consumer."""
    settings: Settings
    clock: Clock
    client: WorkoutApiClient
    cache_store: CacheStore
    coordinator: SyncCoordinator
    progress: ProgressService


def create_client(settings: Settings) -> WorkoutApiClient:
    return WorkoutApiClient(
        base_url=settings.api_url,
        api_key=settings.api_key,
        access_token=settings.api_token,
    )


def build_engine(settings: Settings = None, clock: Clock = None, client: WorkoutApiClient = None) -> Engine:
    """
    Wire the services together.

    Args:
        settings: Configuration (default: read from the environment)
        clock: Time source shared by both caches (default: system clock)
        client: HTTP client (default: built from settings)

    Returns:
        Engine ready for use by tools or a UI
    """
    settings = settings or Settings.from_env()
    clock = clock or SystemClock()
    client = client or create_client(settings)

    cache_store = CacheStore(settings.cache_dir, clock=clock)
    fetcher = RetryingFetcher(max_retries=settings.max_retries, delay=settings.retry_delay)
    coordinator = SyncCoordinator(
        cache_store,
        fetcher,
        functools.partial(fetch_user_workout_records, client),
        dataset=USER_WORKOUTS,
        clock=clock,
    )
    progress = ProgressService(
        coordinator,
        result_cache=AnalyticsResultCache(ttl_seconds=settings.analytics_ttl, clock=clock),
    )

    return Engine(
        settings=settings,
        clock=clock,
        client=client,
        cache_store=cache_store,
        coordinator=coordinator,
        progress=progress,
    )
