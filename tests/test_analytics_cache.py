"""Tests for analytics_cache.py - short-lived progress memo."""

from workout_sync.analytics_cache import DEFAULT_TTL_SECONDS, AnalyticsResultCache


class TestAnalyticsResultCache:
    def test_default_ttl(self):
        assert DEFAULT_TTL_SECONDS == 120

    def test_miss(self, clock):
        assert AnalyticsResultCache(clock=clock).get("user-1") is None

    def test_hit_within_ttl(self, clock):
        cache = AnalyticsResultCache(ttl_seconds=120, clock=clock)
        cache.put("user-1", ["progress"])
        clock.advance(seconds=120)
        assert cache.get("user-1") == ["progress"]

    def test_expires_after_ttl(self, clock):
        cache = AnalyticsResultCache(ttl_seconds=120, clock=clock)
        cache.put("user-1", ["progress"])
        clock.advance(seconds=121)
        assert cache.get("user-1") is None

    def test_put_resets_age(self, clock):
        cache = AnalyticsResultCache(ttl_seconds=120, clock=clock)
        cache.put("user-1", ["old"])
        clock.advance(seconds=100)
        cache.put("user-1", ["new"])
        clock.advance(seconds=100)
        assert cache.get("user-1") == ["new"]

    def test_users_are_isolated(self, clock):
        cache = AnalyticsResultCache(clock=clock)
        cache.put("user-1", ["a"])
        assert cache.get("user-2") is None

    def test_invalidate(self, clock):
        cache = AnalyticsResultCache(clock=clock)
        cache.put("user-1", ["a"])
        cache.put("user-2", ["b"])
        cache.invalidate("user-1")
        cache.invalidate("missing")
        assert cache.get("user-1") is None
        assert cache.get("user-2") == ["b"]

    def test_clear(self, clock):
        cache = AnalyticsResultCache(clock=clock)
        cache.put("user-1", ["a"])
        cache.clear()
        assert cache.get("user-1") is None
