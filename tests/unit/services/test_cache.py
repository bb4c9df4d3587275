"""Unit tests for TTLCache."""

import pytest

from foliotrack.services.cache import TTLCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache[str]:
    return TTLCache(ttl_seconds=60, clock=clock)


class TestTTLCache:
    def test_get_before_expiry(self, cache, clock):
        cache.set("k", "v")
        clock.advance(59)

        assert cache.get("k") == "v"
        assert "k" in cache

    def test_entry_expires(self, cache, clock):
        cache.set("k", "v")
        clock.advance(60)

        assert "k" not in cache
        assert cache.get("k") is None
        assert len(cache) == 0
        assert cache.stats.expirations == 1

    def test_set_restarts_ttl(self, cache, clock):
        cache.set("k", "v1")
        clock.advance(50)
        cache.set("k", "v2")
        clock.advance(50)

        assert cache.get("k") == "v2"

    def test_get_or_set_computes_once(self, cache):
        calls = []

        def factory():
            calls.append(1)
            return "value"

        assert cache.get_or_set("k", factory) == "value"
        assert cache.get_or_set("k", factory) == "value"
        assert len(calls) == 1

    def test_get_or_set_force_refresh(self, cache):
        cache.set("k", "old")

        assert cache.get_or_set("k", lambda: "new", force_refresh=True) == "new"
        assert cache.get("k") == "new"

    def test_evict(self, cache):
        cache.set("k", "v")

        assert cache.evict("k") is True
        assert cache.evict("k") is False
        assert cache.get("k") is None

    def test_clear(self, cache):
        cache.set("a", "1")
        cache.set("b", "2")

        assert cache.clear() == 2
        assert len(cache) == 0
        assert cache.stats.evictions == 2

    def test_purge_expired(self, cache, clock):
        cache.set("old", "1")
        clock.advance(30)
        cache.set("new", "2")
        clock.advance(40)

        assert cache.purge_expired() == 1
        assert len(cache) == 1
        assert "new" in cache

    def test_stats(self, cache):
        cache.set("k", "v")
        cache.get("k")
        cache.get("missing")

        stats = cache.stats
        assert (stats.entries, stats.hits, stats.misses) == (1, 1, 1)
        assert stats.hit_rate == 0.5

    def test_instances_are_independent(self, clock):
        first: TTLCache[str] = TTLCache(60, clock=clock)
        second: TTLCache[str] = TTLCache(60, clock=clock)
        first.set("k", "v")

        assert second.get("k") is None

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_rejects_non_positive_ttl(self, ttl):
        with pytest.raises(ValueError, match="ttl_seconds must be positive"):
            TTLCache(ttl)


def test_empty_hit_rate():
    assert TTLCache(1).stats.hit_rate == 0.0
