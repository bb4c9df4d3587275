"""Time-to-live cache.

An explicit cache object: callers create one and pass it to the services
that use it (quote fallback chain, dashboard). Nothing in foliotrack keeps
a module-level cache, so lifetime and invalidation are always in the hands
of whoever owns the instance.
"""

import time
from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class CacheStats(BaseModel):
    """Counters since the cache was created."""

    entries: int
    hits: int
    misses: int
    expirations: int
    evictions: int

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    model_config = ConfigDict(frozen=True)


class TTLCache(Generic[T]):
    """
    Key/value cache whose entries expire ``ttl_seconds`` after being set.

    Expired entries are dropped when they are next looked up, or in bulk by
    purge_expired().

    Args:
        ttl_seconds: Lifetime of an entry
        clock: Monotonic time source (injectable for tests)

    Example:
        >>> quotes: TTLCache[Decimal] = TTLCache(ttl_seconds=1800)
        >>> quotes.set("AAPL", Decimal("190.12"))
        >>> quotes.get("AAPL")
        Decimal('190.12')
        >>> quotes.evict("AAPL")
        True
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[T, float]] = {}
        self._hits = 0
        self._misses = 0
        self._expirations = 0
        self._evictions = 0

    def _is_expired(self, expires_at: float) -> bool:
        return expires_at <= self._clock()

    def get(self, key: Hashable) -> T | None:
        """Cached value, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        value, expires_at = entry
        if self._is_expired(expires_at):
            del self._entries[key]
            self._expirations += 1
            self._misses += 1
            logger.debug("cache.expired", key=str(key))
            return None

        self._hits += 1
        return value

    def set(self, key: Hashable, value: T) -> None:
        """Store value, replacing any previous entry and restarting its TTL."""
        self._entries[key] = (value, self._clock() + self.ttl_seconds)

    def get_or_set(self, key: Hashable, factory: Callable[[], T], force_refresh: bool = False) -> T:
        """
        Return the cached value, computing and storing it on a miss.

        Args:
            key: Cache key
            factory: Called to produce the value on a miss
            force_refresh: Ignore any cached value and recompute
        """
        if not force_refresh:
            cached = self.get(key)
            if cached is not None:
                return cached

        value = factory()
        self.set(key, value)
        return value

    def evict(self, key: Hashable) -> bool:
        """Remove one entry. Returns True if it was present."""
        if key in self._entries:
            del self._entries[key]
            self._evictions += 1
            logger.debug("cache.evicted", key=str(key))
            return True
        return False

    def clear(self) -> int:
        """Remove every entry. Returns how many were removed."""
        count = len(self._entries)
        self._entries.clear()
        self._evictions += count
        if count:
            logger.debug("cache.cleared", entries=count)
        return count

    def purge_expired(self) -> int:
        """Drop all expired entries. Returns how many were dropped."""
        expired = [key for key, (_, expires_at) in self._entries.items() if self._is_expired(expires_at)]
        for key in expired:
            del self._entries[key]
        self._expirations += len(expired)
        return len(expired)

    @property
    def stats(self) -> CacheStats:
        return CacheStats(
            entries=len(self._entries),
            hits=self._hits,
            misses=self._misses,
            expirations=self._expirations,
            evictions=self._evictions,
        )

    def __contains__(self, key: Hashable) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not self._is_expired(entry[1])

    def __len__(self) -> int:
        return len(self._entries)
