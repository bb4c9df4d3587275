"""foliotrack services package.

Each service is independently testable and takes its collaborators
(holdings service, quote and rate providers, caches) through its
constructor.
"""

from foliotrack.services.cache import CacheStats, TTLCache
from foliotrack.services.holdings import HoldingsService, IHoldingsService

__all__: list[str] = [
    "CacheStats",
    "TTLCache",
    "HoldingsService",
    "IHoldingsService",
]
