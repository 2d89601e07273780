"""Cache Module - Caching infrastructure for node image resolution.

Philosophy:
- TTL-based expiration with a background sweeper
- Explicitly constructed instances, no module-level singletons
- Thread-safe operations

Public API (the "studs"):
    From expiring_cache:
        ExpiringCache: TTL key/value cache with background sweeping
        CacheEntry: Cached value with absolute expiration

    From change_monitor:
        ChangeMonitor: Last-value tracking for discovery notifications

    From single_flight:
        SingleFlight: Per-key de-duplication of concurrent lookups
"""

from nodeimage.cache.change_monitor import ChangeMonitor
from nodeimage.cache.expiring_cache import CacheEntry, ExpiringCache
from nodeimage.cache.single_flight import SingleFlight

__all__ = [
    "CacheEntry",
    "ChangeMonitor",
    "ExpiringCache",
    "SingleFlight",
]
