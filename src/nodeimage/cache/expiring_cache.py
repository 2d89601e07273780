"""Expiring Cache Module - In-memory key/value store with TTL expiry.

Philosophy:
- Time is the only eviction policy (no capacity limit)
- Expired entries are never returned, swept or not
- Background sweeper reclaims memory on a fixed interval
- Thread-safe operations

Public API (the "studs"):
    ExpiringCache: TTL cache with background sweeper thread
    CacheEntry: Cached value with absolute expiration
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cached value with absolute expiration.

    Attributes:
        value: Cached value
        expires_at: Clock reading after which the entry is stale
    """

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check if entry has expired.

        Args:
            now: Current clock reading

        Returns:
            True if expired, False otherwise
        """
        return now >= self.expires_at


class ExpiringCache:
    """In-memory cache whose entries expire a fixed TTL after insertion.

    A daemon thread sweeps expired entries every ``cleanup_interval``
    seconds. Sweeping only reclaims memory; ``get`` checks expiration on its
    own so correctness never depends on sweep timing.

    Example:
        >>> cache = ExpiringCache(ttl=3600, cleanup_interval=60)
        >>> cache.put("AKSUbuntu/2204gen2containerd", "/subscriptions/...")
        >>> cache.get("AKSUbuntu/2204gen2containerd")
        '/subscriptions/...'
        >>> cache.close()
    """

    DEFAULT_TTL = 259200  # 3 days
    DEFAULT_CLEANUP_INTERVAL = 3600  # 1 hour

    def __init__(
        self,
        ttl: float | None = None,
        cleanup_interval: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        start_sweeper: bool = True,
    ):
        """Initialize expiring cache.

        Args:
            ttl: Time-to-live in seconds for every entry (default: 3 days)
            cleanup_interval: Seconds between background sweeps (default: 1h)
            clock: Monotonic clock source, injectable for tests
            start_sweeper: Start the background sweeper thread
        """
        self.ttl = ttl if ttl is not None else self.DEFAULT_TTL
        self.cleanup_interval = (
            cleanup_interval if cleanup_interval is not None else self.DEFAULT_CLEANUP_INTERVAL
        )
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._shutdown_event = threading.Event()
        self._sweeper_thread: threading.Thread | None = None

        if start_sweeper and self.cleanup_interval > 0:
            self._sweeper_thread = threading.Thread(
                target=self._sweep_loop, name="expiring-cache-sweeper", daemon=True
            )
            self._sweeper_thread.start()

    def _sweep_loop(self) -> None:
        """Background sweep thread."""
        while not self._shutdown_event.wait(self.cleanup_interval):
            self.delete_expired()

    def put(self, key: str, value: Any) -> None:
        """Store value under key, expiring ``ttl`` seconds from now.

        Args:
            key: Cache key
            value: Value to cache
        """
        expires_at = self._clock() + self.ttl
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=expires_at)

    def get(self, key: str) -> Any | None:
        """Get value for key.

        Args:
            key: Cache key

        Returns:
            Cached value, or None if absent or expired
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.is_expired(now):
                return None
            return entry.value

    def delete(self, key: str) -> None:
        """Remove key if present."""
        with self._lock:
            self._entries.pop(key, None)

    def delete_expired(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        with self._lock:
            expired = [k for k, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug(f"Swept {len(expired)} expired cache entries")
        return len(expired)

    def flush(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def close(self) -> None:
        """Stop the background sweeper thread."""
        self._shutdown_event.set()
        if self._sweeper_thread is not None:
            self._sweeper_thread.join(timeout=1.0)
            self._sweeper_thread = None

    def __len__(self) -> int:
        # Counts unswept expired entries too
        with self._lock:
            return len(self._entries)

    def __enter__(self) -> "ExpiringCache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["CacheEntry", "ExpiringCache"]
