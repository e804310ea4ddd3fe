"""In-process implementation of CacheStore.

Entries live in a plain dict guarded by a lock, so concurrent request
handlers get atomic per-key get/set with last-write-wins semantics.
There is no size bound: eviction happens only on TTL expiry (checked
lazily on read) or process restart.
"""

import threading
import time
from collections.abc import Callable
from typing import Any

from redemption_proxy.config import settings
from redemption_proxy.entities import CacheEntry


class InMemoryCacheRepository:
    """Dict-backed TTL cache.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        ttl: int | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl: Default time-to-live in seconds. Defaults to settings.
            clock: Monotonic time source, injectable for tests.
        """
        self._ttl = ttl or settings.cache_ttl
        self._clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @classmethod
    def create(cls, ttl: int | None = None) -> "InMemoryCacheRepository":
        """Factory method to create InMemoryCacheRepository with defaults."""
        return cls(ttl=ttl)

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        expires_at = self._clock() + (ttl or self._ttl)
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=expires_at)

    def count(self) -> int:
        """Count live entries, purging expired ones along the way."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
            return len(self._entries)

    def health_check(self) -> bool:
        return True

    @property
    def ttl(self) -> int:
        """Get the default TTL in seconds."""
        return self._ttl
