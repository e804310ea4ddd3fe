"""Cache storage protocol.

Defines the interface for the short-lived read cache that sits in front of
the remote record store.

Implementations:
- In-process dict with TTL (default)
- Redis key/value with EX expiry (shared across workers)
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    The key space is a flat string namespace shared by every service, so
    callers build collision-free keys (see ``redemption_proxy.cache_keys``).
    Values are JSON-compatible.
    """

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when absent or expired."""
        ...

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value.

        Args:
            key: Cache key
            value: JSON-compatible value
            ttl: Time-to-live in seconds; None uses the backend default
        """
        ...

    def count(self) -> int:
        """Count live entries; reported by the health endpoint."""
        ...

    def health_check(self) -> bool:
        """Check if the backend is usable."""
        ...
