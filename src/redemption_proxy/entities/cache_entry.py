"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """A cached value with an absolute expiry.

    Attributes:
        value: The cached value (a shaped record view or a query result dict)
        expires_at: Monotonic timestamp after which the entry is stale
    """

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
