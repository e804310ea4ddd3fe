"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cache_entry import CacheEntry
from .records import (
    CANONICAL_REDEEMED_STATUS,
    QueryResult,
    RedemptionRecord,
    StoreRecord,
)

__all__ = [
    "CANONICAL_REDEEMED_STATUS",
    "CacheEntry",
    "QueryResult",
    "RedemptionRecord",
    "StoreRecord",
]
