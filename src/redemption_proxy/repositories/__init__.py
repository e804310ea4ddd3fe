"""Repository layer for data access.

This layer abstracts external dependencies (Airtable, Redis) behind
protocol-based interfaces. The repositories are protocol-based (structural
typing), not inheritance-based.
"""

from redemption_proxy.protocols import CacheStore, RecordStore

from .airtable_repository import AirtableRepository
from .memory_cache import InMemoryCacheRepository
from .redis_cache import RedisCacheRepository

__all__ = [
    "CacheStore",
    "RecordStore",
    "AirtableRepository",
    "InMemoryCacheRepository",
    "RedisCacheRepository",
]
