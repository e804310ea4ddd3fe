"""Protocol interfaces for swappable implementations.

Protocols enable:
- Swapping the cache backend (in-process dict, Redis)
- Unit testing services against in-memory fakes of the remote store
"""

from .cache_store import CacheStore
from .record_store import RecordStore

__all__ = [
    "CacheStore",
    "RecordStore",
]
