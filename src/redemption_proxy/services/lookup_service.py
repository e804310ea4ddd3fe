"""Redemption status lookup.

Per request: cache check, then on a miss a remote fetch, then cache
population with the shaped view. Unknown codes are never cached.
"""

import asyncio
from typing import Any

from redemption_proxy.cache_keys import redemption_cache_key
from redemption_proxy.errors import NotFoundError, UpstreamError
from redemption_proxy.logging_config import get_logger
from redemption_proxy.protocols import CacheStore, RecordStore
from redemption_proxy.services.shaping import shape_record

logger = get_logger(__name__)


class StatusLookupService:
    """Cache-fronted lookup of a single redemption code.

    Concurrent lookups for the same uncached code share one in-flight
    fetch, so the remote store sees a single call.

    Example:
        ```python
        service = StatusLookupService(record_store=store, cache=cache)
        view = await service.lookup("ABC123")
        ```
    """

    def __init__(
        self,
        record_store: RecordStore,
        cache: CacheStore,
        ttl: int | None = None,
    ) -> None:
        """Initialize the lookup service.

        Args:
            record_store: Remote record store (required).
            cache: Response cache (required).
            ttl: Per-entry TTL override; None uses the cache default.
        """
        self._store = record_store
        self._cache = cache
        self._ttl = ttl
        self._in_flight: dict[str, asyncio.Task] = {}

    async def lookup(self, code: str) -> dict[str, Any]:
        """Return the flat view for a redemption code.

        Args:
            code: Redemption code (exact, case-sensitive)

        Returns:
            The shaped view, identical on cache hits and misses

        Raises:
            NotFoundError: If the store has no record for the code
            UpstreamError: If the store call fails
        """
        cached = self._cache.get(redemption_cache_key(code))
        # Anything other than a shaped view is treated as a miss.
        if isinstance(cached, dict):
            logger.debug("redemption_cache_hit", redemption_code=code)
            return cached

        task = self._in_flight.get(code)
        if task is None:
            task = asyncio.ensure_future(self._fetch(code))
            self._in_flight[code] = task
            task.add_done_callback(lambda done: self._forget(code, done))
        return await asyncio.shield(task)

    def _forget(self, code: str, task: asyncio.Task) -> None:
        if self._in_flight.get(code) is task:
            del self._in_flight[code]
        # Mark the error retrieved; every waiter may have been cancelled.
        if not task.cancelled():
            task.exception()

    async def _fetch(self, code: str) -> dict[str, Any]:
        try:
            records = await self._store.find_by_code(code)
        except UpstreamError as e:
            raise UpstreamError(
                "Failed to retrieve redemption code status",
                details={"operation": "lookup", "redemption_code": code},
            ) from e

        if not records:
            logger.info("redemption_code_not_found", redemption_code=code)
            raise NotFoundError(details={"redemption_code": code})

        view = shape_record(records[0], code).to_view()
        self._cache.set(redemption_cache_key(code), view, self._ttl)
        return view

    @property
    def in_flight(self) -> int:
        """Number of remote fetches currently in progress."""
        return len(self._in_flight)
