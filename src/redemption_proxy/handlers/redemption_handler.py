"""HTTP handlers for redemption operations.

Handlers convert between service results and DTOs (API contracts).
Domain errors are left to propagate; the app maps them to status codes
and generic ``{"error": ...}`` bodies.
"""

from typing import Any

from redemption_proxy.dto import (
    HealthCheckResponse,
    OrderIngestResponse,
    QueryRecordItem,
    QueryResponse,
    RedemptionStatusResponse,
)
from redemption_proxy.protocols import CacheStore, RecordStore
from redemption_proxy.services import FieldQueryService, OrderIngestionService, StatusLookupService

INGEST_SUCCESS_MESSAGE = 'Redemption statuses updated to "Already Redeemed"'


class RedemptionHandler:
    """HTTP handlers for the redemption endpoints.

    Example:
        ```python
        handler = RedemptionHandler(
            lookup_service=lookup,
            ingestion_service=ingestion,
            query_service=field_query,
            cache=cache,
            record_store=store,
        )

        @app.get("/redemption-code-status/{code}")
        async def get_status(code: str):
            return await handler.get_status(code)
        ```
    """

    def __init__(
        self,
        lookup_service: StatusLookupService,
        ingestion_service: OrderIngestionService,
        query_service: FieldQueryService,
        cache: CacheStore,
        record_store: RecordStore,
    ) -> None:
        self._lookup = lookup_service
        self._ingestion = ingestion_service
        self._query = query_service
        self._cache = cache
        self._store = record_store

    async def get_status(self, code: str) -> RedemptionStatusResponse:
        """Handle GET /redemption-code-status/{code} requests."""
        view = await self._lookup.lookup(code)
        return RedemptionStatusResponse(**view)

    async def receive_order(self, payload: Any) -> OrderIngestResponse:
        """Handle POST /order-data requests."""
        updated = await self._ingestion.ingest(payload)
        return OrderIngestResponse(message=INGEST_SUCCESS_MESSAGE, updatedCount=updated)

    async def query(
        self,
        field: str | None,
        text: str | None,
        max_records: str | None = None,
        table: str | None = None,
        base: str | None = None,
    ) -> QueryResponse:
        """Handle GET /query requests.

        ``cached`` is only set on cache hits, so it is absent from the body
        on fresh results when serialized with ``exclude_unset``.
        """
        result, cached = await self._query.query(
            field,
            text,
            max_records=max_records,
            table=table,
            base=base,
        )
        records = [
            QueryRecordItem(id=record.id, createdTime=record.created_time, fields=record.fields)
            for record in result.records
        ]
        if cached:
            return QueryResponse(records=records, cached=True)
        return QueryResponse(records=records)

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        cache_healthy = self._cache.health_check()
        return HealthCheckResponse(
            status="healthy" if cache_healthy else "unhealthy",
            cache_healthy=cache_healthy,
            cache_entries=self._cache.count() if cache_healthy else 0,
            record_store_configured=self._store.health_check(),
        )
