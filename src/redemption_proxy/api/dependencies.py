"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Components built once in the lifespan and stored in app.state
    - Dependency functions retrieve them from request.app.state
    - The cache is an explicit instance shared by all services, never a
      module-level singleton
"""

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from redemption_proxy.config import Settings, settings
from redemption_proxy.handlers import RedemptionHandler
from redemption_proxy.logging_config import configure_logging, get_logger
from redemption_proxy.protocols import CacheStore, RecordStore
from redemption_proxy.repositories import (
    AirtableRepository,
    InMemoryCacheRepository,
    RedisCacheRepository,
)
from redemption_proxy.services import FieldQueryService, OrderIngestionService, StatusLookupService

logger = get_logger(__name__)


def get_handler(request: Request) -> RedemptionHandler:
    """Dependency injection for RedemptionHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The RedemptionHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "redemption_handler", None)
    if handler is None:
        raise RuntimeError("RedemptionHandler not initialized. Check lifespan setup.")
    return handler


def build_cache(app_settings: Settings) -> CacheStore:
    """Create the configured cache backend."""
    if app_settings.uses_redis:
        return RedisCacheRepository.create(
            key_prefix=app_settings.cache_key_prefix,
            ttl=app_settings.cache_ttl,
        )
    return InMemoryCacheRepository.create(ttl=app_settings.cache_ttl)


def make_lifespan(
    app_settings: Settings | None = None,
    record_store: RecordStore | None = None,
    cache: CacheStore | None = None,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Build the lifespan context manager for the app.

    Args:
        app_settings: Settings to use. Defaults to the global settings.
        record_store: Pre-built record store (tests); defaults to Airtable.
        cache: Pre-built cache (tests); defaults to the configured backend.

    Returns:
        A lifespan callable for ``FastAPI(lifespan=...)``
    """
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(app_settings.log_level)

        # Initialize repositories
        store = record_store or AirtableRepository.create(
            api_key=app_settings.airtable_api_key,
            base_id=app_settings.airtable_base_id,
            table=app_settings.airtable_table,
        )
        response_cache = cache or build_cache(app_settings)

        # Initialize services with explicit dependencies
        lookup_service = StatusLookupService(record_store=store, cache=response_cache)
        ingestion_service = OrderIngestionService(record_store=store, cache=response_cache)
        query_service = FieldQueryService(
            record_store=store,
            cache=response_cache,
            default_base=app_settings.airtable_base_id,
            default_table=app_settings.airtable_table,
        )
        handler = RedemptionHandler(
            lookup_service=lookup_service,
            ingestion_service=ingestion_service,
            query_service=query_service,
            cache=response_cache,
            record_store=store,
        )

        # Store in app.state (FastAPI pattern)
        app.state.cache = response_cache
        app.state.record_store = store
        app.state.redemption_handler = handler

        logger.info(
            "service_started",
            cache_backend=app_settings.cache_backend,
            cache_ttl=app_settings.cache_ttl,
            record_store_configured=store.health_check(),
        )

        yield

        # Cleanup - close the HTTP client we own and drop app.state entries
        if record_store is None and isinstance(store, AirtableRepository):
            await store.close()
        del app.state.redemption_handler
        del app.state.record_store
        del app.state.cache
        logger.info("service_stopped")

    return lifespan


# Type alias for cleaner dependency injection
HandlerDep = Annotated[RedemptionHandler, Depends(get_handler)]
