"""Redemption Proxy - order webhooks and redemption status lookups.

This package proxies a storefront to an Airtable table of redemption
codes, with a short-lived read cache in front of the table.

Layers:
    - protocols: Interface contracts (CacheStore, RecordStore)
    - repositories: Airtable client, in-memory and Redis caches
    - services: Status lookup, order ingestion, field query
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

For HTTP API:
    ```python
    from redemption_proxy.api.app import app
    ```
"""

from redemption_proxy.config import get_settings, settings
from redemption_proxy.entities import QueryResult, RedemptionRecord, StoreRecord
from redemption_proxy.errors import (
    FieldNotAllowedError,
    InvalidFieldError,
    InvalidIdentifierError,
    NotFoundError,
    RedemptionProxyError,
    UpstreamError,
    ValidationError,
)
from redemption_proxy.handlers import RedemptionHandler
from redemption_proxy.protocols import CacheStore, RecordStore
from redemption_proxy.repositories import (
    AirtableRepository,
    InMemoryCacheRepository,
    RedisCacheRepository,
)
from redemption_proxy.services import FieldQueryService, OrderIngestionService, StatusLookupService

__all__ = [
    # Configuration
    "settings",
    "get_settings",
    # Protocols (interfaces)
    "CacheStore",
    "RecordStore",
    # Services (business logic)
    "StatusLookupService",
    "OrderIngestionService",
    "FieldQueryService",
    # Handlers (HTTP)
    "RedemptionHandler",
    # Repositories (data access)
    "AirtableRepository",
    "InMemoryCacheRepository",
    "RedisCacheRepository",
    # Entities (domain models)
    "QueryResult",
    "RedemptionRecord",
    "StoreRecord",
    # Errors
    "RedemptionProxyError",
    "ValidationError",
    "FieldNotAllowedError",
    "InvalidFieldError",
    "InvalidIdentifierError",
    "NotFoundError",
    "UpstreamError",
]
