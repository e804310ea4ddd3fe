"""Service layer for business logic.

Services depend on protocols (interfaces), not concrete implementations,
so the remote store and cache can be swapped or faked in tests.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from redemption_proxy.services import StatusLookupService

    lookup = StatusLookupService(record_store=store, cache=cache)
    ```
"""

from .field_query_service import ALLOWED_FIELDS, FIELD_ALIASES, FieldQueryService, resolve_field
from .ingestion_service import OrderIngestionService, extract_codes
from .lookup_service import StatusLookupService
from .shaping import shape_record

__all__ = [
    "ALLOWED_FIELDS",
    "FIELD_ALIASES",
    "FieldQueryService",
    "OrderIngestionService",
    "StatusLookupService",
    "extract_codes",
    "resolve_field",
    "shape_record",
]
