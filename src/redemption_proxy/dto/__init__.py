"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
Internal domain logic should use entities from the entities package.
"""

from .responses import (
    ErrorResponse,
    HealthCheckResponse,
    OrderIngestResponse,
    QueryRecordItem,
    QueryResponse,
    RedemptionStatusResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthCheckResponse",
    "OrderIngestResponse",
    "QueryRecordItem",
    "QueryResponse",
    "RedemptionStatusResponse",
]
