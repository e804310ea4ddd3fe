"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class RedemptionStatusResponse(BaseModel):
    """Flat view of a redemption record."""

    redemptionCode: str = Field(..., description="The redemption code")
    establishmentName: str | None = Field(None, description="Establishment display name")
    establishmentType: str | None = Field(None, description="Establishment category")
    awardLevel: str | None = Field(None, description="Award tier")
    redemptionStatus: str | None = Field(None, description="e.g. 'Not Redeemed' or 'Already Redeemed'")


class OrderIngestResponse(BaseModel):
    """Response DTO for the order webhook."""

    message: str = Field(..., description="Human-readable status message")
    updatedCount: int = Field(..., description="Number of redemption codes marked redeemed", ge=0)


class QueryRecordItem(BaseModel):
    """Single record in a field query result."""

    id: str = Field(..., description="Remote record identifier")
    createdTime: str | None = Field(None, description="Creation timestamp")
    fields: dict[str, str | None] = Field(default_factory=dict, description="Record fields")


class QueryResponse(BaseModel):
    """Response DTO for the generic field query.

    ``cached`` is only present when the result was served from cache.
    """

    records: list[QueryRecordItem] = Field(default_factory=list)
    cached: bool | None = Field(None, description="True when served from cache")


class ErrorResponse(BaseModel):
    """Public error body."""

    error: str = Field(..., description="Generic, user-facing error message")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_healthy: bool = Field(..., description="Whether the cache backend is reachable")
    cache_entries: int = Field(..., description="Number of live cache entries")
    record_store_configured: bool = Field(..., description="Whether a remote credential is configured")
