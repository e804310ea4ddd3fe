from typing import Any

from fastapi import APIRouter, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from redemption_proxy.api.dependencies import HandlerDep, make_lifespan
from redemption_proxy.config import Settings, settings
from redemption_proxy.dto import (
    ErrorResponse,
    HealthCheckResponse,
    OrderIngestResponse,
    QueryResponse,
    RedemptionStatusResponse,
)
from redemption_proxy.errors import RedemptionProxyError, ValidationError
from redemption_proxy.logging_config import get_logger
from redemption_proxy.protocols import CacheStore, RecordStore

logger = get_logger(__name__)

API_VERSION = "0.1.0"
INTERNAL_ERROR_MESSAGE = "An internal server error occurred. Please try again later."

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

router = APIRouter()


@router.get("/redemption-code-status/{code}", response_model=RedemptionStatusResponse, responses=ERROR_RESPONSES)
async def get_redemption_status(code: str, handler: HandlerDep) -> RedemptionStatusResponse:
    """Return the status of a redemption code (cached for the TTL)."""
    return await handler.get_status(code)


@router.post("/order-data", response_model=OrderIngestResponse, responses=ERROR_RESPONSES)
async def receive_order_data(request: Request, handler: HandlerDep) -> OrderIngestResponse:
    """Mark every redemption code found in an order webhook as redeemed.

    The body is read as raw JSON so that missing nesting levels are
    tolerated instead of rejected by schema validation.
    """
    try:
        payload = await request.json()
    except ValueError as e:
        raise ValidationError("Invalid order data") from e
    return await handler.receive_order(payload)


@router.get(
    "/query",
    response_model=QueryResponse,
    response_model_exclude_unset=True,
    responses=ERROR_RESPONSES,
)
async def query_records(
    handler: HandlerDep,
    field: str | None = Query(None, description="Allow-listed field name"),
    q: str | None = Query(None, description="Case-insensitive substring"),
    max_records: str | None = Query(None, alias="maxRecords", description="1-100, default 25"),
    table: str | None = Query(None, description="Table id or name override"),
    base: str | None = Query(None, description="Base id override"),
    legacy_table: str | None = Query(None, alias="AIRTABLE_TABLE", include_in_schema=False),
    legacy_base: str | None = Query(None, alias="AIRTABLE_BASE_ID", include_in_schema=False),
) -> QueryResponse:
    """Search an allow-listed field for a substring."""
    return await handler.query(
        field,
        q,
        max_records=max_records,
        table=table or legacy_table,
        base=base or legacy_base,
    )


@router.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> JSONResponse:
    """Health check endpoint."""
    result = await handler.health_check()
    code = status.HTTP_200_OK if result.cache_healthy else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=result.model_dump())


async def handle_domain_error(request: Request, exc: RedemptionProxyError) -> JSONResponse:
    """Map domain errors to their status code and a generic body."""
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            method=request.method,
            path=request.url.path,
            error_code=exc.code,
            **exc.details,
        )
    else:
        logger.info("request_rejected", method=request.method, path=request.url.path, error_code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump())


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error="Invalid request").model_dump(),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures with context and hide the details."""
    logger.exception("unhandled_error", method=request.method, path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=INTERNAL_ERROR_MESSAGE).model_dump(),
    )


def create_app(
    app_settings: Settings | None = None,
    record_store: RecordStore | None = None,
    cache: CacheStore | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        app_settings: Settings to use. Defaults to the global settings.
        record_store: Optional pre-built record store (used by tests).
        cache: Optional pre-built cache (used by tests).

    Returns:
        Configured FastAPI app
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="Redemption Proxy API",
        description="Order webhook and redemption status proxy in front of Airtable",
        version=API_VERSION,
        lifespan=make_lifespan(app_settings, record_store=record_store, cache=cache),
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origin_regex=app_settings.allowed_origin_regex,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RedemptionProxyError, handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        prefix = app_settings.api_prefix
        return {
            "name": "Redemption Proxy API",
            "version": API_VERSION,
            "endpoints": {
                "status": f"{prefix}/redemption-code-status/{{code}}",
                "orders": f"{prefix}/order-data",
                "query": f"{prefix}/query",
                "health": f"{prefix}/health",
                "docs": "/docs",
            },
        }

    app.include_router(router, prefix=app_settings.api_prefix)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "redemption_proxy.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
