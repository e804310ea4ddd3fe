"""Error kinds shared by every layer.

Each layer raises the narrowest kind it can; the API layer maps them to
status codes via ``status_code``. Messages are user-facing and never carry
raw remote error detail.
"""

from typing import Any

from fastapi import status

from redemption_proxy.dto import ErrorResponse


class RedemptionProxyError(Exception):
    """Base exception for the redemption proxy."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to the public error body."""
        return ErrorResponse(error=self.message)


class ValidationError(RedemptionProxyError):
    """Bad or incomplete request input."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Validation failed", details: dict[str, Any] | None = None) -> None:
        super().__init__("VALIDATION_ERROR", message, details)


class FieldNotAllowedError(ValidationError):
    """Field name is not on the query allow-list."""

    def __init__(self, field: str) -> None:
        super().__init__("Field not allowed", {"field": field})
        self.code = "FIELD_NOT_ALLOWED"


class InvalidFieldError(RedemptionProxyError):
    """Field name contains characters that may not reach a filter formula."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, field: str) -> None:
        super().__init__("INVALID_FIELD", "Invalid field name", {"field": field})


class InvalidIdentifierError(RedemptionProxyError):
    """Base or table override does not match the identifier patterns."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, kind: str, value: str) -> None:
        super().__init__("INVALID_IDENTIFIER", f"Invalid {kind} identifier", {kind: value})


class NotFoundError(RedemptionProxyError):
    """No record matches the redemption code."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Sorry, this redemption code is not valid", details: dict[str, Any] | None = None) -> None:
        super().__init__("NOT_FOUND", message, details)


class UpstreamError(RedemptionProxyError):
    """Remote store transport, auth or unexpected failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Upstream record store failure", details: dict[str, Any] | None = None) -> None:
        super().__init__("UPSTREAM_ERROR", message, details)
