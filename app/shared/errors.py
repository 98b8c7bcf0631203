"""
Domain exceptions and standardized error responses.

Every failure path in the service ends up as one of the exceptions below.
The FastAPI exception handlers registered in ``main.py`` turn them into a
single JSON body shape so clients never see a partial result:

    {
        "error": "Not enough entries for analysis",
        "message": "At least 7 journal entries are required",
        "code": "INSUFFICIENT_DATA",
        "details": {"entry_count": 4},
        "correlation_id": "a1b2c3d4"
    }

Usage:
    from app.shared.errors import InsufficientDataError, error_response

    raise InsufficientDataError("Not enough entries for analysis")
"""

from enum import Enum
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standard error codes used across the service."""

    # Client errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    NOT_FOUND = "NOT_FOUND"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    UNPARSEABLE_RESPONSE = "UNPARSEABLE_RESPONSE"
    DATABASE_ERROR = "DATABASE_ERROR"


class ErrorBody(BaseModel):
    """Structured error body returned on every failure path."""
    error: str
    message: str
    code: str
    details: Optional[dict[str, Any]] = None
    correlation_id: Optional[str] = None


# =============================================================================
# EXCEPTIONS
# =============================================================================

class HealthJournalError(Exception):
    """Base class for errors that map onto an HTTP error response."""

    status_code = 500
    code = ErrorCode.INTERNAL_ERROR
    title = "Internal server error"

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        title: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if title is not None:
            self.title = title


class InsufficientDataError(HealthJournalError):
    """A precondition on the amount of journal data was not met."""

    status_code = 400
    code = ErrorCode.INSUFFICIENT_DATA

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        # The user-facing summary is the message itself ("Not enough entries...").
        super().__init__(message, details=details, title=message)


class NotFoundError(HealthJournalError):
    status_code = 404
    code = ErrorCode.NOT_FOUND
    title = "Resource not found"


class ConfigurationError(HealthJournalError):
    """A required credential or setting is missing."""

    code = ErrorCode.CONFIGURATION_ERROR
    title = "Service not configured"


class UpstreamServiceError(HealthJournalError):
    """The generative endpoint (or another upstream) failed."""

    code = ErrorCode.EXTERNAL_SERVICE_ERROR
    title = "Upstream service error"

    def __init__(
        self,
        message: str,
        service: str,
        upstream_status: Optional[int] = None,
        retryable: bool = False,
    ):
        details: dict[str, Any] = {"service": service}
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        super().__init__(message, details=details)
        self.service = service
        self.upstream_status = upstream_status
        self.retryable = retryable


class EmptyCompletionError(UpstreamServiceError):
    """The endpoint answered but produced no text (e.g. a safety block)."""

    title = "Upstream service returned no content"


class AnalysisParseError(HealthJournalError):
    """The model output could not be decoded into the result contract."""

    code = ErrorCode.UNPARSEABLE_RESPONSE
    title = "Failed to parse AI analysis"


class DatabaseError(HealthJournalError):
    code = ErrorCode.DATABASE_ERROR
    title = "Database operation failed"

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message, details={"operation": operation} if operation else None)


# =============================================================================
# RESPONSE HELPERS
# =============================================================================

def get_correlation_id(request: Optional[Request] = None) -> Optional[str]:
    """
    Extract correlation ID from request state.

    Args:
        request: FastAPI request object (optional)

    Returns:
        Correlation ID string or None if not available
    """
    if request is None:
        return None
    return getattr(request.state, "correlation_id", None)


def error_response(
    code: ErrorCode,
    error: str,
    message: str,
    status_code: int,
    details: Optional[dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """
    Create a standardized JSON error response.

    Args:
        code: Error code from ErrorCode enum
        error: Short user-facing summary
        message: Human-readable detail
        status_code: HTTP status code
        details: Optional additional error details
        correlation_id: Request correlation ID for tracing

    Returns:
        JSONResponse with the standardized error body
    """
    body = ErrorBody(
        error=error,
        message=message,
        code=code.value,
        details=details,
        correlation_id=correlation_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
    )


def exception_response(exc: HealthJournalError, correlation_id: Optional[str] = None) -> JSONResponse:
    """Render a domain exception as a JSON error response."""
    return error_response(
        code=exc.code,
        error=exc.title,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        correlation_id=correlation_id,
    )


def validation_error(
    message: str,
    details: Optional[dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """Create a 400 validation error response."""
    return error_response(
        code=ErrorCode.VALIDATION_ERROR,
        error="Invalid request",
        message=message,
        status_code=400,
        details=details,
        correlation_id=correlation_id,
    )


def internal_error(
    message: str = "Internal server error",
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """
    Create a 500 internal error response.

    Note: Be careful not to expose sensitive internal details to clients.
    """
    return error_response(
        code=ErrorCode.INTERNAL_ERROR,
        error="Internal server error",
        message=message,
        status_code=500,
        correlation_id=correlation_id,
    )
