"""Custom exception classes and exception handlers."""

from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from context_store.core.logging import get_logger

logger = get_logger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str = "Resource", details: dict[str, Any] | None = None):
        super().__init__(f"{resource} not found", status.HTTP_404_NOT_FOUND, details)


class ValidationError(AppException):
    """Validation error."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, details)


class CacheError(AppException):
    """Cache operation error.

    ``retryable`` tells the caller whether repeating the same call may
    succeed (network faults) or not (command rejected by the store).
    """

    retryable: bool = False

    def __init__(
        self,
        message: str = "Cache operation failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE, details)


class CacheConnectionError(CacheError):
    """Store unreachable or timed out."""

    retryable = True


class SerializationError(AppException):
    """Value could not be encoded to or decoded from the cache."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, details)


class VectorIndexError(AppException):
    """Vector index missing, not initialized, or could not be created."""

    def __init__(self, message: str = "Vector index unavailable", details: dict[str, Any] | None = None):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE, details)


class DimensionMismatchError(ValidationError):
    """Vector length differs from the index dimension."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Vector dimension mismatch: expected {expected}, got {actual}",
            {"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application exceptions."""
    logger.warning(
        "Application exception",
        status_code=exc.status_code,
        message=exc.message,
        details=exc.details,
        path=str(request.url),
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "message": exc.message,
                "details": exc.details,
            }
        },
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(
        "HTTP exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=str(request.url),
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "message": exc.detail,
            }
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions."""
    logger.exception(
        "Unhandled exception",
        exc_info=exc,
        path=str(request.url),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "message": "An internal error occurred. Please try again later.",
            }
        },
    )
