# =============================================================================
# app/exceptions.py - Error Taxonomy and Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every failure leaves the API in the same envelope:
#   {"success": false, "error": "<message>", "code": "<CODE>", "details": ...}
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ErrorCode:
    """Machine-readable error codes returned in the `code` field."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RATE_LIMIT = "RATE_LIMIT"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BAD_REQUEST = "BAD_REQUEST"


class LendifyException(Exception):
    """
    Base exception for the Lendify API.

    All custom exceptions inherit from this class and carry the HTTP status
    they should be rendered with.
    """

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Client Errors
# =============================================================================

class ValidationFailedError(LendifyException):
    """Raised when input fails schema validation."""

    def __init__(self, message: str = "Validation failed", details: Any = None):
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details,
        )


class BadRequestError(LendifyException):
    """Raised when a request is well-formed but breaks a business rule."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(
            message=message,
            code=ErrorCode.BAD_REQUEST,
            status_code=400,
            details=details,
        )


class AuthorizationError(LendifyException):
    """Raised when the caller may not act on a resource."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            code=ErrorCode.AUTHORIZATION_ERROR,
            status_code=403,
        )


class NotFoundError(LendifyException):
    """Raised when a row doesn't exist (or is hidden from the caller)."""

    def __init__(self, resource: str = "Resource", resource_id: str | None = None):
        super().__init__(
            message=f"{resource} not found",
            code=ErrorCode.NOT_FOUND,
            status_code=404,
            details={"id": resource_id} if resource_id else None,
        )


class ConflictError(LendifyException):
    """Raised when a write would violate a uniqueness or availability rule."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(
            message=message,
            code=ErrorCode.CONFLICT,
            status_code=409,
            details=details,
        )


class RateLimitError(LendifyException):
    """Raised when a client exceeds a route's request quota."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        limit: int | None = None,
        retry_after: int | None = None,
        reset_at: int | None = None,
    ):
        super().__init__(
            message=message,
            code=ErrorCode.RATE_LIMIT,
            status_code=429,
            details={"retry_after": retry_after} if retry_after else None,
        )
        self.headers = {}
        if limit is not None:
            self.headers["X-RateLimit-Limit"] = str(limit)
            self.headers["X-RateLimit-Remaining"] = "0"
        if reset_at is not None:
            self.headers["X-RateLimit-Reset"] = str(reset_at)
        if retry_after is not None:
            self.headers["Retry-After"] = str(retry_after)


# =============================================================================
# Upload Errors
# =============================================================================

class InvalidFileTypeError(LendifyException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, content_type: str | None, allowed: list[str]):
        super().__init__(
            message="Invalid file type. Only JPEG, PNG, WebP, and GIF are allowed.",
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details={"content_type": content_type, "allowed_types": allowed},
        )


class FileTooLargeError(LendifyException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File too large. Maximum size is {max_mb}MB.",
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details={"size_mb": round(size_mb, 2), "max_mb": max_mb},
        )


# =============================================================================
# Server Errors
# =============================================================================

class InternalError(LendifyException):
    """Raised for failures the client cannot fix by changing the request."""

    def __init__(self, message: str = "Internal server error", details: Any = None):
        super().__init__(
            message=message,
            code=ErrorCode.INTERNAL_ERROR,
            status_code=500,
            details=details,
        )


class StorageUploadError(InternalError):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(message="Failed to upload file", details={"error": error})


class StorageDeleteError(InternalError):
    """Raised when removing a file from storage fails."""

    def __init__(self, path: str, error: str):
        super().__init__(message="Failed to delete file", details={"path": path, "error": error})


class AIGenerationError(InternalError):
    """Raised when the text-generation provider fails or returns nothing."""

    def __init__(self, message: str, error: str | None = None):
        super().__init__(message=message, details={"error": error} if error else None)


# =============================================================================
# Exception Handlers
# =============================================================================

def _validation_details(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic error dicts into field/message/code triples."""
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({
            "field": ".".join(loc) or "unknown",
            "message": err.get("msg", "Validation error"),
            "code": err.get("type", "custom"),
        })
    return details


async def lendify_exception_handler(
    request: Request,
    exc: LendifyException
) -> JSONResponse:
    """Convert LendifyException to JSON response."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError | ValidationError
) -> JSONResponse:
    """
    Handle request and model validation errors.

    Both FastAPI's RequestValidationError and bare pydantic ValidationError
    (raised inside services) become 400 VALIDATION_ERROR.
    """
    error = ValidationFailedError(details=_validation_details(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """Wrap HTTPException (auth dependencies, unknown routes) in the error envelope."""
    code = {
        401: ErrorCode.AUTHENTICATION_ERROR,
        403: ErrorCode.AUTHORIZATION_ERROR,
        404: ErrorCode.NOT_FOUND,
        409: ErrorCode.CONFLICT,
        429: ErrorCode.RATE_LIMIT,
    }.get(exc.status_code, ErrorCode.BAD_REQUEST if exc.status_code < 500 else ErrorCode.INTERNAL_ERROR)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail), "code": code},
        headers=getattr(exc, "headers", None),
    )
