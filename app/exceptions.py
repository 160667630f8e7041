# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error response uses the same envelope:
#   {"success": false, "error": "<message>", "code": "<CODE>", ...}
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)


class RentalDeskException(Exception):
    """
    Base exception for the RentalDesk API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "RENTALDESK_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Lookup Exceptions
# =============================================================================

class NotFoundError(RentalDeskException):
    """Raised when a record doesn't exist or isn't visible to the caller."""

    def __init__(self, entity: str, record_id: str | None = None, message: str | None = None):
        super().__init__(
            message=message or f"{entity} not found",
            code="NOT_FOUND",
            status_code=404,
            details={"id": record_id} if record_id else None,
        )


class StatusNotConfiguredError(RentalDeskException):
    """Raised when a status row the workflow depends on is missing."""

    def __init__(self, status_name: str, table: str):
        super().__init__(
            message=f"{status_name} status not found",
            code="STATUS_NOT_CONFIGURED",
            status_code=500,
            suggestion=f"Add a row named '{status_name}' to {table}",
            details={"status": status_name, "table": table},
        )


# =============================================================================
# Validation Exceptions
# =============================================================================

class ValidationFailedError(RentalDeskException):
    """Raised when request data fails a business rule."""

    def __init__(self, message: str = "Validation failed", errors: list[dict[str, Any]] | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            details=errors,
        )


class MissingFieldError(ValidationFailedError):
    """Raised when a required field is absent or empty."""

    def __init__(self, field: str):
        super().__init__(
            message=f"Missing required field: {field}",
            errors=[{"field": field, "message": "This field is required"}],
        )


class DuplicateValueError(RentalDeskException):
    """
    Raised when a unique value is already taken.

    Most resources answer 400; `conflict=True` answers 409 instead.
    """

    def __init__(self, message: str, field: str | None = None, conflict: bool = False):
        super().__init__(
            message=message,
            code="DUPLICATE_VALUE",
            status_code=409 if conflict else 400,
            details={"field": field} if field else None,
        )


class ReferencedRecordError(RentalDeskException):
    """Raised when deleting a row that other rows still point at."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="RECORD_IN_USE",
            status_code=400,
            suggestion="Reassign or delete the referencing records first",
        )


class InvalidStateTransitionError(RentalDeskException):
    """Raised when a contract action isn't allowed from its current status."""

    def __init__(self, message: str, current_status: str | None = None):
        super().__init__(
            message=message,
            code="INVALID_STATE_TRANSITION",
            status_code=400,
            details={"current_status": current_status} if current_status else None,
        )


# =============================================================================
# Database Exceptions
# =============================================================================

class DatabaseError(RentalDeskException):
    """Raised when a database write that must succeed fails."""

    def __init__(self, operation: str, error: str | None = None):
        super().__init__(
            message=f"Failed to {operation}",
            code="DATABASE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error} if error else None,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def rentaldesk_exception_handler(
    request: Request,
    exc: RentalDeskException
) -> JSONResponse:
    """
    Convert RentalDeskException to JSON response.

    Returns structured error with:
    - error: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request body/query validation errors.

    Flattens Pydantic's error list into [{field, message}] and answers 400.
    """
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]) or "body",
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Validation failed",
            "code": "VALIDATION_ERROR",
            "details": errors,
        }
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """
    Wrap framework HTTP errors (401 from auth, 404 unknown route, 405)
    in the standard envelope. Response headers such as WWW-Authenticate
    are kept.
    """
    codes = {401: "UNAUTHORIZED", 403: "FORBIDDEN", 404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED"}
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail if isinstance(exc.detail, str) else "Request failed",
            "code": codes.get(exc.status_code, "HTTP_ERROR"),
        },
        headers=getattr(exc, "headers", None),
    )


async def supabase_exception_handler(
    request: Request,
    exc: SupabaseClientError
) -> JSONResponse:
    """Database wrapper failures surface as 500 DATABASE_ERROR."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Database error",
            "code": "DATABASE_ERROR",
            "details": exc.details or None,
        }
    )
