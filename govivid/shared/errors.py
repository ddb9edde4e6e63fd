"""
Error Handling

Error types raised by the request handlers and the exception handlers that
turn them into consistent JSON error bodies. Full details stay in the server
log; clients only ever see a sanitized message.
"""

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """Base class for errors translated into an {"error", "category"} body."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    category = "server_error"

    def __init__(self, message: str):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    category = "client_error"


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    category = "security"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    category = "client_error"


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    category = "client_error"


class PayloadTooLarge(ApiError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    category = "client_error"


class ServiceUnavailable(ApiError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    category = "server_error"


class InternalError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    category = "server_error"


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None
) -> tuple[str, str]:
    """
    Log full error details server-side and return sanitized message for client.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "Contact email")
        user_message: Optional custom message to show user. If None, uses generic message.

    Returns:
        Tuple of (sanitized_message, error_id). The message does not include
        the error id; callers decide whether to expose it.
    """
    # Generate unique error ID for correlation
    error_id = str(uuid.uuid4())[:8]

    logger.error(
        f"{context} failed [{error_id}]: {type(error).__name__}: {str(error)}",
        exc_info=error
    )

    sanitized = user_message or f"{context} failed. Please try again later."
    return sanitized, error_id


def error_response(message: str, category: str, status_code: int) -> JSONResponse:
    """Consistent error payloads across the API."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "category": category,
        },
    )


def _category_for_status(status_code: int) -> str:
    if status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
        return "security"
    if status_code >= 500:
        return "server_error"
    return "client_error"


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc, ApiError):
        return error_response(exc.message, exc.category, exc.status_code)

    detail = exc.detail
    message = (
        detail.get("message") if isinstance(detail, dict) else str(detail)
    ) or "Request failed."
    category = (
        detail.get("category") if isinstance(detail, dict) else None
    ) or _category_for_status(exc.status_code)

    return error_response(message, category, exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected invalid request on %s: %s", request.url.path, exc.errors())
    return error_response(
        message="Invalid request",
        category="client_error",
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def unexpected_exception_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error on %s", request.url.path, exc_info=exc)
    return error_response(
        message="An unexpected server error occurred. Please try again later.",
        category="server_error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def setup_error_handlers(app: FastAPI) -> None:
    """Register the JSON error handlers on an app."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)
