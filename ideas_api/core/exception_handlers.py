"""Global exception handlers for consistent error responses.

Design:
- AppError subclasses → their HTTP status (400, 429, 500)
- Unexpected Exception → generic 500 (safety net)
- Bodies are always ``{"error": "<message>"}``; causes stay in the logs
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ideas_api.core.errors import (
    GENERIC_FAILURE_MESSAGE,
    AppError,
    RateLimitAppError,
    SinkAppError,
    ValidationAppError,
)
from ideas_api.core.logging import get_request_id

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (ValidationAppError, 400),
    (RateLimitAppError, 429),
    (SinkAppError, 500),
)


def status_for_error(exc: AppError) -> int:
    """Return the HTTP status for a domain error (500 if unmapped)."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with a flat JSON body.

    Server-side failures are logged at error level with their details; client
    faults are logged as warnings.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the mapped status code and ``{"error": message}``.
    """
    status_code = status_for_error(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "error_details": exc.details or {},
            "status_code": status_code,
            "request_path": request.url.path,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=status_code,
        content={"error": exc.message},
        headers=exc.headers,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs the exception type and message for debugging while returning the
    generic failure message. No stack traces reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={"error": GENERIC_FAILURE_MESSAGE},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
