"""Application-level exception types.

Every failure a request can end in is one of these; the global exception
handlers map each type to its HTTP status and render ``{"error": message}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict

# Client-facing text for every server-side failure
GENERIC_FAILURE_MESSAGE = "Failed to save submission. Please try again."


class ErrorDetails(TypedDict, total=False):
    """Structured error context for operator-side diagnosis.

    Never rendered to clients.
    """

    field: str
    max_length: int
    error_type: str
    error_msg: str
    http_status: int
    retry_after: int
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Client-facing message.
        details: Optional structured details, logged but not returned.
        headers: Optional extra response headers.
    """

    code: str
    message: str
    details: ErrorDetails | None = None
    headers: dict[str, str] | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when the request body or one of its fields is invalid."""


class RateLimitAppError(AppError):
    """Raised when a client has used up its submission budget."""


class SinkAppError(AppError):
    """Raised when the submission could not be written to the sink."""
