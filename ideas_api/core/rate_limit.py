"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Rate limiting strategy:
- Sliding window per client id (default 5 submissions per hour).
- Client id is the first X-Forwarded-For hop, then X-Real-IP, then the
  literal "unknown". Every client without either header shares the
  "unknown" bucket.
"""

from __future__ import annotations

import logging

from fastapi import Request

from ideas_api.adapters.rate_limit.base import AbstractRateLimiter
from ideas_api.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from ideas_api.core.config import settings
from ideas_api.core.errors import RateLimitAppError
from ideas_api.core.logging import hash_identifier

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"
RATE_LIMITED_MESSAGE = "Too many submissions. Please try again later."

_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int, int] | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_requests,
        settings.app.rate_limit_window_seconds,
        settings.app.rate_limit_sweep_interval_seconds,
    )

    if _limiter is None or _limiter_config != config:
        _limiter = InMemorySlidingWindowRateLimiter(
            limit=settings.app.rate_limit_requests,
            window_seconds=settings.app.rate_limit_window_seconds,
            sweep_interval_seconds=settings.app.rate_limit_sweep_interval_seconds,
        )
        _limiter_config = config

    return _limiter


def reset_rate_limiter() -> None:
    """Forget all recorded admissions (the next call builds a fresh limiter)."""

    global _limiter, _limiter_config
    _limiter = None
    _limiter_config = None


def get_client_id(request: Request) -> str:
    """Derive the rate-limit key for the current request.

    Args:
        request: FastAPI request.

    Returns:
        The client id string; never empty.
    """

    if not settings.app.trust_proxy_headers:
        return request.client.host if request.client else UNKNOWN_CLIENT

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = (request.headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip

    return UNKNOWN_CLIENT


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing the per-client submission budget.

    Consumes one admission from the client's window, even if the request
    later fails validation.

    Raises:
        RateLimitAppError: When the client has no budget left (HTTP 429).
    """

    if not settings.app.rate_limit_enabled:
        return

    limiter = get_rate_limiter()
    client_id = get_client_id(request)
    client_hash = hash_identifier(client_id)

    result = limiter.consume(client_id)
    if result.allowed:
        logger.info(
            "rate_limit.allowed",
            extra={
                "client_hash": client_hash,
                "limit": result.limit,
                "remaining": result.remaining,
                "window_s": settings.app.rate_limit_window_seconds,
            },
        )
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "client_hash": client_hash,
            "limit": result.limit,
            "window_s": settings.app.rate_limit_window_seconds,
            "retry_after_s": retry_after,
        },
    )

    headers: dict[str, str] = {}
    if settings.app.rate_limit_include_headers:
        headers["Retry-After"] = str(retry_after)
        headers["X-RateLimit-Limit"] = str(result.limit)
        headers["X-RateLimit-Remaining"] = str(result.remaining)
        headers["X-RateLimit-Reset"] = str(result.reset_at)

    raise RateLimitAppError(
        code="rate_limited",
        message=RATE_LIMITED_MESSAGE,
        details={"retry_after": retry_after},
        headers=headers or None,
    )
