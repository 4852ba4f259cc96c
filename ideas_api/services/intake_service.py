"""Submission intake: parse, validate, resolve and forward to the sink.

The pipeline is single-pass and stateless per request:

1. Decode the body as JSON.
2. Validate fields in a fixed order; the first failing rule wins.
3. Resolve the stored name and genre.
4. Append one row to the sink.

Sink failures of any kind are logged for operators and surfaced to clients
only as a generic ``SinkAppError``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from ideas_api.adapters.sink.base import AbstractSubmissionSink
from ideas_api.core.errors import (
    GENERIC_FAILURE_MESSAGE,
    AppError,
    SinkAppError,
    ValidationAppError,
)
from ideas_api.schemas.submission import (
    ALLOWED_GENRES,
    ANONYMOUS_NAME,
    MAX_DESCRIPTION_CHARS,
    MAX_NAME_CHARS,
    MAX_OTHER_GENRE_CHARS,
    OTHER_GENRE,
    ValidSubmission,
)

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body."
DESCRIPTION_MESSAGE = f"Description must be 1–{MAX_DESCRIPTION_CHARS} characters."
GENRE_MESSAGE = "Invalid genre selection."
OTHER_GENRE_MESSAGE = f"Please specify a genre (1–{MAX_OTHER_GENRE_CHARS} characters)."
NAME_MESSAGE = f"Name must be at most {MAX_NAME_CHARS} characters."

# Whitespace and line terminators removed by browser-side String.prototype.trim
TRIM_CHARS = (
    "\t\n\v\f\r \u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"unsupported JSON constant {name}")


def parse_payload(body: bytes) -> Any:
    """Decode a request body as JSON.

    ``NaN`` and ``Infinity`` are not JSON and are rejected.

    Returns:
        The decoded value, or None when the body is not valid UTF-8 JSON.
    """
    try:
        return json.loads(body, parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError):
        return None


def trim(value: str) -> str:
    """Strip leading and trailing whitespace the way the web form does."""
    return value.strip(TRIM_CHARS)


def text_length(value: str) -> int:
    """Length in UTF-16 code units, the unit the form's ``maxLength`` counts.

    Characters outside the Basic Multilingual Plane (most emoji) count as two.
    """
    return len(value.encode("utf-16-le", "surrogatepass")) // 2


def _trimmed_length_between(value: Any, minimum: int, maximum: int) -> bool:
    return isinstance(value, str) and minimum <= text_length(trim(value)) <= maximum


def _is_missing_body(raw: Any) -> bool:
    # null, false, 0 and "" carry no submission; [] and {} are treated as empty objects
    if raw is None:
        return True
    return not raw and not isinstance(raw, (dict, list))


def validate_submission(raw: Any) -> ValidSubmission:
    """Validate a decoded payload and resolve its derived fields.

    Args:
        raw: Decoded JSON body (any shape).

    Returns:
        ValidSubmission with trimmed description, resolved genre and name.

    Raises:
        ValidationAppError: For the first rule the payload breaks.
    """
    if _is_missing_body(raw):
        raise ValidationAppError(code="invalid_body", message=INVALID_BODY_MESSAGE)
    if not isinstance(raw, dict):
        # arrays and scalars have no fields and fail on description
        raw = {}

    description = raw.get("description")
    if not _trimmed_length_between(description, 1, MAX_DESCRIPTION_CHARS):
        raise ValidationAppError(
            code="invalid_description",
            message=DESCRIPTION_MESSAGE,
            details={"field": "description", "max_length": MAX_DESCRIPTION_CHARS},
        )

    genre = raw.get("genre")
    if not isinstance(genre, str) or genre not in ALLOWED_GENRES:
        raise ValidationAppError(
            code="invalid_genre",
            message=GENRE_MESSAGE,
            details={"field": "genre"},
        )

    other_genre = raw.get("otherGenre")
    if genre == OTHER_GENRE and not _trimmed_length_between(
        other_genre, 1, MAX_OTHER_GENRE_CHARS
    ):
        raise ValidationAppError(
            code="invalid_other_genre",
            message=OTHER_GENRE_MESSAGE,
            details={"field": "otherGenre", "max_length": MAX_OTHER_GENRE_CHARS},
        )

    name = raw.get("name")
    if name is not None and not _trimmed_length_between(name, 0, MAX_NAME_CHARS):
        raise ValidationAppError(
            code="invalid_name",
            message=NAME_MESSAGE,
            details={"field": "name", "max_length": MAX_NAME_CHARS},
        )

    resolved_genre = trim(other_genre) if genre == OTHER_GENRE else genre
    resolved_name = trim(name) if name and trim(name) else ANONYMOUS_NAME

    return ValidSubmission(
        description=trim(description),
        resolved_genre=resolved_genre,
        resolved_name=resolved_name,
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IntakeService:
    """Validates submissions and forwards accepted ones to a sink.

    Attributes:
        sink: Append-only row sink.
        clock: Returns the submission time stamped on each row.
    """

    def __init__(
        self,
        sink: AbstractSubmissionSink,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.sink = sink
        self.clock = clock

    async def submit(self, body: bytes) -> ValidSubmission:
        """Run the full intake pipeline for one request body.

        Raises:
            ValidationAppError: If the body or a field is invalid.
            SinkAppError: If the row could not be appended.
        """
        submission = validate_submission(parse_payload(body))
        row = submission.to_row(self.clock())

        try:
            await self.sink.append_row(row)
        except Exception as exc:
            logger.error(
                "submission.sink_failed",
                extra={
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                    "error_code": exc.code if isinstance(exc, AppError) else None,
                },
            )
            raise SinkAppError(
                code="sink_append_failed",
                message=GENERIC_FAILURE_MESSAGE,
                details={"error_type": type(exc).__name__, "error_msg": str(exc)},
            ) from exc

        logger.info(
            "submission.accepted",
            extra={
                # free-text genres are visitor input, log only the label
                "genre": submission.resolved_genre
                if submission.resolved_genre in ALLOWED_GENRES
                else OTHER_GENRE,
                "anonymous": submission.resolved_name == ANONYMOUS_NAME,
                "description_chars": text_length(submission.description),
            },
        )
        return submission
