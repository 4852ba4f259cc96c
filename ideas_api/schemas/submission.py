"""Pydantic schemas for idea submissions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

OTHER_GENRE: Final = "Other"
ANONYMOUS_NAME: Final = "Anonymous"

ALLOWED_GENRES: Final[tuple[str, ...]] = (
    "Keyboard",
    "Chamber",
    "Orchestra",
    "Ballet",
    "Opera",
    "Choral",
    "Electroacoustic",
    "World",
    OTHER_GENRE,
)

MAX_DESCRIPTION_CHARS: Final = 280
MAX_OTHER_GENRE_CHARS: Final = 100
MAX_NAME_CHARS: Final = 100


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as ISO-8601 UTC with millisecond precision and ``Z``."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SubmissionRequest(BaseModel):
    """Documented shape of the POST /api/submit body.

    Only used for the OpenAPI schema; the route validates the raw body itself
    so that error messages and their order stay fixed.
    """

    description: str = Field(
        ...,
        max_length=MAX_DESCRIPTION_CHARS,
        description="One-sentence description of the piece (1-280 characters after trimming).",
        examples=["A cello concerto."],
    )
    genre: str = Field(
        ...,
        description=f"One of: {', '.join(ALLOWED_GENRES)}.",
        examples=["Chamber"],
    )
    otherGenre: str | None = Field(
        default=None,
        max_length=MAX_OTHER_GENRE_CHARS,
        description='Free-text genre, required when genre is "Other".',
    )
    name: str | None = Field(
        default=None,
        max_length=MAX_NAME_CHARS,
        description='Optional submitter name; "Anonymous" when blank.',
    )


class ValidSubmission(BaseModel):
    """A submission that passed every rule, with its fields resolved."""

    model_config = ConfigDict(frozen=True)

    description: str = Field(..., description="Trimmed description.")
    resolved_genre: str = Field(..., description="Genre label or trimmed otherGenre.")
    resolved_name: str = Field(..., description="Trimmed name or 'Anonymous'.")

    def to_row(self, submitted_at: datetime) -> list[str]:
        """Build the sink row: timestamp, name, genre, description."""
        return [
            format_timestamp(submitted_at),
            self.resolved_name,
            self.resolved_genre,
            self.description,
        ]


class SubmitResponse(BaseModel):
    """Body returned when a submission was stored."""

    success: bool = True


class ErrorResponse(BaseModel):
    """Body returned for every failed request."""

    error: str = Field(..., description="Human-readable reason.")
