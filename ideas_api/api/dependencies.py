"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from fastapi import Depends

from ideas_api.adapters.sink.base import AbstractSubmissionSink
from ideas_api.adapters.sink.factory import create_submission_sink
from ideas_api.services.intake_service import IntakeService

_sink: AbstractSubmissionSink | None = None


def get_submission_sink() -> AbstractSubmissionSink:
    """Return the process-wide sink, creating it on first use."""
    global _sink
    if _sink is None:
        _sink = create_submission_sink()
    return _sink


async def close_submission_sink() -> None:
    """Release the sink's HTTP resources (called on shutdown)."""
    global _sink
    if _sink is None:
        return
    aclose = getattr(_sink, "aclose", None)
    if aclose is not None:
        await aclose()
    _sink = None


def get_intake_service(
    sink: AbstractSubmissionSink = Depends(get_submission_sink),
) -> IntakeService:
    return IntakeService(sink=sink)
