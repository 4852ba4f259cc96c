"""Submission sink adapters - abstract over append-only row stores."""

from ideas_api.adapters.sink.base import AbstractSubmissionSink
from ideas_api.adapters.sink.factory import create_submission_sink
from ideas_api.adapters.sink.google_sheets import GoogleSheetsSink

__all__ = [
    "AbstractSubmissionSink",
    "GoogleSheetsSink",
    "create_submission_sink",
]
