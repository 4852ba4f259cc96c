"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before any test module, so the
environment below is in place before settings are imported.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("APP_RATE_LIMIT_REQUESTS", "5")
os.environ.setdefault("APP_RATE_LIMIT_WINDOW_SECONDS", "3600")
for _name in ("GOOGLE_SERVICE_ACCOUNT_EMAIL", "GOOGLE_PRIVATE_KEY", "GOOGLE_SHEET_ID"):
    os.environ.pop(_name, None)

from collections.abc import Sequence
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from ideas_api.adapters.sink.base import AbstractSubmissionSink
from ideas_api.api.dependencies import get_submission_sink
from ideas_api.core.rate_limit import reset_rate_limiter
from ideas_api.main import app


class RecordingSink(AbstractSubmissionSink):
    """In-memory sink capturing appended rows."""

    def __init__(self) -> None:
        self.rows: list[list[str]] = []

    async def append_row(self, row: Sequence[str]) -> None:
        self.rows.append(list(row))


@pytest.fixture(autouse=True)
def fresh_rate_limiter() -> Iterator[None]:
    """Give every test an empty limiter."""
    reset_rate_limiter()
    yield
    reset_rate_limiter()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def client(sink: AbstractSubmissionSink) -> Iterator[TestClient]:
    """TestClient whose sink is replaced by ``sink``."""
    app.dependency_overrides[get_submission_sink] = lambda: sink
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_submission_sink, None)
