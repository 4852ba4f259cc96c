"""Tests for global exception handlers.

Validates that every error type maps to its HTTP status, that bodies share
the flat ``{"error": ...}`` shape, and that nothing internal leaks.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ideas_api.core.errors import (
    AppError,
    RateLimitAppError,
    SinkAppError,
    ValidationAppError,
)
from ideas_api.core.exception_handlers import (
    general_exception_handler,
    setup_exception_handlers,
    status_for_error,
)
from ideas_api.services.intake_service import IntakeService


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def test_endpoint():
            raise ValidationAppError(code="invalid_genre", message="Invalid genre selection.")

        response = client.get("/test-validation")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid genre selection."}

    def test_details_are_not_rendered(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation-details")
        async def test_endpoint():
            raise ValidationAppError(
                code="invalid_name",
                message="Name must be at most 100 characters.",
                details={"field": "name", "max_length": 100},
            )

        response = client.get("/test-validation-details")

        assert response.status_code == 400
        assert response.json() == {"error": "Name must be at most 100 characters."}

    def test_rate_limit_error_returns_429_with_headers(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/test-rate-limit")
        async def test_endpoint():
            raise RateLimitAppError(
                code="rate_limited",
                message="Too many submissions. Please try again later.",
                headers={"Retry-After": "120"},
            )

        response = client.get("/test-rate-limit")

        assert response.status_code == 429
        assert response.json()["error"] == "Too many submissions. Please try again later."
        assert response.headers["Retry-After"] == "120"

    def test_sink_error_returns_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-sink")
        async def test_endpoint():
            raise SinkAppError(
                code="sink_append_failed",
                message="Failed to save submission. Please try again.",
                details={"error_type": "HTTPStatusError", "error_msg": "403 from sheets"},
            )

        response = client.get("/test-sink")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to save submission. Please try again."}
        assert "403 from sheets" not in response.text

    def test_unmapped_app_error_defaults_to_500(self):
        assert status_for_error(AppError(code="x", message="y")) == 500


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        assert Exception in app_with_handlers.exception_handlers

    def test_general_exception_handler_returns_generic_message(self):
        request = AsyncMock()
        request.url.path = "/api/submit"
        request.method = "POST"

        exc = RuntimeError("Unexpected error: token endpoint unreachable")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data == {"error": "Failed to save submission. Please try again."}

    def test_general_exception_handler_never_leaks_stack_trace(self):
        request = AsyncMock()
        request.url.path = "/api/submit"
        request.method = "POST"

        response = asyncio.run(general_exception_handler(request, ValueError("boom")))

        response_text = bytes(response.body).decode()
        assert "Traceback" not in response_text
        assert "ValueError" not in response_text
        assert "boom" not in response_text


class TestErrorHandlerIntegration:
    def test_multiple_handler_setups_does_not_fail(self):
        app = FastAPI()

        setup_exception_handlers(app)
        setup_exception_handlers(app)

        assert AppError in app.exception_handlers

    def test_sink_failure_and_unexpected_error_share_client_message(self):
        sink = AsyncMock()
        sink.append_row.side_effect = RuntimeError("quota exceeded")
        service = IntakeService(sink=sink)

        with pytest.raises(SinkAppError) as exc_info:
            asyncio.run(service.submit(b'{"description": "A piece.", "genre": "Opera"}'))

        request = AsyncMock()
        request.url.path = "/api/submit"
        request.method = "POST"
        response = asyncio.run(general_exception_handler(request, RuntimeError("boom")))

        assert json.loads(bytes(response.body).decode()) == {"error": exc_info.value.message}
