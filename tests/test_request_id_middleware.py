from __future__ import annotations

from fastapi.testclient import TestClient

from ideas_api.main import app


client = TestClient(app)


def test_preserves_incoming_request_id_header():
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing():
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID")
    assert resp.headers.get("X-Request-Duration-ms") is not None


def test_request_ids_differ_between_requests():
    first = client.get("/health").headers["X-Request-ID"]
    second = client.get("/health").headers["X-Request-ID"]

    assert first != second


def test_error_responses_also_carry_request_id():
    resp = client.post(
        "/api/submit",
        content=b"{broken",
        headers={"Content-Type": "application/json", "X-Request-ID": "req-err"},
    )

    assert resp.status_code == 400
    assert resp.headers.get("X-Request-ID") == "req-err"
