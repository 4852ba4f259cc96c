"""OpenAPI customization.

Adds tag descriptions to the generated schema and documents the rate limit
on the submission endpoint, keeping documentation concerns out of the app
factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from ideas_api.core.config import settings

TAGS_METADATA = [
    {
        "name": "Submissions",
        "description": "Anonymous intake of classical music ideas.",
    },
    {
        "name": "Health",
        "description": "Liveness checks.",
    },
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tag metadata and limits."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        submit_op = schema.get("paths", {}).get("/api/submit", {}).get("post")
        if isinstance(submit_op, dict):
            submit_op["x-rate-limit"] = {
                "requests": settings.app.rate_limit_requests,
                "window_seconds": settings.app.rate_limit_window_seconds,
                "scope": "client ip",
            }

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
