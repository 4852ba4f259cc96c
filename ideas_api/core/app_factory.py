from __future__ import annotations

"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from ideas_api.api.dependencies import close_submission_sink
from ideas_api.api.routes import health_router, submit_router
from ideas_api.core.config import settings
from ideas_api.core.exception_handlers import setup_exception_handlers
from ideas_api.core.logging import configure_logging
from ideas_api.core.middleware import request_id_middleware
from ideas_api.core.openapi import TAGS_METADATA, apply_openapi_customizations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "app.startup",
        extra={
            "app_env": settings.app_env,
            "rate_limit_enabled": settings.app.rate_limit_enabled,
            "sheet_configured": bool(settings.sheets.sheet_id),
        },
    )
    yield
    await close_submission_sink()
    logger.info("app.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Classical Music Ideas API",
        description=(
            "Collects one-sentence ideas for classical pieces that should exist "
            "and appends each accepted submission to a Google Sheet. Submissions "
            "are anonymous and rate limited per client."
        ),
        version="0.1.0",
        openapi_tags=TAGS_METADATA,
        lifespan=lifespan,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(submit_router)
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
