from __future__ import annotations

from ideas_api.api.routes.health import router as health_router
from ideas_api.api.routes.submit import router as submit_router

__all__ = ["health_router", "submit_router"]
