from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict[str, str]:
    """Liveness probe for load balancers; never rate limited and never touches the sink."""

    return {"status": "ok"}
