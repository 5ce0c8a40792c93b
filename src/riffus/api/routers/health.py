"""Service status endpoints: root banner, health check and the demo user."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Request

from riffus.api.dependencies import get_app_settings
from riffus.config import Settings

router = APIRouter(tags=["Health"])

DEMO_USER = {
    "name": "Guest",
    "membershipType": "Gold",
    "avatar": "https://i.pravatar.cc/100?img=5",
}


@router.get("/")
async def root(settings: Settings = Depends(get_app_settings)) -> dict[str, str]:
    """Liveness banner."""
    return {"status": "ok", "service": settings.app_name}


@router.get("/health")
async def health(
    request: Request, settings: Settings = Depends(get_app_settings)
) -> dict[str, Any]:
    """Report which provider and cache backend this instance runs with."""
    provider = getattr(request.app.state, "provider", None)
    cache = getattr(request.app.state, "cache", None)
    pool = getattr(request.app.state, "http_pool", None)

    checks: dict[str, Any] = {
        "provider": provider.service_type.value if provider else None,
        "cache": settings.cache.backend if cache is not None else "none",
    }
    if pool is not None:
        checks["http_pool_initialized"] = pool.is_initialized()
    get_stats = getattr(cache, "get_stats", None)
    if callable(get_stats):
        stats = get_stats()
        # An injected cache may not match CACHE__BACKEND, the stats know better
        checks["cache"] = stats.get("backend", checks["cache"])
        checks["cache_stats"] = stats

    return {
        "status": "healthy" if provider is not None else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "environment": settings.environment,
        "checks": checks,
    }


# Fixed payload for the example frontend; there are no user accounts.
@router.get("/users/demo")
async def demo_user() -> dict[str, str]:
    """Demo user shown in the frontend header."""
    return dict(DEMO_USER)
