"""Application lifecycle management for startup and shutdown tasks.

Startup order:
1. Logging
2. HTTP client pool + provider (skipped when create_app() got a provider)
3. Track cache per CACHE__BACKEND (skipped when create_app() got a cache)

Shutdown closes ONLY what the lifespan created, in reverse order. Injected
providers/caches belong to whoever injected them (usually a test).
"""

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI

from riffus.application.cache import InMemoryTrackCache
from riffus.config import Settings
from riffus.domain.ports.track_cache import TrackCache
from riffus.infrastructure.integrations import HttpClientPool
from riffus.infrastructure.observability import configure_logging
from riffus.infrastructure.persistence import Database, DatabaseTrackCache
from riffus.infrastructure.providers import build_provider

logger = logging.getLogger(__name__)


async def build_cache(settings: Settings) -> TrackCache | None:
    """Create the track cache selected by CACHE__BACKEND.

    Returns:
        The cache, or None for backend "none" (pure proxy mode)
    """
    backend = settings.cache.backend
    if backend == "memory":
        return InMemoryTrackCache(ttl_seconds=settings.cache.ttl_seconds)
    if backend == "database":
        database = Database(settings.database)
        await database.create_tables()
        logger.info(
            "Database cache ready: %s",
            settings.database.url.split("@")[-1],
        )
        return DatabaseTrackCache(database, owns_database=True)
    return None


# Hey future me, everything the app needs per process is created HERE and parked on app.state -
# dependencies.py only reads from app.state. Nothing is a module-level singleton, so two apps
# in one test session never share a provider or a cache.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.log_json,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s (%s)", settings.app_name, settings.environment)

    cleanups: list[tuple[str, Callable[[], Awaitable[None]]]] = []
    try:
        if getattr(app.state, "provider", None) is None:
            pool = HttpClientPool(
                timeout=settings.retry.timeout_ms / 1000,
                user_agent=settings.provider.user_agent,
                transport=getattr(app.state, "http_transport", None),
            )
            cleanups.append(("http client pool", pool.close))
            app.state.http_pool = pool
            provider = build_provider(settings, await pool.get_client())
            cleanups.append((f"{provider.service_type.value} provider", provider.close))
            app.state.provider = provider

        if getattr(app.state, "cache", None) is None:
            cache = await build_cache(settings)
            if cache is not None:
                cleanups.append((f"{settings.cache.backend} cache", cache.close))
            app.state.cache = cache

        logger.info(
            "Application ready (provider=%s, cache=%s)",
            app.state.provider.service_type.value,
            type(app.state.cache).__name__ if app.state.cache else "none",
        )
        yield
    finally:
        logger.info("Shutting down application")
        for name, close in reversed(cleanups):
            try:
                await close()
            except Exception:
                # Keep closing the rest
                logger.exception("Error closing %s", name)
        logger.info("Application shutdown complete")
