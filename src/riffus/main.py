"""FastAPI application factory and server entry point."""

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from riffus.api.exception_handlers import register_exception_handlers
from riffus.api.routers import api_router, health
from riffus.config import Settings, get_settings
from riffus.domain.ports.provider import TrackProvider
from riffus.domain.ports.track_cache import TrackCache
from riffus.infrastructure.lifecycle import lifespan
from riffus.infrastructure.observability import RequestLoggingMiddleware


# Hey future me, every collaborator can be injected here! Tests pass a mock provider (or an
# httpx.MockTransport to run the REAL provider against canned payloads) and their own cache.
# Whatever is left as None gets built by the lifespan from settings.
def create_app(
    settings: Settings | None = None,
    provider: TrackProvider | None = None,
    cache: TrackCache | None = None,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create the Riffus application.

    Args:
        settings: Settings to use (default: get_settings())
        provider: Pre-built provider; skips HTTP pool and provider creation
        cache: Pre-built track cache; skips CACHE__BACKEND handling
        http_transport: Transport for the HTTP pool (tests use httpx.MockTransport)

    Returns:
        Configured FastAPI app (resources are created when the lifespan starts)
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Riffus",
        description="Music search proxy with result caching",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.provider = provider
    app.state.cache = cache
    app.state.http_transport = http_transport

    # Middleware order: last added runs first, so request logging wraps CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(api_router, prefix="/api")

    return app


def run() -> None:
    """Run the API server with uvicorn (console script `riffus`)."""
    settings = get_settings()
    uvicorn.run(
        "riffus.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
