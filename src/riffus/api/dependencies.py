"""Dependency injection for API endpoints.

Hey future me - everything here reads from app.state, which the lifespan (or create_app()
in tests) fills in. No globals, no get_settings() calls: the app's own settings win.
"""

from typing import cast

from fastapi import Depends, Request

from riffus.application.services import SongService
from riffus.config import Settings
from riffus.domain.ports.provider import TrackProvider
from riffus.domain.ports.track_cache import TrackCache


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return cast(Settings, request.app.state.settings)


def get_provider(request: Request) -> TrackProvider:
    """Provider created at startup (or injected into create_app)."""
    return cast(TrackProvider, request.app.state.provider)


def get_cache(request: Request) -> TrackCache | None:
    """Track cache, None when CACHE__BACKEND=none."""
    return cast(TrackCache | None, getattr(request.app.state, "cache", None))


# SongService holds no per-request state, so building one per request is just three attribute
# assignments. Tests override this dependency to swap in a mock service.
def get_song_service(
    provider: TrackProvider = Depends(get_provider),
    cache: TrackCache | None = Depends(get_cache),
    settings: Settings = Depends(get_app_settings),
) -> SongService:
    """Song service wired to the app's provider and cache."""
    return SongService(provider, cache, default_country=settings.provider.default_country)
