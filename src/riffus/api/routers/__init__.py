"""API router initialization."""

# Hey future me, api_router holds everything under /api (only songs for now). The health router
# is NOT in here - "/", "/health" and "/users/demo" live at the root, see main.create_app().

from fastapi import APIRouter

from riffus.api.routers import health, songs

api_router = APIRouter()
api_router.include_router(songs.router)

__all__ = ["api_router", "health", "songs"]
