"""HTTP API for Riffus.

- routers/: endpoints (songs under /api, health at the root)
- schemas/: pydantic request/response models
- dependencies.py: dependency injection from app.state
- exception_handlers.py: global error envelope
"""

from riffus.api.routers import api_router, health, songs

__all__ = ["api_router", "health", "songs"]
