"""Application services."""

from riffus.application.services.song_service import Order, PlayResult, SongService
from riffus.application.services.track_reconciler import reconcile

__all__ = ["Order", "PlayResult", "SongService", "reconcile"]
