"""Persistence layer - SQLAlchemy models, repositories and the database track cache."""

from riffus.infrastructure.persistence.database import Database
from riffus.infrastructure.persistence.models import Base, SongModel
from riffus.infrastructure.persistence.repositories import SongRepository
from riffus.infrastructure.persistence.track_cache import DatabaseTrackCache

__all__ = ["Base", "Database", "DatabaseTrackCache", "SongModel", "SongRepository"]
