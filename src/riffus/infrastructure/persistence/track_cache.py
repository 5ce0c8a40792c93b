"""Database-backed track cache."""

import logging

from riffus.domain.entities import ExternalId, Track
from riffus.domain.ports.track_cache import TrackCache
from riffus.infrastructure.persistence.database import Database
from riffus.infrastructure.persistence.repositories import SongRepository

logger = logging.getLogger(__name__)


class DatabaseTrackCache(TrackCache):
    """TrackCache on top of SQLAlchemy.

    Hey future me - every method opens its own session_scope, so each call is one
    transaction. record_play is read-modify-write inside that transaction; on SQLite the
    database lock serializes concurrent plays. Rows never expire here (unlike the in-memory
    cache); play history is the whole point of this backend.
    """

    def __init__(self, database: Database, owns_database: bool = False) -> None:
        """Initialize the cache.

        Args:
            database: Database holding the riffus_songs table
            owns_database: Dispose the engine on close()
        """
        self._database = database
        self._owns_database = owns_database

    async def search(self, query: str, limit: int = 25) -> list[Track]:
        async with self._database.session_scope() as session:
            return await SongRepository(session).search(query, limit)

    async def store(self, tracks: list[Track]) -> None:
        if not tracks:
            return
        async with self._database.session_scope() as session:
            repo = SongRepository(session)
            for track in tracks:
                await repo.upsert(track)
        logger.debug("Cached %d tracks", len(tracks))

    async def get(self, external_id: ExternalId) -> Track | None:
        async with self._database.session_scope() as session:
            return await SongRepository(session).get(external_id)

    async def record_play(self, track: Track) -> int:
        async with self._database.session_scope() as session:
            return await SongRepository(session).record_play(track)

    async def recently_played(self, limit: int = 10) -> list[Track]:
        async with self._database.session_scope() as session:
            return await SongRepository(session).recently_played(limit)

    async def most_played(self, limit: int = 10) -> list[Track]:
        async with self._database.session_scope() as session:
            return await SongRepository(session).most_played(limit)

    async def close(self) -> None:
        if self._owns_database:
            await self._database.close()
