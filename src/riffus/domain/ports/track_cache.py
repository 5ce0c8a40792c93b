"""Track cache interface.

Hey future me - the cache is OPTIONAL! With CACHE__BACKEND=none the song service
gets cache=None and runs in pure proxy mode (the old "API-only" controller).
Tracks read back out of any cache are tagged TrackSource.CACHE so the reconciler
lets fresh provider data win on collisions.
"""

from abc import ABC, abstractmethod

from riffus.domain.entities import ExternalId, Track


class TrackCache(ABC):
    """Local store of previously seen tracks plus play statistics."""

    @abstractmethod
    async def search(self, query: str, limit: int = 25) -> list[Track]:
        """Case-insensitive substring match over title, artist and album."""
        ...

    @abstractmethod
    async def store(self, tracks: list[Track]) -> None:
        """Upsert tracks, keeping play statistics of existing entries."""
        ...

    @abstractmethod
    async def get(self, external_id: ExternalId) -> Track | None:
        """Get a cached track by provider id."""
        ...

    @abstractmethod
    async def record_play(self, track: Track) -> int:
        """Upsert the track, bump its play count and return the new count."""
        ...

    @abstractmethod
    async def recently_played(self, limit: int = 10) -> list[Track]:
        """Tracks ordered by last play, newest first."""
        ...

    @abstractmethod
    async def most_played(self, limit: int = 10) -> list[Track]:
        """Tracks ordered by play count, then last play."""
        ...

    async def close(self) -> None:
        """Release cache resources (default: nothing to release)."""
        return None
