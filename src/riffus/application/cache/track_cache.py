"""In-memory track cache."""

import asyncio
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from riffus.domain.entities import ExternalId, IdentityKey, Track, TrackSource
from riffus.domain.ports.track_cache import TrackCache


@dataclass
class CacheEntry:
    """Cached track with expiry and play statistics."""

    track: Track
    created_at: float
    ttl_seconds: int
    play_count: int = 0
    last_played: datetime | None = None

    # Plain Unix timestamps, so no timezone drama. If the system clock jumps backwards,
    # entries may look expired early - acceptable for a cache.
    def is_expired(self) -> bool:
        """Check if cache entry is expired."""
        return time.time() > (self.created_at + self.ttl_seconds)


def _matches(track: Track, needle: str) -> bool:
    return any(needle in (field or "").casefold() for field in (track.title, track.artist, track.album))


class InMemoryTrackCache(TrackCache):
    """Track cache backed by a dict.

    Listen up future me, this is IN-MEMORY ONLY! Restart = cache and play counts gone, and
    nothing is shared across worker processes. Use CACHE__BACKEND=database for anything that
    should survive. Always hold self._lock before touching self._entries - two coroutines
    doing read-modify-write on the same entry would otherwise lose play counts.
    """

    def __init__(self, ttl_seconds: int = 3600) -> None:
        self.ttl_seconds = ttl_seconds
        self._entries: dict[IdentityKey, CacheEntry] = {}
        self._lock = asyncio.Lock()

    def _live_entries(self) -> list[CacheEntry]:
        expired = [key for key, entry in self._entries.items() if entry.is_expired()]
        for key in expired:
            del self._entries[key]
        return list(self._entries.values())

    def _upsert(self, track: Track) -> CacheEntry:
        # Tracks are stored under their provider tag; the CACHE tag is applied on the way out
        entry = self._entries.get(track.identity_key)
        if entry is None or entry.is_expired():
            entry = CacheEntry(track=track, created_at=time.time(), ttl_seconds=self.ttl_seconds)
            self._entries[track.identity_key] = entry
        else:
            if track.source is TrackSource.CACHE:
                # a track read back from this cache keeps its provider tag
                track = track.with_source(entry.track.source)
            entry.track = track
            entry.created_at = time.time()
        return entry

    async def search(self, query: str, limit: int = 25) -> list[Track]:
        needle = query.strip().casefold()
        if not needle:
            return []
        async with self._lock:
            hits = [e.track for e in self._live_entries() if _matches(e.track, needle)]
        return [t.with_source(TrackSource.CACHE) for t in hits[:limit]]

    async def store(self, tracks: list[Track]) -> None:
        async with self._lock:
            for track in tracks:
                self._upsert(track)

    async def get(self, external_id: ExternalId) -> Track | None:
        async with self._lock:
            entry = self._entries.get(("id", external_id))
            if entry is None:
                return None
            if entry.is_expired():
                del self._entries[("id", external_id)]
                return None
            return entry.track.with_source(TrackSource.CACHE)

    async def record_play(self, track: Track) -> int:
        async with self._lock:
            entry = self._upsert(track)
            entry.play_count += 1
            entry.last_played = datetime.now(UTC)
            return entry.play_count

    async def recently_played(self, limit: int = 10) -> list[Track]:
        async with self._lock:
            played = [e for e in self._live_entries() if e.last_played is not None]
        played.sort(key=lambda e: e.last_played, reverse=True)  # type: ignore[arg-type,return-value]
        return [e.track.with_source(TrackSource.CACHE) for e in played[:limit]]

    async def most_played(self, limit: int = 10) -> list[Track]:
        async with self._lock:
            played = [e for e in self._live_entries() if e.play_count > 0]
        played.sort(
            key=lambda e: (e.play_count, e.last_played or datetime.min.replace(tzinfo=UTC)),
            reverse=True,
        )
        return [e.track.with_source(TrackSource.CACHE) for e in played[:limit]]

    async def clear(self) -> None:
        """Drop every entry, play statistics included."""
        async with self._lock:
            self._entries.clear()

    # Not locked: stats are for /health, a slightly stale count is fine.
    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total_entries = len(self._entries)
        expired_entries = sum(1 for entry in self._entries.values() if entry.is_expired())
        return {
            "backend": "memory",
            "total_entries": total_entries,
            "active_entries": total_entries - expired_entries,
            "expired_entries": expired_entries,
        }
