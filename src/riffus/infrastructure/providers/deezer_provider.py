"""Deezer public API provider.

Hey future me - Deezer's public API works WITHOUT authentication, which makes it the
easy alternative to iTunes. Quirks worth remembering:
- Search payload is {"data": [...], "total": n}, not "results"
- Track duration is in SECONDS (we store milliseconds like everyone else)
- A missing track comes back as HTTP 200 with {"error": {...}}, not a 404
- Album covers go up to 1000x1000 (cover_xl) - the good stuff!

Rate limits: 50 requests per 5 seconds per IP.
"""

import logging
from typing import Any

from riffus.domain.entities import ExternalId, Track, TrackSource
from riffus.domain.exceptions import ValidationError
from riffus.domain.ports.provider import SearchOptions, ServiceType
from riffus.infrastructure.providers.base import HttpTrackProvider
from riffus.infrastructure.providers.itunes_provider import (
    PLACEHOLDER_COVER,
    parse_release_date,
)

logger = logging.getLogger(__name__)

MAX_SEARCH_LIMIT = 100


class DeezerProvider(HttpTrackProvider):
    """Track provider backed by the public Deezer API."""

    API_BASE_URL = "https://api.deezer.com"

    @property
    def service_type(self) -> ServiceType:
        return ServiceType.DEEZER

    async def search(self, query: str, options: SearchOptions) -> list[Track]:
        term = self._require_query(query)
        data = await self._get_json(
            "/search/track",
            params={"q": term, "limit": min(max(options.limit, 1), MAX_SEARCH_LIMIT)},
            action="search tracks",
        )
        if not isinstance(data, dict):
            return []

        return [self.format_track(item) for item in data.get("data", []) if item.get("id")]

    async def lookup(self, external_id: ExternalId, country: str = "us") -> Track | None:
        if not external_id:
            raise ValidationError("Track ID is required")

        data = await self._get_json(
            f"/track/{external_id}", action="fetch track", allow_not_found=True
        )
        if not isinstance(data, dict) or "error" in data or not data.get("id"):
            return None

        return self.format_track(data)

    def parse_id(self, raw_id: str | None) -> int:
        if raw_id is None or not str(raw_id).strip():
            raise ValidationError("trackId parameter is required (Deezer track ID)")
        try:
            value = int(str(raw_id).strip())
        except ValueError:
            raise ValidationError(
                "trackId parameter is required (Deezer track ID)"
            ) from None
        if value <= 0:
            raise ValidationError("trackId must be a positive integer")
        return value

    def format_track(self, raw: dict[str, Any]) -> Track:
        """Map a raw Deezer track to a Track."""
        artist = raw.get("artist") or {}
        album = raw.get("album") or {}
        duration_seconds = raw.get("duration")

        return Track(
            title=raw.get("title") or "Unknown",
            artist=artist.get("name") or "Unknown Artist",
            album=album.get("title") or "Unknown Album",
            cover_image=(
                album.get("cover_xl")
                or album.get("cover_big")
                or album.get("cover_medium")
                or album.get("cover_small")
                or PLACEHOLDER_COVER
            ),
            preview_url=raw.get("preview") or None,
            full_track_url=raw.get("link") or None,
            track_view_url=raw.get("link") or None,
            external_id=raw.get("id") or None,
            duration=duration_seconds * 1000 if duration_seconds else None,
            # Deezer only exposes genres on the album endpoint
            genre=None,
            release_date=parse_release_date(raw.get("release_date")),
            source=TrackSource.DEEZER,
        )
