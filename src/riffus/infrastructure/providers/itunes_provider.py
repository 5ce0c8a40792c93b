"""iTunes Search API provider.

Hey future me - iTunes is the DEFAULT provider and the friendliest one: no auth, no keys.
Two endpoints matter:
- GET /search?term=...&media=music&entity=song&limit=...&country=...
- GET /lookup?id=...&country=...
Both return {"resultCount": n, "results": [...]}. Search results can include music
videos and other junk even with entity=song, so we keep only kind == "song".

Limits: iTunes caps search at 200 results and soft rate-limits around 20 req/min per IP.
"""

import logging
from datetime import date, datetime
from typing import Any

from riffus.domain.entities import ExternalId, Track, TrackSource
from riffus.domain.exceptions import ValidationError
from riffus.domain.ports.provider import SearchOptions, ServiceType
from riffus.infrastructure.providers.base import HttpTrackProvider

logger = logging.getLogger(__name__)

PLACEHOLDER_COVER = "https://via.placeholder.com/600x600?text=No+Image"
MAX_SEARCH_LIMIT = 200


def parse_release_date(value: str | None) -> date | None:
    """Parse an ISO timestamp like 2011-07-24T07:00:00Z to a date."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        logger.debug("Unparseable release date %r", value)
        return None


# iTunes serves 30x30, 60x60 and 100x100 artwork URLs, but the CDN renders any size if you
# rewrite the dimension segment. We ask for 600x600 and keep the original as fallback.
def best_cover_image(raw: dict[str, Any]) -> str:
    """Pick the highest resolution artwork URL available."""
    for key, size in (
        ("artworkUrl100", "100x100"),
        ("artworkUrl60", "60x60"),
        ("artworkUrl30", "30x30"),
    ):
        url = raw.get(key)
        if url:
            return url.replace(size, "600x600") or url
    return PLACEHOLDER_COVER


class ITunesProvider(HttpTrackProvider):
    """Track provider backed by the Apple iTunes Search API."""

    API_BASE_URL = "https://itunes.apple.com"

    @property
    def service_type(self) -> ServiceType:
        return ServiceType.ITUNES

    async def search(self, query: str, options: SearchOptions) -> list[Track]:
        term = self._require_query(query)
        params = {
            "term": term,
            "media": "music",
            "entity": "song",
            "limit": min(max(options.limit, 1), MAX_SEARCH_LIMIT),
            "country": options.country.lower(),
        }

        data = await self._get_json("/search", params=params, action="search tracks")
        if not isinstance(data, dict) or not data.get("results"):
            return []

        tracks = self.format_tracks(data["results"])
        logger.debug("iTunes search %r returned %d songs", term, len(tracks))
        return tracks

    async def lookup(self, external_id: ExternalId, country: str = "us") -> Track | None:
        if not external_id:
            raise ValidationError("Track ID is required")

        data = await self._get_json(
            "/lookup",
            params={"id": external_id, "country": country.lower()},
            action="fetch track",
        )
        if not isinstance(data, dict) or not data.get("results"):
            return None

        return self.format_track(data["results"][0])

    def parse_id(self, raw_id: str | None) -> int:
        if raw_id is None or not str(raw_id).strip():
            raise ValidationError("trackId parameter is required (iTunes track ID)")
        try:
            value = int(str(raw_id).strip())
        except ValueError:
            raise ValidationError(
                "trackId parameter is required (iTunes track ID)"
            ) from None
        if value <= 0:
            raise ValidationError("trackId must be a positive integer")
        return value

    def format_track(self, raw: dict[str, Any]) -> Track:
        """Map a raw iTunes result to a Track."""
        return Track(
            title=raw.get("trackName") or raw.get("collectionName") or "Unknown",
            artist=raw.get("artistName") or "Unknown Artist",
            album=raw.get("collectionName") or "Unknown Album",
            cover_image=best_cover_image(raw),
            preview_url=raw.get("previewUrl") or None,
            full_track_url=raw.get("trackViewUrl") or None,
            track_view_url=raw.get("trackViewUrl") or None,
            external_id=raw.get("trackId") or None,
            duration=raw.get("trackTimeMillis") or None,
            genre=raw.get("primaryGenreName") or None,
            release_date=parse_release_date(raw.get("releaseDate")),
            source=TrackSource.ITUNES,
        )

    def format_tracks(self, results: list[dict[str, Any]]) -> list[Track]:
        """Map raw results, keeping only actual songs."""
        return [self.format_track(raw) for raw in results if raw.get("kind") == "song"]
