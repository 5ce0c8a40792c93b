"""Spotify Web API provider (client credentials flow).

Hey future me - catalog search on Spotify needs NO user login! The client credentials
flow (app id + secret -> bearer token, ~1 hour lifetime) is enough for /search and
/tracks/{id}. We cache the token and refresh it a minute before it expires.

Differences from the other providers:
- Track ids are base62 strings (22 chars), not integers
- Images come as a list sorted largest first
- Missing tracks are a real HTTP 404 (and a 400 for malformed ids)
"""

import asyncio
import logging
import re
import time
from typing import Any

import httpx

from riffus.domain.entities import ExternalId, Track, TrackSource
from riffus.domain.exceptions import ConfigurationError, UpstreamError, ValidationError
from riffus.domain.ports.provider import SearchOptions, ServiceType
from riffus.infrastructure.integrations.resilient_fetch import ResilientFetcher
from riffus.infrastructure.providers.base import HttpTrackProvider
from riffus.infrastructure.providers.itunes_provider import (
    PLACEHOLDER_COVER,
    parse_release_date,
)

logger = logging.getLogger(__name__)

MAX_SEARCH_LIMIT = 50
TOKEN_REFRESH_MARGIN_SECONDS = 60
_SPOTIFY_ID = re.compile(r"^[0-9A-Za-z]{22}$")


class SpotifyProvider(HttpTrackProvider):
    """Track provider backed by the Spotify Web API."""

    TOKEN_URL = "https://accounts.spotify.com/api/token"  # nosec B105 - public endpoint URL
    API_BASE_URL = "https://api.spotify.com/v1"

    def __init__(
        self,
        client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        fetcher: ResilientFetcher | None = None,
        base_url: str | None = None,
        token_url: str | None = None,
    ) -> None:
        if not client_id or not client_secret:
            raise ConfigurationError(
                "Spotify provider needs PROVIDER__SPOTIFY_CLIENT_ID and "
                "PROVIDER__SPOTIFY_CLIENT_SECRET"
            )
        super().__init__(client, fetcher=fetcher, base_url=base_url)
        self._client_id = client_id
        self._client_secret = client_secret
        self.token_url = token_url or self.TOKEN_URL
        self._access_token: str | None = None
        self._expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @property
    def service_type(self) -> ServiceType:
        return ServiceType.SPOTIFY

    async def _get_access_token(self) -> str:
        """Return a valid bearer token, fetching a new one when needed."""
        async with self._token_lock:
            if self._access_token and time.monotonic() < self._expires_at:
                return self._access_token

            response = await self._client.post(
                self.token_url,
                data={"grant_type": "client_credentials"},
                auth=(self._client_id, self._client_secret),
            )
            if response.status_code in (400, 401):
                # Bad credentials - name the cause instead of a bare HTTP 401
                raise UpstreamError(
                    f"Spotify rejected client credentials (HTTP {response.status_code})",
                    provider=self.service_type.value,
                )
            response.raise_for_status()
            payload = response.json()

            self._access_token = payload["access_token"]
            expires_in = int(payload.get("expires_in", 3600))
            self._expires_at = time.monotonic() + max(
                expires_in - TOKEN_REFRESH_MARGIN_SECONDS, 0
            )
            logger.debug("Fetched Spotify access token (expires in %ds)", expires_in)
            return self._access_token

    async def _request_headers(self) -> dict[str, str]:
        token = await self._get_access_token()
        return {"Authorization": f"Bearer {token}"}

    async def search(self, query: str, options: SearchOptions) -> list[Track]:
        term = self._require_query(query)
        data = await self._get_json(
            "/search",
            params={
                "q": term,
                "type": "track",
                "limit": min(max(options.limit, 1), MAX_SEARCH_LIMIT),
                "market": options.country.upper(),
            },
            action="search tracks",
        )
        if not isinstance(data, dict):
            return []

        items = (data.get("tracks") or {}).get("items") or []
        return [self.format_track(item) for item in items if item and item.get("id")]

    async def lookup(self, external_id: ExternalId, country: str = "us") -> Track | None:
        if not external_id:
            raise ValidationError("Track ID is required")

        data = await self._get_json(
            f"/tracks/{external_id}",
            params={"market": country.upper()},
            action="fetch track",
            allow_not_found=True,
        )
        if not isinstance(data, dict) or not data.get("id"):
            return None

        return self.format_track(data)

    def parse_id(self, raw_id: str | None) -> str:
        value = (raw_id or "").strip()
        if value.startswith("spotify:track:"):
            value = value.removeprefix("spotify:track:")
        if not _SPOTIFY_ID.match(value):
            raise ValidationError("trackId parameter is required (Spotify track ID)")
        return value

    def format_track(self, raw: dict[str, Any]) -> Track:
        """Map a raw Spotify track object to a Track."""
        album = raw.get("album") or {}
        artists = raw.get("artists") or []
        images = album.get("images") or []
        # Spotify sorts images largest first, but don't trust it blindly
        largest = max(images, key=lambda img: img.get("width") or 0) if images else None
        store_url = (raw.get("external_urls") or {}).get("spotify")

        return Track(
            title=raw.get("name") or "Unknown",
            artist=", ".join(a["name"] for a in artists if a.get("name")) or "Unknown Artist",
            album=album.get("name") or "Unknown Album",
            cover_image=(largest or {}).get("url") or PLACEHOLDER_COVER,
            preview_url=raw.get("preview_url") or None,
            full_track_url=store_url,
            track_view_url=store_url,
            external_id=raw.get("id") or None,
            duration=raw.get("duration_ms") or None,
            genre=None,
            release_date=parse_release_date(album.get("release_date")),
            source=TrackSource.SPOTIFY,
        )
