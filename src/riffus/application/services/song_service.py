"""Song service - the use cases behind /api/songs.

Hey future me - this is the ONE core for every provider! The old backend had a controller
per mode (database vs API-only) that duplicated the search/lookup logic. Here the provider
and the optional cache are injected, and the routers only translate results into JSON.

Search flow:
1. Validate the query (blank = ValidationError, no upstream call)
2. Read cached tracks for the query (cache configured only)
3. Ask the provider for fresh tracks (retries happen inside the provider)
4. Write valid fresh tracks back to the cache
5. Reconcile [cached, fresh] -> one deduplicated, ordered, truncated list

If the provider fails but the cache had hits, we serve the cached hits instead of a 500.
With no cache (or an empty cache result) the UpstreamError propagates to the router.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from riffus.application.services.track_reconciler import reconcile
from riffus.domain.entities import Track, is_valid_track
from riffus.domain.exceptions import NotFoundError, UpstreamError, ValidationError
from riffus.domain.ports.provider import SearchOptions, TrackProvider
from riffus.domain.ports.track_cache import TrackCache

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 25
DEFAULT_BROWSE_GENRE = "pop"
DEFAULT_BROWSE_LIMIT = 20
DEFAULT_LIST_LIMIT = 10

# Search terms used when there is no play history to draw from
RECENT_FALLBACK_TERM = "popular"
RECOMMENDED_FALLBACK_TERM = "top"


@dataclass(frozen=True)
class PlayResult:
    """Outcome of a play request."""

    song: Track
    # None when no cache is configured (nothing counts plays then)
    play_count: int | None = None


@dataclass(frozen=True)
class Order:
    """Acknowledged order. Nothing is persisted."""

    user_id: str
    song: Track
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class SongService:
    """Search, browse, lookup, play and order songs through one provider."""

    def __init__(
        self,
        provider: TrackProvider,
        cache: TrackCache | None = None,
        default_country: str = "us",
    ) -> None:
        """Initialize the service.

        Args:
            provider: Upstream catalog provider
            cache: Optional local track cache (None = pure proxy mode)
            default_country: Storefront used when a request doesn't name one
        """
        self._provider = provider
        self._cache = cache
        self._default_country = default_country

    @property
    def provider(self) -> TrackProvider:
        return self._provider

    @property
    def cache(self) -> TrackCache | None:
        return self._cache

    def _country(self, country: str | None) -> str:
        return (country or self._default_country).strip().lower() or self._default_country

    async def search(
        self,
        query: str | None,
        limit: int = DEFAULT_SEARCH_LIMIT,
        country: str | None = None,
    ) -> list[Track]:
        """Search cached and remote tracks and merge them.

        Args:
            query: Free-text search term
            limit: Maximum number of tracks returned
            country: Storefront country code

        Returns:
            Deduplicated tracks, id-bearing first, at most ``limit`` long

        Raises:
            ValidationError: Blank query
            UpstreamError: Provider failed and the cache had nothing to offer
        """
        if not query or not query.strip():
            raise ValidationError("Search query is required")
        query = query.strip()

        local: list[Track] = []
        if self._cache is not None:
            local = await self._cache.search(query, limit=limit)

        try:
            remote = await self._provider.search(
                query, SearchOptions(limit=limit, country=self._country(country))
            )
        except UpstreamError as e:
            if not local:
                raise
            logger.warning(
                "Provider %s failed for '%s', serving %d cached tracks: %s",
                self._provider.service_type.value,
                query,
                len(local),
                e.message,
            )
            remote = []

        if self._cache is not None and remote:
            await self._store_quietly([t for t in remote if is_valid_track(t)])

        songs = reconcile([local, remote], max_results=limit)
        logger.debug(
            "Search '%s': %d cached + %d remote -> %d songs",
            query,
            len(local),
            len(remote),
            len(songs),
        )
        return songs

    async def _store_quietly(self, tracks: list[Track]) -> None:
        # Write-back failures are logged only, the caller still gets its results
        if not tracks or self._cache is None:
            return
        try:
            await self._cache.store(tracks)
        except Exception:
            logger.exception("Failed to cache %d tracks, serving results anyway", len(tracks))

    async def browse(
        self, genre: str | None = DEFAULT_BROWSE_GENRE, limit: int = DEFAULT_BROWSE_LIMIT
    ) -> list[Track]:
        """Trending songs for a genre term (provider search, no cache)."""
        term = (genre or "").strip() or DEFAULT_BROWSE_GENRE
        return await self._provider.search(
            term, SearchOptions(limit=limit, country=self._default_country)
        )

    async def recent(self, limit: int = DEFAULT_LIST_LIMIT) -> list[Track]:
        """Recently played songs, or popular ones when nothing has been played yet."""
        if self._cache is not None:
            played = await self._cache.recently_played(limit)
            if played:
                return played
        return await self._provider.search(
            RECENT_FALLBACK_TERM,
            SearchOptions(limit=limit, country=self._default_country),
        )

    async def recommended(self, limit: int = DEFAULT_LIST_LIMIT) -> list[Track]:
        """Most played songs, or top results when nothing has been played yet."""
        if self._cache is not None:
            played = await self._cache.most_played(limit)
            if played:
                return played
        return await self._provider.search(
            RECOMMENDED_FALLBACK_TERM,
            SearchOptions(limit=limit, country=self._default_country),
        )

    async def get_song(self, raw_id: str | None, country: str | None = None) -> Track:
        """Look a song up by provider id.

        The cache is checked first (when configured); the provider only on a miss.

        Raises:
            ValidationError: Missing or malformed id
            NotFoundError: Provider has no such track
            UpstreamError: Provider kept failing
        """
        external_id = self._provider.parse_id(raw_id)
        if self._cache is not None:
            cached = await self._cache.get(external_id)
            if cached is not None:
                return cached

        song = await self._provider.lookup(external_id, self._country(country))
        if song is None:
            raise NotFoundError("Song", external_id)
        return song

    async def play(self, raw_id: str | None, country: str | None = None) -> PlayResult:
        """Look the song up and count the play when a cache is configured."""
        song = await self.get_song(raw_id, country)
        if self._cache is None:
            return PlayResult(song=song)

        play_count = await self._cache.record_play(song)
        logger.info("Play recorded for %s - %s (count=%d)", song.artist, song.title, play_count)
        return PlayResult(song=song, play_count=play_count)

    async def order(
        self,
        track_id: str | int | None = None,
        song_id: str | int | None = None,
        user_id: str | None = None,
        country: str | None = None,
    ) -> Order:
        """Validate an order against the provider and echo it back.

        Raises:
            ValidationError: Neither trackId nor songId given (or malformed)
            NotFoundError: Provider has no such track
        """
        # trackId wins over songId, same as the clients send it
        raw_id = track_id if track_id not in (None, "") else song_id
        if raw_id in (None, ""):
            raise ValidationError("trackId or songId is required")

        song = await self.get_song(str(raw_id), country)
        order = Order(user_id=user_id or "guest", song=song)
        logger.info("Order acknowledged for user %s: %s", order.user_id, song.external_id)
        return order
