"""Domain entities."""

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Any

# iTunes and Deezer hand out integer ids, Spotify base62 strings.
ExternalId = int | str

# Identity keys are either ("id", external_id) or ("tuple", title, artist, album).
IdentityKey = tuple[Any, ...]


# Hey future me, TrackSource is the provenance tag! It's used as the tie-breaker when the
# reconciler sees the same song twice. Provider tags (itunes/deezer/spotify) mean "fresh from
# upstream", CACHE means "we served it from our own store", LOCAL is for hand-seeded data.
class TrackSource(str, Enum):
    """Where a Track record came from."""

    ITUNES = "itunes"
    DEEZER = "deezer"
    SPOTIFY = "spotify"
    LOCAL = "local"
    CACHE = "cache"


def normalize_text(value: str | None) -> str:
    """Trim and case-fold a text field for identity comparison."""
    return (value or "").strip().casefold()


@dataclass(frozen=True)
class Track:
    """Normalized track record returned to clients.

    Tracks are ephemeral per-request values assembled from provider responses
    or cache lookups. Serialized with camelCase keys via ``to_dict()``.
    """

    title: str
    artist: str
    album: str = ""
    cover_image: str = ""
    preview_url: str | None = None
    full_track_url: str | None = None
    track_view_url: str | None = None
    external_id: ExternalId | None = None
    duration: int | None = None
    genre: str | None = None
    release_date: date | None = None
    source: TrackSource = TrackSource.LOCAL

    @property
    def has_external_id(self) -> bool:
        """True when the provider assigned an identifier to this track."""
        return self.external_id is not None

    @property
    def fallback_key(self) -> IdentityKey:
        """Normalized (title, artist, album) tuple key."""
        return (
            "tuple",
            normalize_text(self.title),
            normalize_text(self.artist),
            normalize_text(self.album),
        )

    # Yo, this is THE identity rule! externalId is authoritative when present; only tracks
    # without one fall back to the normalized text tuple. Two tracks with the same key are the
    # same song no matter where they came from.
    @property
    def identity_key(self) -> IdentityKey:
        """Derived identity used for deduplication."""
        if self.external_id is not None:
            return ("id", self.external_id)
        return self.fallback_key

    def with_source(self, source: TrackSource) -> "Track":
        """Return a copy of this track tagged with another source."""
        return replace(self, source=source)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase shape clients expect."""
        return {
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "coverImage": self.cover_image,
            "previewUrl": self.preview_url,
            "fullTrackUrl": self.full_track_url,
            "trackViewUrl": self.track_view_url,
            "externalId": self.external_id,
            "duration": self.duration,
            "genre": self.genre,
            "releaseDate": self.release_date.isoformat() if self.release_date else None,
            "source": self.source.value,
        }


def is_valid_track(track: Track | None) -> bool:
    """Check a track has the fields required for storing it.

    The reconciler never calls this; collaborators filter with it before
    writing tracks back to the cache.
    """
    return bool(track and track.title and track.artist and track.cover_image)


__all__ = [
    "ExternalId",
    "IdentityKey",
    "Track",
    "TrackSource",
    "is_valid_track",
    "normalize_text",
]
