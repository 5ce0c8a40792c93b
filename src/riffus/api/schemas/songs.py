"""API schemas for song endpoints.

Field names are snake_case in Python and camelCase on the wire (coverImage, externalId,
playCount, ...), which is what the existing frontend reads.
"""

from datetime import date, datetime
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
)
from pydantic.alias_generators import to_camel

from riffus.application.services import Order
from riffus.domain.entities import Track


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SongSchema(CamelModel):
    """A normalized track as returned to clients."""

    title: str = Field(..., description="Track title")
    artist: str = Field(..., description="Artist name(s)")
    album: str = Field(default="", description="Album name")
    cover_image: str = Field(default="", description="Artwork URL")
    preview_url: str | None = Field(default=None, description="30s preview URL")
    full_track_url: str | None = Field(default=None, description="Full track / store URL")
    track_view_url: str | None = Field(default=None, description="Store page URL")
    external_id: int | str | None = Field(default=None, description="Provider track ID")
    duration: int | None = Field(default=None, description="Duration in milliseconds")
    genre: str | None = Field(default=None, description="Primary genre")
    release_date: date | None = Field(default=None, description="Release date")
    source: str = Field(..., description="itunes, deezer, spotify, local or cache")

    @classmethod
    def from_track(cls, track: Track) -> "SongSchema":
        return cls(
            title=track.title,
            artist=track.artist,
            album=track.album,
            cover_image=track.cover_image,
            preview_url=track.preview_url,
            full_track_url=track.full_track_url,
            track_view_url=track.track_view_url,
            external_id=track.external_id,
            duration=track.duration,
            genre=track.genre,
            release_date=track.release_date,
            source=track.source.value,
        )


class SongListResponse(CamelModel):
    """Response for /search, /recent and /recommended."""

    success: bool = True
    count: int = Field(..., description="Number of songs in this response")
    songs: list[SongSchema] = Field(default_factory=list)

    @classmethod
    def from_tracks(cls, tracks: list[Track]) -> "SongListResponse":
        return cls(count=len(tracks), songs=[SongSchema.from_track(t) for t in tracks])


class Pagination(CamelModel):
    """Single-page pagination block (upstream search is not paged)."""

    page: int = 1
    limit: int
    total: int
    pages: int = 1


class BrowseResponse(CamelModel):
    """Response for GET /api/songs."""

    success: bool = True
    data: list[SongSchema] = Field(default_factory=list)
    pagination: Pagination


class SongResponse(CamelModel):
    """Response for GET /api/songs/{id}."""

    success: bool = True
    song: SongSchema


class PlayResponse(CamelModel):
    """Response for POST /api/songs/{id}/play."""

    success: bool = True
    message: str
    song: SongSchema
    play_count: int | None = Field(
        default=None, description="Total plays, only present when a cache counts them"
    )

    # playCount is left out entirely rather than sent as null in proxy mode
    @model_serializer(mode="wrap")
    def _drop_missing_play_count(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data: dict[str, Any] = handler(self)
        if self.play_count is None:
            data.pop("playCount", None)
            data.pop("play_count", None)
        return data


class OrderRequest(CamelModel):
    """Body of POST /api/songs/order. trackId or songId is required."""

    user_id: int | str | None = Field(default=None, description="Ordering user (guest when absent)")
    song_id: int | str | None = Field(default=None, description="Song ID (provider track ID)")
    track_id: int | str | None = Field(default=None, description="Provider track ID")
    country: str | None = Field(default=None, description="Storefront country code")


class OrderSchema(CamelModel):
    """Acknowledged order."""

    user_id: str
    song: SongSchema
    created_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderSchema":
        return cls(
            user_id=order.user_id,
            song=SongSchema.from_track(order.song),
            created_at=order.created_at,
        )


class OrderResponse(CamelModel):
    """Response for POST /api/songs/order."""

    success: bool = True
    message: str
    order: OrderSchema
