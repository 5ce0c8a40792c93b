"""Song endpoints mounted under /api/songs.

Hey future me - route ORDER matters here! /recent, /recommended, /search and /order must be
declared before /{song_id}, otherwise "search" would be parsed as a song id.

Every handler turns a provider failure (UpstreamError) into a 500 with its own generic message
by raising HTTPException from it; the exception handler adds the underlying detail as "error"
in development only. ValidationError (400) and NotFoundError (404) go straight to the global
handlers.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from riffus.api.dependencies import get_song_service
from riffus.api.schemas import (
    BrowseResponse,
    OrderRequest,
    OrderResponse,
    OrderSchema,
    Pagination,
    PlayResponse,
    SongListResponse,
    SongResponse,
    SongSchema,
)
from riffus.application.services import SongService
from riffus.domain.exceptions import UpstreamError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/songs", tags=["Songs"])

MAX_LIMIT = 200


def _upstream_failure(message: str, error: UpstreamError) -> HTTPException:
    logger.error("%s: %s", message, error.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


@router.get("", response_model=BrowseResponse)
@router.get("/", response_model=BrowseResponse, include_in_schema=False)
async def list_songs(
    genre: str = Query("pop", description="Genre term to browse"),
    limit: int = Query(20, ge=1, le=MAX_LIMIT, description="Results per page"),
    service: SongService = Depends(get_song_service),
) -> BrowseResponse:
    """Trending songs for a genre, straight from the provider."""
    try:
        tracks = await service.browse(genre, limit)
    except UpstreamError as e:
        raise _upstream_failure("Failed to fetch songs", e) from e

    return BrowseResponse(
        data=[SongSchema.from_track(t) for t in tracks],
        pagination=Pagination(limit=len(tracks), total=len(tracks)),
    )


@router.get("/recent", response_model=SongListResponse)
async def recently_played(
    limit: int = Query(10, ge=1, le=MAX_LIMIT, description="Maximum results"),
    service: SongService = Depends(get_song_service),
) -> SongListResponse:
    """Recently played songs (popular songs until something has been played)."""
    try:
        tracks = await service.recent(limit)
    except UpstreamError as e:
        raise _upstream_failure("Failed to fetch recent songs", e) from e
    return SongListResponse.from_tracks(tracks)


@router.get("/recommended", response_model=SongListResponse)
async def recommended(
    limit: int = Query(10, ge=1, le=MAX_LIMIT, description="Maximum results"),
    service: SongService = Depends(get_song_service),
) -> SongListResponse:
    """Most played songs (top results until something has been played)."""
    try:
        tracks = await service.recommended(limit)
    except UpstreamError as e:
        raise _upstream_failure("Failed to fetch recommended songs", e) from e
    return SongListResponse.from_tracks(tracks)


@router.get("/search", response_model=SongListResponse)
async def search_songs(
    q: str | None = Query(None, description="Search query (required)"),
    limit: int = Query(25, ge=1, le=MAX_LIMIT, description="Maximum results"),
    country: str | None = Query(None, description="Storefront country code"),
    service: SongService = Depends(get_song_service),
) -> SongListResponse:
    """Search cached and provider tracks, deduplicated.

    A missing or blank q is a 400 "Search query is required" raised by the service,
    so no upstream request is made for it.
    """
    try:
        tracks = await service.search(q, limit=limit, country=country)
    except UpstreamError as e:
        raise _upstream_failure("Failed to search songs", e) from e
    return SongListResponse.from_tracks(tracks)


@router.post("/order", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def order_song(
    body: OrderRequest,
    service: SongService = Depends(get_song_service),
) -> OrderResponse:
    """Validate the song against the provider and acknowledge the order."""
    try:
        order = await service.order(
            track_id=body.track_id,
            song_id=body.song_id,
            user_id=str(body.user_id) if body.user_id is not None else None,
            country=body.country,
        )
    except UpstreamError as e:
        raise _upstream_failure("Failed to create order", e) from e

    return OrderResponse(
        message="Order created successfully",
        order=OrderSchema.from_order(order),
    )


@router.get("/{song_id}", response_model=SongResponse)
async def get_song(
    song_id: str,
    track_id: str | None = Query(None, alias="trackId", description="Provider track ID"),
    country: str | None = Query(None, description="Storefront country code"),
    service: SongService = Depends(get_song_service),
) -> SongResponse:
    """Look a song up by provider id (?trackId= overrides the path id)."""
    try:
        track = await service.get_song(track_id or song_id, country)
    except UpstreamError as e:
        raise _upstream_failure("Failed to fetch song", e) from e
    return SongResponse(song=SongSchema.from_track(track))


@router.post("/{song_id}/play", response_model=PlayResponse)
async def play_song(
    song_id: str,
    track_id: str | None = Query(None, alias="trackId", description="Provider track ID"),
    country: str | None = Query(None, description="Storefront country code"),
    service: SongService = Depends(get_song_service),
) -> PlayResponse:
    """Register a play; the count is only tracked when a cache is configured."""
    try:
        result = await service.play(track_id or song_id, country)
    except UpstreamError as e:
        raise _upstream_failure("Failed to track play", e) from e

    return PlayResponse(
        message="Play tracked successfully",
        song=SongSchema.from_track(result.song),
        play_count=result.play_count,
    )
