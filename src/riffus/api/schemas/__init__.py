"""Pydantic request/response models for the HTTP API."""

from riffus.api.schemas.songs import (
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

__all__ = [
    "BrowseResponse",
    "OrderRequest",
    "OrderResponse",
    "OrderSchema",
    "Pagination",
    "PlayResponse",
    "SongListResponse",
    "SongResponse",
    "SongSchema",
]
