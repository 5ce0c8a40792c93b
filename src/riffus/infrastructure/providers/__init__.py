"""Upstream catalog provider implementations."""

from riffus.infrastructure.providers.deezer_provider import DeezerProvider
from riffus.infrastructure.providers.itunes_provider import ITunesProvider
from riffus.infrastructure.providers.registry import build_fetcher, build_provider
from riffus.infrastructure.providers.spotify_provider import SpotifyProvider

__all__ = [
    "DeezerProvider",
    "ITunesProvider",
    "SpotifyProvider",
    "build_fetcher",
    "build_provider",
]
