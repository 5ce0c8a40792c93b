"""Domain ports (interfaces) for dependency inversion."""

from riffus.domain.ports.provider import SearchOptions, ServiceType, TrackProvider
from riffus.domain.ports.track_cache import TrackCache

__all__ = [
    "SearchOptions",
    "ServiceType",
    "TrackCache",
    "TrackProvider",
]
