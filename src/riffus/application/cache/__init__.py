"""Application-level cache implementations."""

from riffus.application.cache.track_cache import CacheEntry, InMemoryTrackCache

__all__ = ["CacheEntry", "InMemoryTrackCache"]
