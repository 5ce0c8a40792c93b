"""
Track Provider Interface for Riffus.

Hey future me - this is the SEAM between the app and every upstream catalog!
iTunes, Deezer and Spotify each implement TrackProvider; the song service and the
routers only ever talk to this interface. Which one runs is a configuration
decision (PROVIDER__NAME), not a matter of maintaining parallel controllers.

Implementation checklist for a new provider:
1. Subclass TrackProvider
2. Map raw API payloads to Track (NEVER leak raw JSON past the provider)
3. Send every HTTP call through the ResilientFetcher
4. Wrap the final failure in UpstreamError
5. Add it to build_provider() in infrastructure/providers/registry.py
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from riffus.domain.entities import ExternalId, Track


class ServiceType(str, Enum):
    """Supported upstream catalog services."""

    ITUNES = "itunes"
    DEEZER = "deezer"
    SPOTIFY = "spotify"


@dataclass(frozen=True)
class SearchOptions:
    """Per-request search options passed through to the provider."""

    limit: int = 25
    country: str = "us"


class TrackProvider(ABC):
    """Abstract base class for all upstream catalog providers."""

    @property
    @abstractmethod
    def service_type(self) -> ServiceType:
        """Return the service this provider talks to."""
        ...

    @abstractmethod
    async def search(self, query: str, options: SearchOptions) -> list[Track]:
        """Search the catalog for tracks.

        Args:
            query: Free-text search term (must not be blank)
            options: Limit and storefront country

        Returns:
            Normalized tracks in the provider's declared order

        Raises:
            ValidationError: If the query is blank
            UpstreamError: If the provider keeps failing after retries
        """
        ...

    @abstractmethod
    async def lookup(self, external_id: ExternalId, country: str = "us") -> Track | None:
        """Fetch a single track by provider id.

        Returns:
            The track, or None when the provider has no match

        Raises:
            UpstreamError: If the provider keeps failing after retries
        """
        ...

    @abstractmethod
    def parse_id(self, raw_id: str | None) -> ExternalId:
        """Parse a provider id coming from a URL or request body.

        Raises:
            ValidationError: If the id is missing or malformed for this provider
        """
        ...

    async def close(self) -> None:
        """Release provider resources (default: nothing to release)."""
        return None
