"""Shared plumbing for HTTP-backed track providers."""

import logging
from typing import Any

import httpx

from riffus.domain.exceptions import UpstreamError, ValidationError
from riffus.domain.ports.provider import TrackProvider
from riffus.infrastructure.integrations.resilient_fetch import ResilientFetcher

logger = logging.getLogger(__name__)


class HttpTrackProvider(TrackProvider):
    """Base class for providers reached over HTTP.

    Hey future me - ALL provider HTTP calls go through _get_json()! It runs the
    request inside the ResilientFetcher (raise_for_status happens INSIDE the attempt,
    so a 503 gets retried like a connection reset) and wraps whatever survives the
    last attempt in UpstreamError with the original chained as __cause__.
    """

    API_BASE_URL: str = ""

    def __init__(
        self,
        client: httpx.AsyncClient,
        fetcher: ResilientFetcher | None = None,
        base_url: str | None = None,
    ) -> None:
        """Initialize provider.

        Args:
            client: Shared AsyncClient (from HttpClientPool)
            fetcher: Retry wrapper (defaults to the standard policy)
            base_url: Override the API base URL (tests, proxies)
        """
        self._client = client
        self._fetcher = fetcher or ResilientFetcher()
        self.base_url = (base_url or self.API_BASE_URL).rstrip("/")

    @staticmethod
    def _require_query(query: str | None) -> str:
        if not query or not query.strip():
            raise ValidationError("Search query is required")
        return query.strip()

    async def _request_headers(self) -> dict[str, str]:
        """Extra headers per request (Spotify adds its bearer token here)."""
        return {}

    async def _get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        action: str = "request",
        allow_not_found: bool = False,
    ) -> Any:
        """GET a JSON document through the retry wrapper.

        Args:
            path: Path below base_url (e.g. "/search")
            params: Query parameters
            action: Short description used in logs and error messages
            allow_not_found: Return None on HTTP 404 instead of failing

        Returns:
            Decoded JSON body, or None for an allowed 404

        Raises:
            UpstreamError: When every attempt failed
        """
        url = f"{self.base_url}{path}"
        name = f"{self.service_type.value} {action}"

        async def attempt() -> Any:
            headers = await self._request_headers()
            response = await self._client.get(url, params=params, headers=headers)
            if allow_not_found and response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()

        try:
            return await self._fetcher.run(attempt, name=name)
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"Failed to {action} on {self.service_type.value}: "
                f"HTTP {e.response.status_code}",
                provider=self.service_type.value,
            ) from e
        except (httpx.HTTPError, TimeoutError, ValueError) as e:
            raise UpstreamError(
                f"Failed to {action} on {self.service_type.value}: {str(e) or type(e).__name__}",
                provider=self.service_type.value,
            ) from e
