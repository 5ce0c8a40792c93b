"""
Provider selection for Riffus.

Hey future me - this is the ONE place that knows every concrete provider!
The app lifespan calls build_provider() once at startup and stores the result on
app.state; routers get it through dependency injection. No module-level singleton.
"""

import logging

import httpx

from riffus.config import Settings
from riffus.domain.exceptions import ConfigurationError
from riffus.domain.ports.provider import ServiceType, TrackProvider
from riffus.infrastructure.integrations.resilient_fetch import (
    ResilientFetcher,
    RetryPolicy,
)
from riffus.infrastructure.providers.deezer_provider import DeezerProvider
from riffus.infrastructure.providers.itunes_provider import ITunesProvider
from riffus.infrastructure.providers.spotify_provider import SpotifyProvider

logger = logging.getLogger(__name__)


def build_fetcher(settings: Settings) -> ResilientFetcher:
    """Create the retry wrapper from RETRY__* settings."""
    return ResilientFetcher(
        RetryPolicy(
            max_retries=settings.retry.max_retries,
            retry_delay_ms=settings.retry.retry_delay_ms,
            timeout_ms=settings.retry.timeout_ms,
        )
    )


def build_provider(
    settings: Settings,
    client: httpx.AsyncClient,
    fetcher: ResilientFetcher | None = None,
) -> TrackProvider:
    """Instantiate the provider named by PROVIDER__NAME.

    Args:
        settings: Application settings
        client: Shared HTTP client
        fetcher: Retry wrapper (built from settings when omitted)

    Returns:
        Configured provider

    Raises:
        ConfigurationError: Unknown provider or missing credentials
    """
    fetcher = fetcher or build_fetcher(settings)
    provider_settings = settings.provider

    try:
        service = ServiceType(provider_settings.name)
    except ValueError:
        raise ConfigurationError(
            f"Unknown provider '{provider_settings.name}'. "
            f"Use one of: {', '.join(s.value for s in ServiceType)}"
        ) from None

    provider: TrackProvider
    if service is ServiceType.ITUNES:
        provider = ITunesProvider(client, fetcher, base_url=provider_settings.base_url)
    elif service is ServiceType.DEEZER:
        provider = DeezerProvider(client, fetcher, base_url=provider_settings.base_url)
    else:
        provider = SpotifyProvider(
            client,
            client_id=provider_settings.spotify_client_id,
            client_secret=provider_settings.spotify_client_secret,
            fetcher=fetcher,
            base_url=provider_settings.base_url,
        )

    logger.info(
        "Using %s provider (retries=%d, delay=%dms, timeout=%dms)",
        service.value,
        settings.retry.max_retries,
        settings.retry.retry_delay_ms,
        settings.retry.timeout_ms,
    )
    return provider
