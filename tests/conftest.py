"""Shared fixtures for the Riffus test suite."""

from collections.abc import AsyncGenerator, Callable

import httpx
import pytest

from riffus.config import Settings
from riffus.infrastructure.integrations import ResilientFetcher, RetryPolicy


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        environment="test",
        retry={"max_retries": 3, "retry_delay_ms": 0, "timeout_ms": 2000},
    )


@pytest.fixture
def fast_fetcher() -> ResilientFetcher:
    """Retry wrapper with the default attempt count but no backoff sleeping."""
    return ResilientFetcher(RetryPolicy(max_retries=3, retry_delay_ms=0, timeout_ms=2000))


@pytest.fixture
async def mock_client() -> AsyncGenerator[
    Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient], None
]:
    """Factory for AsyncClients whose requests are answered by a handler function."""
    clients: list[httpx.AsyncClient] = []

    def _build(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _build

    for client in clients:
        await client.aclose()
