"""Shared HTTP client pool for connection reuse across providers.

Hey future me - this is the CENTRAL http client for outbound provider calls! Instead of
creating a new httpx.AsyncClient per request (wastes TCP connections, ignores keep-alive),
the app lifespan creates ONE pool, hands its client to the provider and closes it at
shutdown. The pool lives on app.state - there is no class-level singleton, so tests can
build as many independent pools as they like.

Usage:
    pool = HttpClientPool(timeout=10.0, user_agent="Riffus-Music-App/1.0")
    client = await pool.get_client()
    response = await client.get("https://itunes.apple.com/search", params=...)
    ...
    await pool.close()
"""

import asyncio
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class HttpClientPool:
    """Lazily created, shared httpx.AsyncClient.

    Features:
    - Lazy initialization (created on first use)
    - Guarded by an asyncio.Lock
    - Configurable limits (connections, timeouts)
    - Proper cleanup at shutdown
    """

    # If a provider starts answering 429, LOWER max_connections. If requests are slow, RAISE it.
    DEFAULT_TIMEOUT = 10.0
    DEFAULT_MAX_KEEPALIVE = 20
    DEFAULT_MAX_CONNECTIONS = 50

    def __init__(
        self,
        timeout: float | None = None,
        max_keepalive: int | None = None,
        max_connections: int | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize pool configuration (no client is created yet).

        Args:
            timeout: Request timeout in seconds (default: 10.0)
            max_keepalive: Max idle connections to keep open (default: 20)
            max_connections: Max total concurrent connections (default: 50)
            user_agent: User-Agent header sent with every request
            transport: Custom transport (tests pass httpx.MockTransport)
        """
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.max_keepalive = max_keepalive or self.DEFAULT_MAX_KEEPALIVE
        self.max_connections = max_connections or self.DEFAULT_MAX_CONNECTIONS
        self.user_agent = user_agent
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    async def get_client(self) -> httpx.AsyncClient:
        """Get the shared client, creating it on first call."""
        async with self._lock:
            if self._client is None:
                headers = {"Accept": "application/json"}
                if self.user_agent:
                    headers["User-Agent"] = self.user_agent

                client_kwargs: dict[str, Any] = {
                    "timeout": httpx.Timeout(self.timeout),
                    "headers": headers,
                    # Follow redirects automatically (common for CDNs)
                    "follow_redirects": True,
                }
                if self._transport is not None:
                    client_kwargs["transport"] = self._transport
                else:
                    client_kwargs["limits"] = httpx.Limits(
                        max_keepalive_connections=self.max_keepalive,
                        max_connections=self.max_connections,
                    )
                    # Enable HTTP/2 for APIs that support it (better multiplexing)
                    client_kwargs["http2"] = True

                self._client = httpx.AsyncClient(**client_kwargs)
                logger.info(
                    "HTTP client pool initialized (timeout=%.1fs, keepalive=%d, max_conn=%d)",
                    self.timeout,
                    self.max_keepalive,
                    self.max_connections,
                )

            return self._client

    async def close(self) -> None:
        """Close the client and release all connections.

        After close(), get_client() creates a fresh client.
        """
        async with self._lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None
                logger.info("HTTP client pool closed")

    def is_initialized(self) -> bool:
        """Check if the client has been created (used by /health)."""
        return self._client is not None
