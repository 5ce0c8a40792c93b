"""Tests for the shared HTTP client pool."""

import httpx

from riffus.infrastructure.integrations import HttpClientPool


class TestHttpClientPool:
    """Lazy creation, reuse and cleanup."""

    async def test_client_is_created_lazily_and_reused(self) -> None:
        pool = HttpClientPool(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        assert not pool.is_initialized()

        first = await pool.get_client()
        second = await pool.get_client()

        assert first is second
        assert pool.is_initialized()
        await pool.close()

    async def test_user_agent_header_is_sent(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        pool = HttpClientPool(user_agent="Riffus-Test/1.0", transport=httpx.MockTransport(handler))
        client = await pool.get_client()

        await client.get("https://itunes.apple.com/search")

        assert seen[0].headers["User-Agent"] == "Riffus-Test/1.0"
        assert seen[0].headers["Accept"] == "application/json"
        await pool.close()

    async def test_close_resets_and_allows_new_client(self) -> None:
        pool = HttpClientPool(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        first = await pool.get_client()

        await pool.close()

        assert not pool.is_initialized()
        assert first.is_closed
        second = await pool.get_client()
        assert second is not first
        await pool.close()

    async def test_pools_are_independent(self) -> None:
        transport = httpx.MockTransport(lambda r: httpx.Response(200))
        a = HttpClientPool(transport=transport)
        b = HttpClientPool(transport=transport)

        assert await a.get_client() is not await b.get_client()
        await a.close()
        await b.close()

    def test_defaults(self) -> None:
        pool = HttpClientPool()

        assert pool.timeout == HttpClientPool.DEFAULT_TIMEOUT
        assert pool.max_connections == HttpClientPool.DEFAULT_MAX_CONNECTIONS
