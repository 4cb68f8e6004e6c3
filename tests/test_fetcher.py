from __future__ import annotations

import asyncio

import httpx
import pytest

from picture.image_engine.cache import ImageCache
from picture.image_engine.errors import FetchFailed
from picture.image_engine.fetcher import FetchResult, HttpFetcher
from picture.image_engine.source import Remote

URL = "https://images.example.com/cat.png"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_fetch_returns_body_and_status():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"\x89PNG...", headers={"content-type": "image/png"})

    async def main():
        async with _client(handler) as client:
            fetcher = HttpFetcher(client=client, headers={"User-Agent": "picture-tests"})
            return await fetcher.fetch(URL)

    result = asyncio.run(main())

    assert isinstance(result, FetchResult)
    assert result.content == b"\x89PNG..."
    assert result.status_code == 200
    assert result.content_type == "image/png"
    assert seen[0].headers["User-Agent"] == "picture-tests"


def test_fetch_raises_on_error_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, content=b"missing")

    async def main():
        async with _client(handler) as client:
            await HttpFetcher(client=client).fetch(URL)

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(main())


def test_resolve_wraps_status_error_in_fetch_failed():
    cache = ImageCache()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    async def main():
        async with _client(handler) as client:
            await Remote(URL).resolve(cache, HttpFetcher(client=client), lambda data: object())

    with pytest.raises(FetchFailed) as exc:
        asyncio.run(main())

    assert isinstance(exc.value.__cause__, httpx.HTTPStatusError)
    assert cache.get(URL) is None


def test_resolve_wraps_transport_error_in_fetch_failed():
    cache = ImageCache()

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def main():
        async with _client(handler) as client:
            await Remote(URL).resolve(cache, HttpFetcher(client=client), lambda data: object())

    with pytest.raises(FetchFailed) as exc:
        asyncio.run(main())

    assert isinstance(exc.value.__cause__, httpx.ConnectError)
    assert cache.get(URL) is None


def test_resolve_through_http_fetcher_caches_decoded_image():
    cache = ImageCache()
    sentinel = object()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"img")

    async def main():
        async with _client(handler) as client:
            return await Remote(URL).resolve(cache, HttpFetcher(client=client), lambda data: sentinel)

    assert asyncio.run(main()) is sentinel
    assert cache.get(URL) is sentinel


def test_aclose_leaves_injected_client_open():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"ok")

    async def main():
        client = _client(handler)
        fetcher = HttpFetcher(client=client)
        await fetcher.aclose()
        assert not client.is_closed
        await client.aclose()

    asyncio.run(main())


def test_owned_client_is_created_lazily_and_closed():
    async def main():
        fetcher = HttpFetcher(timeout_s=5.0)
        assert fetcher._client is None
        client = fetcher._get_client()
        await fetcher.aclose()
        assert client.is_closed
        assert fetcher._client is None

    asyncio.run(main())
