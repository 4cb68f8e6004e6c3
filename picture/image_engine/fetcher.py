"""Asynchronous HTTP fetcher for remote images.

``HttpFetcher`` wraps an ``httpx.AsyncClient``. Transport failures and
non-success statuses surface as ``httpx.HTTPError`` subclasses; callers
(``ImageSource.resolve``) wrap them into ``FetchFailed``.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from picture.logger import get_logger

_logger = get_logger("fetcher")

DEFAULT_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class FetchResult:
    url: str
    content: bytes
    status_code: int
    content_type: str | None = None


class HttpFetcher:
    """Fetch image payloads over HTTP(S).

    When no client is injected the fetcher creates one lazily and owns it,
    closing it in ``aclose``. An injected client stays owned by the caller.
    """

    def __init__(
        self,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        headers: dict[str, str] | None = None,
        follow_redirects: bool = True,
        client: httpx.AsyncClient | None = None,
    ):
        self._timeout = httpx.Timeout(timeout_s)
        self._headers = dict(headers or {})
        self._follow_redirects = follow_redirects
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=self._headers,
                follow_redirects=self._follow_redirects,
            )
        return self._client

    async def fetch(self, url: str) -> FetchResult:
        client = self._get_client()
        _logger.debug("fetch start: url=%s", url)
        response = await client.get(url, headers=self._headers or None)
        response.raise_for_status()
        result = FetchResult(
            url=str(response.url),
            content=response.content,
            status_code=response.status_code,
            content_type=response.headers.get("content-type"),
        )
        _logger.debug(
            "fetch done: url=%s status=%s bytes=%s type=%s",
            url,
            result.status_code,
            len(result.content),
            result.content_type,
        )
        return result

    async def __call__(self, url: str) -> FetchResult:
        return await self.fetch(url)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpFetcher:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
