"""Image sources: an image already in memory, or a URL to fetch.

``ImageSource.local(image)`` and ``ImageSource.remote(url)`` build the two
variants. ``resolve`` produces the image (fetching and caching for remote
sources); ``cached`` swaps a remote source for its cached copy when one
exists. ``resolve`` itself never reads the cache.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from picture.logger import get_logger

from .cache import ImageCache
from .decoder import decode_image
from .errors import FetchFailed
from .fetcher import FetchResult
from .metrics import metrics

_logger = get_logger("source")

FetchFn = Callable[[str], Awaitable["bytes | FetchResult"]]
DecodeFn = Callable[[bytes], Any]


class ImageSource(ABC):
    """Either a ``Local`` image or a ``Remote`` URL. Values are immutable."""

    __slots__ = ()

    @staticmethod
    def local(image: Any) -> Local:
        return Local(image)

    @staticmethod
    def remote(url: str) -> Remote:
        return Remote(str(url))

    @staticmethod
    def cached(source: ImageSource, cache: ImageCache) -> ImageSource:
        return cached(source, cache)

    @property
    @abstractmethod
    def is_remote(self) -> bool: ...

    @abstractmethod
    async def resolve(
        self,
        cache: ImageCache | None = None,
        fetch: FetchFn | None = None,
        decode: DecodeFn = decode_image,
    ) -> Any | None: ...


@dataclass(frozen=True, eq=False)
class Local(ImageSource):
    """An image that is already decoded. Compared by identity."""

    image: Any

    @property
    def is_remote(self) -> bool:
        return False

    async def resolve(
        self,
        cache: ImageCache | None = None,
        fetch: FetchFn | None = None,
        decode: DecodeFn = decode_image,
    ) -> Any | None:
        return self.image


@dataclass(frozen=True)
class Remote(ImageSource):
    """An image identified by URL; resolving always fetches."""

    url: str

    @property
    def is_remote(self) -> bool:
        return True

    async def resolve(
        self,
        cache: ImageCache | None = None,
        fetch: FetchFn | None = None,
        decode: DecodeFn = decode_image,
    ) -> Any | None:
        """Fetch, decode and cache the image at ``url``.

        Raises:
            FetchFailed: the fetch raised; the cause is chained and the cache
                is left untouched.

        Returns None, without caching, when the payload does not decode.
        Cancellation during the fetch propagates and writes nothing.
        """
        if cache is None or fetch is None:
            raise TypeError("Remote.resolve requires a cache and a fetch callable")

        try:
            with metrics.timed("resolve.fetch_duration"):
                payload = await fetch(self.url)
        except Exception as e:
            metrics.inc("resolve.fetch_failed")
            _logger.debug("fetch failed: url=%s err=%s", self.url, e)
            raise FetchFailed(self.url, f"fetch failed: {self.url}: {e}") from e
        metrics.inc("resolve.fetch_ok")

        data = payload.content if isinstance(payload, FetchResult) else payload
        image = decode(data)
        if image is None:
            metrics.inc("resolve.decode_empty")
            _logger.debug("decode produced no image: url=%s bytes=%s", self.url, len(data or b""))
            return None

        cache.set(self.url, image)
        _logger.debug("resolved and cached: url=%s", self.url)
        return image


def cached(source: ImageSource, cache: ImageCache) -> ImageSource:
    """Return ``Local(hit)`` for a remote source with a cache hit, else ``source``."""
    if not isinstance(source, Remote):
        return source
    hit = cache.get(source.url)
    if hit is None:
        metrics.inc("cache.misses")
        return source
    metrics.inc("cache.hits")
    return Local(hit)
