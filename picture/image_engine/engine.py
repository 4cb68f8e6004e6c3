"""Image Engine - wiring point for the image loading core.

ImageEngine owns one cache, one fetcher and one decoder and is the only
place where defaults for them are constructed. Everything below it takes
its collaborators explicitly.
"""

from __future__ import annotations

from typing import Any

from picture.logger import get_logger
from picture.settings_manager import SettingsManager

from .cache import ImageCache
from .decoder import decode_image
from .fetcher import HttpFetcher
from .source import DecodeFn, FetchFn, ImageSource, cached

_logger = get_logger("engine")


class ImageEngine:
    """Resolve image sources against a shared cache.

    Usage:
        async with ImageEngine() as engine:
            source = engine.cached(ImageSource.remote(url))
            image = await engine.resolve(source)
    """

    def __init__(
        self,
        cache: ImageCache | None = None,
        fetcher: FetchFn | None = None,
        decode: DecodeFn = decode_image,
        settings: SettingsManager | None = None,
    ):
        self.settings = settings or SettingsManager()
        self._cache = cache if cache is not None else ImageCache()
        self._owns_fetcher = fetcher is None
        if fetcher is None:
            fetcher = HttpFetcher(
                timeout_s=self.settings.fetch_timeout_s,
                headers=self.settings.request_headers,
                follow_redirects=self.settings.follow_redirects,
            )
        self._fetch = fetcher
        self._decode = decode
        _logger.debug(
            "ImageEngine initialized: fetcher=%s owned=%s",
            type(fetcher).__name__,
            self._owns_fetcher,
        )

    @classmethod
    def from_settings(cls, settings: SettingsManager) -> ImageEngine:
        return cls(settings=settings)

    @property
    def cache(self) -> ImageCache:
        return self._cache

    async def resolve(self, source: ImageSource) -> Any | None:
        return await source.resolve(self._cache, self._fetch, self._decode)

    def cached(self, source: ImageSource) -> ImageSource:
        return cached(source, self._cache)

    async def aclose(self) -> None:
        if self._owns_fetcher and isinstance(self._fetch, HttpFetcher):
            await self._fetch.aclose()

    async def __aenter__(self) -> ImageEngine:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
