"""Image Engine - image loading and caching core.

This package provides:
- In-memory image cache keyed by URL (cache)
- Local/remote image sources with resolve/cached (source)
- HTTP fetching (fetcher) and pyvips decoding (decoder)
- Wiring of the above (engine) and Qt-facing loaders (loader)

Usage:
    from picture.image_engine import ImageEngine, ImageSource

    async with ImageEngine() as engine:
        image = await engine.resolve(ImageSource.remote(url))
"""

from .cache import ImageCache
from .engine import ImageEngine
from .errors import FetchFailed, LoadError
from .fetcher import FetchResult, HttpFetcher
from .source import ImageSource, Local, Remote, cached

__all__ = [
    "FetchFailed",
    "FetchResult",
    "HttpFetcher",
    "ImageCache",
    "ImageEngine",
    "ImageSource",
    "LoadError",
    "Local",
    "Remote",
    "cached",
]
