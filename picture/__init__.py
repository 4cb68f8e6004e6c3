"""Asynchronous image loading with an in-memory URL cache."""

from .image_engine import (
    FetchFailed,
    ImageCache,
    ImageEngine,
    ImageSource,
    LoadError,
    Local,
    Remote,
    cached,
)

__all__ = [
    "FetchFailed",
    "ImageCache",
    "ImageEngine",
    "ImageSource",
    "LoadError",
    "Local",
    "Remote",
    "cached",
]
