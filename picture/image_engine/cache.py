"""ImageCache: in-memory memo of decoded images keyed by origin URL.

The cache never evicts; entries only disappear through an explicit
``set(url, None)``. Bounding, if wanted, belongs in a wrapper.
"""

from __future__ import annotations

import threading
from typing import Any

from picture.logger import get_logger

_logger = get_logger("cache")


class ImageCache:
    """Thread-safe ``url -> image`` mapping guarded by a single lock."""

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}
        self._lock = threading.Lock()

    @classmethod
    def new(cls) -> ImageCache:
        return cls()

    def get(self, url: str) -> Any | None:
        """Return the cached image for ``url`` or None."""
        with self._lock:
            return self._entries.get(url)

    def set(self, url: str, value: Any | None) -> None:
        """Insert or overwrite ``url``; a None value removes the entry."""
        with self._lock:
            if value is None:
                removed = self._entries.pop(url, None) is not None
            else:
                self._entries[url] = value
                removed = False
        if removed:
            _logger.debug("cache remove: url=%s", url)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
