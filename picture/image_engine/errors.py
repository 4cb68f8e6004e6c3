"""Failures surfaced by ``ImageSource.resolve``.

Only transport failures are errors. A payload that does not decode is
reported as an absent image instead.
"""


class LoadError(Exception):
    """Base class for image loading failures."""


class FetchFailed(LoadError):
    """Fetching a remote image failed; the transport error is ``__cause__``."""

    def __init__(self, url: str, message: str | None = None):
        self.url = url
        super().__init__(message or f"fetch failed: {url}")
