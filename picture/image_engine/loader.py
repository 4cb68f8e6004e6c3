"""Loaders that feed resolved images to a UI layer.

Each loader owns at most one in-flight asyncio task. Calling ``load`` again
cancels the previous task first, and a superseded task never publishes its
result. Results are delivered through Qt signals so widgets/QML can bind to
them. Destroying a loader (or its Qt parent) cancels its task. ``load`` must
be called with a running asyncio event loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import shiboken6
from PySide6.QtCore import QObject, Signal

from picture.logger import get_logger

from .engine import ImageEngine
from .errors import LoadError
from .source import ImageSource

_logger = get_logger("loader")


@dataclass
class PictureData:
    source: ImageSource
    image: Any | None = None


class _TaskHolder:
    """Current task of a loader, reachable without its QObject."""

    def __init__(self) -> None:
        self.task: asyncio.Task | None = None

    def cancel(self) -> None:
        task, self.task = self.task, None
        if task is not None and not task.done():
            _logger.debug("cancel in-flight task")
            task.cancel()


class _TaskOwner(QObject):
    def __init__(self, engine: ImageEngine, parent: QObject | None = None):
        super().__init__(parent)
        self._engine = engine
        self._holder = _TaskHolder()
        # The C++ object is half torn down when destroyed fires; only the holder is safe to use
        holder = self._holder
        self.destroyed.connect(lambda *_: holder.cancel())

    @property
    def task(self) -> asyncio.Task | None:
        return self._holder.task

    def _is_current(self) -> bool:
        task = self._holder.task
        return task is not None and task is asyncio.current_task() and shiboken6.isValid(self)

    def _start(self, coro) -> asyncio.Task:
        self._holder.cancel()
        loop = asyncio.get_running_loop()
        self._holder.task = loop.create_task(coro)
        return self._holder.task

    def cancel(self) -> None:
        self._holder.cancel()


class PictureLoader(_TaskOwner):
    """Load a single image source.

    Signals:
        image_loaded: Emitted with the image (or None when it did not decode)
        load_failed: Emitted with the error message when the fetch fails
        loading_changed: Emitted when the loading flag flips
    """

    image_loaded = Signal(object)
    load_failed = Signal(str)
    loading_changed = Signal(bool)

    def __init__(
        self,
        source: ImageSource,
        engine: ImageEngine,
        *,
        prefer_cache: bool = False,
        parent: QObject | None = None,
    ):
        super().__init__(engine, parent)
        self.source = source
        self.prefer_cache = prefer_cache
        self._image: Any | None = None
        self._is_loading = False
        self._loading_error: LoadError | None = None

    @property
    def image(self) -> Any | None:
        return self._image

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def loading_error(self) -> LoadError | None:
        return self._loading_error

    def _set_loading(self, value: bool) -> None:
        if self._is_loading != value:
            self._is_loading = value
            self.loading_changed.emit(value)

    def load(self) -> asyncio.Task:
        source = self._engine.cached(self.source) if self.prefer_cache else self.source
        task = self._start(self._run(source))
        self._set_loading(True)
        return task

    def cancel(self) -> None:
        super().cancel()
        self._set_loading(False)

    async def _run(self, source: ImageSource) -> None:
        try:
            try:
                image = await self._engine.resolve(source)
            except LoadError as e:
                if not self._is_current():
                    return
                _logger.error("image load failed: %s", e)
                self._loading_error = e
                self._set_loading(False)
                self.load_failed.emit(str(e))
                return
            if not self._is_current():
                _logger.debug("dropping stale result for %s", source)
                return
            self._image = image
            self._loading_error = None
            self._set_loading(False)
            self.image_loaded.emit(image)
        finally:
            if self._is_current():
                self._set_loading(False)


class GalleryLoader(_TaskOwner):
    """Load the leading images of a gallery one after another.

    Only the first ``preview_limit`` sources are resolved; failures are logged
    and skipped so one broken URL does not hide the rest.

    Signals:
        image_appended: Emitted with (source index, image) per loaded image
        load_failed: Emitted with (source index, message) per fetch failure
        finished: Emitted once the preview sources have been processed
    """

    image_appended = Signal(int, object)
    load_failed = Signal(int, str)
    finished = Signal()

    def __init__(
        self,
        sources: Sequence[ImageSource],
        engine: ImageEngine,
        *,
        preview_limit: int | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(engine, parent)
        self.sources: list[ImageSource] = list(sources)
        if preview_limit is None:
            preview_limit = engine.settings.gallery_preview_limit
        self.preview_limit = max(0, int(preview_limit))
        self._loaded: dict[int, Any] = {}

    @property
    def images(self) -> list[Any]:
        return [self._loaded[i] for i in sorted(self._loaded)]

    def items(self) -> list[PictureData]:
        return [PictureData(source, self._loaded.get(i)) for i, source in enumerate(self.sources)]

    def fullscreen_sources(self) -> list[ImageSource]:
        """Sources for a fullscreen view, preferring images already cached."""
        return [self._engine.cached(source) for source in self.sources]

    def load(self) -> asyncio.Task:
        task = self._start(self._run())
        self._loaded = {}
        return task

    async def _run(self) -> None:
        for index, source in enumerate(self.sources[: self.preview_limit]):
            try:
                image = await self._engine.resolve(source)
            except LoadError as e:
                if not self._is_current():
                    return
                _logger.error("gallery image %s failed: %s", index, e)
                self.load_failed.emit(index, str(e))
                continue
            if not self._is_current():
                return
            if image is None:
                continue
            self._loaded[index] = image
            self.image_appended.emit(index, image)
        if self._is_current():
            self.finished.emit()
