"""Change detection for the shared state directory.

The recorder writes each document atomically (name.tmp, then rename to name),
so one notification may mention the temp name, the final name or both. The
watcher maps every reported basename back to its logical document, coalesces
bursts with one debounce timer per document, and falls back to fixed-interval
polling for the rest of the process lifetime if the directory cannot be
observed.
"""

from __future__ import annotations

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .exceptions import WatchError
from .models import ChangeEvent
from .scheduler import OneShotTimer, Scheduler

logger = logging.getLogger(__name__)

NamesCallback = Callable[[Iterable[str]], None]

# Event types that mean a document's content may have changed
CONTENT_EVENT_TYPES = frozenset(
    {
        EVENT_TYPE_CREATED,
        EVENT_TYPE_MODIFIED,
        EVENT_TYPE_MOVED,
        EVENT_TYPE_DELETED,
        EVENT_TYPE_CLOSED,
    }
)


class ChangeSource(ABC):
    """Something that reports basenames of changed files in the state directory."""

    @abstractmethod
    def start(self, on_names: NamesCallback) -> None:
        """Begin reporting changes.

        Raises:
            WatchError: If the source cannot be established
        """

    @abstractmethod
    def stop(self) -> None:
        """Stop reporting changes and release all resources."""


class _ForwardingHandler(FileSystemEventHandler):
    """watchdog handler that hands basenames over to the event loop thread."""

    def __init__(self, source: DirectoryChangeSource) -> None:
        super().__init__()
        self.source = source

    def on_any_event(self, event: FileSystemEvent) -> None:
        # Opens and read-only closes, our own reloads included, never change content
        if event.is_directory or event.event_type not in CONTENT_EVENT_TYPES:
            return
        names = [os.path.basename(os.fsdecode(event.src_path))]
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            names.append(os.path.basename(os.fsdecode(dest_path)))
        self.source.post(names)


class DirectoryChangeSource(ChangeSource):
    """Observes the state directory with watchdog.

    The observer runs on its own thread; every event is posted to the asyncio
    loop with call_soon_threadsafe so that handling stays single-threaded.
    """

    def __init__(
        self,
        directory: Path,
        loop: asyncio.AbstractEventLoop,
        join_timeout: float = 1.0,
    ) -> None:
        self.directory = directory
        self.loop = loop
        self.join_timeout = join_timeout
        self._observer: Observer | None = None
        self._on_names: NamesCallback | None = None

    def start(self, on_names: NamesCallback) -> None:
        if self._observer is not None:
            logger.warning("DirectoryChangeSource already running")
            return

        observer = Observer()
        try:
            observer.schedule(_ForwardingHandler(self), str(self.directory), recursive=False)
            observer.start()
        except (OSError, RuntimeError) as err:
            raise WatchError(f"Cannot watch {self.directory}: {err}") from err

        self._on_names = on_names
        self._observer = observer
        logger.info(f"Watching {self.directory} for state changes")

    def post(self, names: list[str]) -> None:
        """Forward names from the observer thread to the loop."""
        try:
            self.loop.call_soon_threadsafe(self._dispatch, tuple(names))
        except RuntimeError:
            # Loop already closed during teardown
            pass

    def _dispatch(self, names: tuple[str, ...]) -> None:
        if self._on_names is not None:
            self._on_names(names)

    def stop(self) -> None:
        self._on_names = None
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=self.join_timeout)
        if self._observer.is_alive():
            logger.warning("Directory observer thread did not stop within timeout")
        self._observer = None
        logger.info("Directory watch detached")


@dataclass(frozen=True)
class WatchedDocument:
    """A logical document and the names under which its changes show up."""

    key: str
    filename: str
    tmp_filename: str
    debounce_ms: int
    on_reload: Callable[[ChangeEvent], None]

    def matches(self, names: Iterable[str]) -> bool:
        return any(name in (self.filename, self.tmp_filename) for name in names)


class Debouncer:
    """Collapses a burst of triggers into a single callback."""

    def __init__(
        self,
        scheduler: Scheduler,
        key: str,
        delay_ms: int,
        callback: Callable[[ChangeEvent], None],
    ) -> None:
        self.key = key
        self.delay_ms = delay_ms
        self.callback = callback
        self._timer = OneShotTimer(scheduler, f"debounce:{key}")
        self._names: set[str] = set()

    @property
    def pending(self) -> bool:
        return self._timer.active

    def trigger(self, names: Iterable[str]) -> None:
        """Record the names and (re)arm the timer."""
        self._names.update(names)
        self._timer.arm(self.delay_ms, self._flush)

    def cancel(self) -> None:
        self._timer.cancel()
        self._names.clear()

    def _flush(self) -> None:
        event = ChangeEvent(key=self.key, names=tuple(sorted(self._names)))
        self._names.clear()
        self.callback(event)


class ChangeWatcher:
    """Turns raw change notifications into one reload per logical document."""

    def __init__(
        self,
        documents: list[WatchedDocument],
        scheduler: Scheduler,
        source_factory: Callable[[], ChangeSource] | None,
        fallback_factory: Callable[[], ChangeSource],
    ) -> None:
        """Initialize change watcher.

        Args:
            documents: Documents to watch, each with its own debounce delay
            scheduler: Scheduler for the debounce timers
            source_factory: Builds the notification-based source, or None to poll
            fallback_factory: Builds the polling source used if watching fails
        """
        self.documents = documents
        self.scheduler = scheduler
        self.source_factory = source_factory
        self.fallback_factory = fallback_factory
        self._debouncers = {
            doc.key: Debouncer(scheduler, doc.key, doc.debounce_ms, doc.on_reload)
            for doc in documents
        }
        self._source: ChangeSource | None = None
        self.mode = "stopped"

    def start(self) -> None:
        """Establish the directory watch, degrading to polling on failure."""
        if self._source is not None:
            logger.warning("ChangeWatcher already running")
            return

        if self.source_factory is not None:
            source = self.source_factory()
            try:
                source.start(self._on_names)
            except (WatchError, OSError) as err:
                logger.warning(
                    "Directory watch unavailable, falling back to polling",
                    extra={"extra_context": {"error": str(err)}},
                )
            else:
                self._source = source
                self.mode = "watch"
                return

        source = self.fallback_factory()
        source.start(self._on_names)
        self._source = source
        self.mode = "poll"

    def stop(self) -> None:
        """Cancel pending reloads and detach the active source."""
        for debouncer in self._debouncers.values():
            debouncer.cancel()
        if self._source is not None:
            self._source.stop()
            self._source = None
        self.mode = "stopped"

    def _on_names(self, names: Iterable[str]) -> None:
        names = tuple(names)
        for doc in self.documents:
            if doc.matches(names):
                self._debouncers[doc.key].trigger(names)
