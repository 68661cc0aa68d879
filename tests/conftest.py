"""Shared fixtures: a virtual-time scheduler and a controllable change source."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import pytest

from whispr_indicator.indicator.exceptions import WatchError
from whispr_indicator.indicator.scheduler import Scheduler
from whispr_indicator.indicator.watcher import ChangeSource

START_MS = 1_700_000_000_000


class FakeHandle:
    """Handle for a callback queued on FakeScheduler."""

    def __init__(self, due_ms: int, seq: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler(Scheduler):
    """Scheduler running on virtual time advanced explicitly by tests."""

    def __init__(self, start_ms: int = START_MS) -> None:
        self.now = start_ms
        self._handles: list[FakeHandle] = []
        self._seq = 0

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> FakeHandle:
        self._seq += 1
        handle = FakeHandle(self.now + max(delay_ms, 0), self._seq, callback)
        self._handles.append(handle)
        return handle

    def now_ms(self) -> int:
        return self.now

    @property
    def pending(self) -> int:
        """Number of queued callbacks that have not been cancelled."""
        return sum(1 for handle in self._handles if not handle.cancelled)

    def advance(self, ms: int) -> None:
        """Move time forward, running due callbacks in order."""
        target = self.now + ms
        while True:
            due = [h for h in self._handles if not h.cancelled and h.due_ms <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.due_ms, h.seq))
            self._handles.remove(handle)
            self.now = handle.due_ms
            handle.callback()
        self._handles = [h for h in self._handles if not h.cancelled]
        self.now = target


class FakeSource(ChangeSource):
    """Change source whose notifications are emitted by the test."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.on_names: Callable[[Iterable[str]], None] | None = None
        self.started = False
        self.stopped = False

    def start(self, on_names: Callable[[Iterable[str]], None]) -> None:
        if self.fail:
            raise WatchError("inotify unavailable")
        self.on_names = on_names
        self.started = True

    def stop(self) -> None:
        self.stopped = True
        self.on_names = None

    def emit(self, *names: str) -> None:
        assert self.on_names is not None, "source not started"
        self.on_names(names)


@pytest.fixture
def scheduler() -> FakeScheduler:
    """Virtual-time scheduler starting at a fixed epoch."""
    return FakeScheduler()
