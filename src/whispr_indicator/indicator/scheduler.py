"""Timer scheduling on the indicator's event loop.

Every delayed or periodic piece of work in the indicator (debounce, clock tick,
meter tick, flash expiry, click window, poll interval) goes through a Scheduler
so it can be cancelled on teardown and driven by virtual time in tests.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    """Handle returned by Scheduler.call_later."""

    def cancel(self) -> None: ...


class Scheduler(ABC):
    """Source of wall-clock time and one-shot callbacks."""

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> Cancellable:
        """Run callback once after delay_ms milliseconds."""

    @abstractmethod
    def now_ms(self) -> int:
        """Current wall-clock time as epoch milliseconds."""


class LoopScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self.loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> Cancellable:
        return self.loop.call_later(max(delay_ms, 0) / 1000, callback)

    def now_ms(self) -> int:
        # Epoch time, not loop.time(): the writer stamps documents with epoch ms
        return int(time.time() * 1000)


class OneShotTimer:
    """A named, re-armable one-shot timer.

    Arming an armed timer replaces the pending callback, which is what gives
    debounce its "fire once after the burst quiets" behaviour.
    """

    def __init__(self, scheduler: Scheduler, name: str) -> None:
        self.scheduler = scheduler
        self.name = name
        self._handle: Cancellable | None = None

    @property
    def active(self) -> bool:
        return self._handle is not None

    def arm(self, delay_ms: int, callback: Callable[[], None]) -> None:
        """(Re)arm the timer, cancelling any pending callback."""
        self.cancel()

        def _fire() -> None:
            self._handle = None
            callback()

        self._handle = self.scheduler.call_later(delay_ms, _fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class RepeatingTimer:
    """Fixed-interval timer that keeps firing until stopped."""

    def __init__(
        self,
        scheduler: Scheduler,
        interval_ms: int,
        callback: Callable[[], None],
        name: str,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self.scheduler = scheduler
        self.interval_ms = interval_ms
        self.callback = callback
        self.name = name
        self._handle: Cancellable | None = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        """Start ticking. A running timer is left untouched."""
        if self._handle is not None:
            return
        logger.debug(f"Timer {self.name} started ({self.interval_ms}ms)")
        self._schedule()

    def stop(self) -> None:
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        logger.debug(f"Timer {self.name} stopped")

    def _schedule(self) -> None:
        self._handle = self.scheduler.call_later(self.interval_ms, self._fire)

    def _fire(self) -> None:
        # Schedule the next tick first so a callback calling stop() cancels it
        self._schedule()
        self.callback()
