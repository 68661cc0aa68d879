"""Single vs. double click disambiguation for the primary button."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .models import PendingClick
from .scheduler import OneShotTimer, Scheduler

logger = logging.getLogger(__name__)

DOUBLE_CLICK_MS = 220


class ClickDisambiguator:
    """Delays a single click until the double-click window has passed.

    A lone press runs on_single once the window elapses; a second press inside
    the window cancels it and runs on_double instead. Nothing is held once idle.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_single: Callable[[], None],
        on_double: Callable[[], None],
        window_ms: int = DOUBLE_CLICK_MS,
    ) -> None:
        self.scheduler = scheduler
        self.on_single = on_single
        self.on_double = on_double
        self.window_ms = window_ms
        self.pending: PendingClick | None = None
        self._timer = OneShotTimer(scheduler, "click")

    def press(self) -> None:
        """Handle a primary button press."""
        if self.pending is not None:
            self.cancel()
            logger.debug("Double click")
            self.on_double()
            return

        self.pending = PendingClick(armed_at_ms=self.scheduler.now_ms())
        self._timer.arm(self.window_ms, self._expire)

    def cancel(self) -> None:
        self._timer.cancel()
        self.pending = None

    def _expire(self) -> None:
        self.pending = None
        logger.debug("Single click")
        self.on_single()
