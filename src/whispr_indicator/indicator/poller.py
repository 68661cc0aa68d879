"""Fixed-interval polling of the state documents.

This is the fallback ChangeSource used when the state directory cannot be
observed. It does not try to detect changes itself: every interval it reports
every watched document as changed and lets the loaders decide.
"""

from __future__ import annotations

import logging
import time

from .scheduler import RepeatingTimer, Scheduler
from .watcher import ChangeSource, NamesCallback

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_MS = 1000


class PollingChangeSource(ChangeSource):
    """Reports all watched documents on every tick of a repeating timer."""

    def __init__(
        self,
        scheduler: Scheduler,
        filenames: list[str],
        interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    ) -> None:
        """Initialize polling source.

        Args:
            scheduler: Scheduler driving the poll interval
            filenames: Final basenames of the documents to report
            interval_ms: Polling interval in milliseconds
        """
        self.scheduler = scheduler
        self.filenames = list(filenames)
        self.interval_ms = interval_ms
        self._on_names: NamesCallback | None = None
        self._timer = RepeatingTimer(scheduler, interval_ms, self._poll_cycle, "poll")

        # Performance metrics tracking
        self._poll_times: list[float] = []
        self._poll_count = 0
        self._metrics_log_interval = 60

    @property
    def running(self) -> bool:
        return self._timer.running

    def start(self, on_names: NamesCallback) -> None:
        if self._timer.running:
            logger.warning("PollingChangeSource already running")
            return
        self._on_names = on_names
        self._timer.start()
        logger.info(f"PollingChangeSource started with interval {self.interval_ms}ms")

    def stop(self) -> None:
        if not self._timer.running:
            return
        self._timer.stop()
        self._on_names = None
        logger.info("PollingChangeSource stopped")

    def _poll_cycle(self) -> None:
        if self._on_names is None:
            return

        start_time = time.perf_counter()
        self._on_names(tuple(self.filenames))
        self._poll_times.append((time.perf_counter() - start_time) * 1000)
        self._poll_count += 1

        if (
            logger.isEnabledFor(logging.DEBUG)
            and self._poll_count % self._metrics_log_interval == 0
            and self._poll_times
        ):
            logger.debug(
                "PollingChangeSource metrics",
                extra={
                    "extra_context": {
                        "poll_count": self._poll_count,
                        "max_poll_ms": round(max(self._poll_times), 2),
                        "avg_poll_ms": round(sum(self._poll_times) / len(self._poll_times), 2),
                    }
                },
            )
            self._poll_times.clear()
