"""The indicator component: wires change detection to the presentation.

IndicatorController owns every timer and the filesystem watch. start()
allocates them and stop() releases all of them before returning, so nothing
fires into torn-down visuals.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..utils import Config
from .actions import ActionInvoker
from .clicks import ClickDisambiguator
from .menu import MenuEntry, build_menu
from .meter import LevelAnimator
from .presentation import PresentationStateMachine
from .scheduler import Scheduler
from .state import (
    ChangeEvent,
    ChangeSource,
    ChangeWatcher,
    FreshnessGuard,
    PollingChangeSource,
    StateStore,
    VisualState,
    WatchedDocument,
)
from .store import tmp_filename

logger = logging.getLogger(__name__)


class IndicatorController:
    """Keeps the indicator in sync with the recorder's state documents."""

    def __init__(
        self,
        config: Config,
        scheduler: Scheduler,
        actions: ActionInvoker | None = None,
        source_factory: Callable[[], ChangeSource] | None = None,
    ) -> None:
        """Initialize the indicator.

        Args:
            config: Runtime configuration
            scheduler: Scheduler for every timer the indicator uses
            actions: Outbound action invoker (default: built from config)
            source_factory: Builds the directory watch source; None polls
        """
        self.config = config
        self.scheduler = scheduler
        self.store = StateStore(config.state_dir, config.recording_filename, config.tray_filename)
        self.actions = actions or ActionInvoker(config)

        self.animator = LevelAnimator(
            scheduler,
            tick_ms=config.meter_tick_ms,
            on_frame=lambda _bars: self._notify(),
        )
        self.machine = PresentationStateMachine(
            scheduler,
            self.animator,
            FreshnessGuard(config.stale_after_ms),
            success_flash_ms=config.success_flash_ms,
            error_flash_ms=config.error_flash_ms,
            clock_tick_ms=config.clock_tick_ms,
        )
        self.machine.subscribe(self._notify)
        self.clicks = ClickDisambiguator(
            scheduler,
            on_single=self.actions.toggle,
            on_double=self.actions.show,
            window_ms=config.double_click_ms,
        )

        documents = [
            WatchedDocument(
                key="recording",
                filename=config.recording_filename,
                tmp_filename=tmp_filename(config.recording_filename),
                debounce_ms=config.recording_debounce_ms,
                on_reload=self.reload_recording,
            ),
            WatchedDocument(
                key="tray",
                filename=config.tray_filename,
                tmp_filename=tmp_filename(config.tray_filename),
                debounce_ms=config.tray_debounce_ms,
                on_reload=self.reload_tray,
            ),
        ]
        self.watcher = ChangeWatcher(
            documents,
            scheduler,
            source_factory=None if config.force_polling else source_factory,
            fallback_factory=lambda: PollingChangeSource(
                scheduler,
                [config.recording_filename, config.tray_filename],
                config.poll_interval_ms,
            ),
        )

        self._listeners: list[Callable[[], None]] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def visual(self) -> VisualState:
        return self.machine.visual

    @property
    def watch_mode(self) -> str:
        return self.watcher.mode

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Register a callback run whenever anything visible changes."""
        self._listeners.append(listener)

    def start(self) -> None:
        """Start watching and load both documents once."""
        if self._running:
            logger.warning("Indicator already running")
            return

        try:
            self.config.state_dir.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            # The watch setup below degrades to polling if the directory is unusable
            logger.warning(f"Cannot create state directory {self.config.state_dir}: {err}")

        self._running = True
        self.watcher.start()
        logger.info(
            "Indicator started",
            extra={
                "extra_context": {
                    "state_dir": str(self.config.state_dir),
                    "mode": self.watcher.mode,
                }
            },
        )
        self.reload_recording()
        self.reload_tray()

    def stop(self) -> None:
        """Cancel every timer and detach the watch before returning."""
        if not self._running:
            return
        self._running = False
        self._listeners.clear()
        self.watcher.stop()
        self.clicks.cancel()
        self.machine.stop()
        logger.info("Indicator stopped")

    def reload_recording(self, event: ChangeEvent | None = None) -> None:
        if event is not None:
            logger.debug(f"Reloading recording state after {', '.join(event.names)}")
        self.machine.update_recording(self.store.load_recording())

    def reload_tray(self, event: ChangeEvent | None = None) -> None:
        if event is not None:
            logger.debug(f"Reloading tray state after {', '.join(event.names)}")
        self.machine.update_tray(self.store.load_tray())

    def menu(self) -> list[MenuEntry]:
        return build_menu(self.visual is VisualState.RECORDING, self.machine.tray_state)

    def activate(self, entry: MenuEntry) -> bool:
        """Run a menu entry: copy its transcript or launch its action."""
        if entry.transcript is not None:
            return self.actions.copy_transcript(entry.transcript)
        if entry.action is not None:
            return self.actions.invoke(entry.action)
        return False

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
