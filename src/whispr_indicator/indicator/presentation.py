"""Indicator presentation state machine.

The visual state is a pure function of the two documents plus "now":
recording > error flash > success flash > idle. The machine re-derives it from
scratch on every reload and every timer it owns, and performs the side effects
of entering and leaving the recording state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .meter import LevelAnimator
from .models import Presentation, RecordingState, TrayState, VisualState
from .scheduler import OneShotTimer, RepeatingTimer, Scheduler
from .store import FreshnessGuard

logger = logging.getLogger(__name__)

SUCCESS_FLASH_MS = 3000
ERROR_FLASH_MS = 4000
CLOCK_TICK_MS = 1000


def format_clock(elapsed_ms: int) -> str:
    """Format elapsed milliseconds as M:SS.

    Examples:
        >>> format_clock(65000)
        '1:05'
        >>> format_clock(-500)
        '0:00'
    """
    elapsed_sec = max(0, elapsed_ms // 1000)
    minutes, seconds = divmod(elapsed_sec, 60)
    return f"{minutes}:{seconds:02d}"


def derive_presentation(
    recording: RecordingState,
    tray: TrayState,
    now_ms: int,
    success_flash_ms: int = SUCCESS_FLASH_MS,
    error_flash_ms: int = ERROR_FLASH_MS,
) -> Presentation:
    """Derive the visual state from freshness-checked recording state and tray state.

    A flash is shown while less than its window has passed since the event.
    An error takes priority over a success, and a success older than the last
    error never flashes.
    """
    if recording.recording:
        return Presentation(VisualState.RECORDING)

    error_at = tray.last_error_at_ms
    if error_at is not None and now_ms - error_at < error_flash_ms:
        return Presentation(VisualState.ERROR_FLASH, error_at + error_flash_ms)

    transcript_at = tray.last_transcript_at_ms
    if transcript_at is not None and now_ms - transcript_at < success_flash_ms:
        if error_at is None or error_at <= transcript_at:
            return Presentation(VisualState.SUCCESS_FLASH, transcript_at + success_flash_ms)

    return Presentation(VisualState.IDLE)


class PresentationStateMachine:
    """Owns the indicator's visual state and the timers that keep it current."""

    def __init__(
        self,
        scheduler: Scheduler,
        animator: LevelAnimator,
        guard: FreshnessGuard,
        success_flash_ms: int = SUCCESS_FLASH_MS,
        error_flash_ms: int = ERROR_FLASH_MS,
        clock_tick_ms: int = CLOCK_TICK_MS,
    ) -> None:
        """Initialize the state machine.

        Args:
            scheduler: Scheduler for the clock, flash expiry and stale re-check
            animator: Level meter animated while recording
            guard: Freshness rule applied to every recording state
            success_flash_ms: How long a new transcript flashes success
            error_flash_ms: How long a new error flashes
            clock_tick_ms: Elapsed clock refresh interval
        """
        self.scheduler = scheduler
        self.animator = animator
        self.guard = guard
        self.success_flash_ms = success_flash_ms
        self.error_flash_ms = error_flash_ms

        self.recording_state = RecordingState()
        self.tray_state = TrayState()
        self.presentation = Presentation(VisualState.IDLE)
        self.overlay_visible = False
        self.clock_label: str | None = None

        self._raw_recording = RecordingState()
        self._clock = RepeatingTimer(scheduler, clock_tick_ms, self._tick_clock, "clock")
        self._flash_timer = OneShotTimer(scheduler, "flash")
        self._stale_timer = OneShotTimer(scheduler, "stale")
        self._listeners: list[Callable[[], None]] = []

    @property
    def visual(self) -> VisualState:
        return self.presentation.visual

    @property
    def error_message(self) -> str | None:
        """The recorder's last error, while it is being flashed."""
        if self.visual is VisualState.ERROR_FLASH:
            return self.tray_state.last_error
        return None

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Register a callback run after every visible change."""
        self._listeners.append(listener)

    def update_recording(self, state: RecordingState) -> None:
        """Take a freshly loaded recording document into account."""
        now = self.scheduler.now_ms()
        self._raw_recording = state
        self.recording_state = self.guard.apply(state, now)
        self.animator.set_target(self.recording_state.level)

        expires_at = self.guard.expires_at_ms(self.recording_state)
        if expires_at is None:
            self._stale_timer.cancel()
        else:
            self._stale_timer.arm(expires_at - now, self._recheck_stale)

        self.evaluate()

    def update_tray(self, state: TrayState) -> None:
        """Take a freshly loaded tray document into account."""
        self.tray_state = state
        self.evaluate()

    def evaluate(self) -> None:
        """Recompute the visual state from scratch and apply side effects."""
        now = self.scheduler.now_ms()
        presentation = derive_presentation(
            self.recording_state,
            self.tray_state,
            now,
            self.success_flash_ms,
            self.error_flash_ms,
        )
        was_recording = self.presentation.visual is VisualState.RECORDING

        if presentation.visual is VisualState.RECORDING:
            if not was_recording:
                self._enter_recording()
            self._sync_clock(now)
        elif was_recording:
            self._leave_recording()

        if presentation.expires_at_ms is not None:
            self._flash_timer.arm(presentation.expires_at_ms - now, self.evaluate)
        else:
            self._flash_timer.cancel()

        if presentation != self.presentation:
            logger.debug(
                "Visual state changed",
                extra={
                    "extra_context": {
                        "from": self.presentation.visual.value,
                        "to": presentation.visual.value,
                        "expires_at_ms": presentation.expires_at_ms,
                    }
                },
            )
        self.presentation = presentation
        self._notify()

    def stop(self) -> None:
        """Cancel every timer owned by the machine and stop the meter."""
        self._clock.stop()
        self._flash_timer.cancel()
        self._stale_timer.cancel()
        self.animator.stop()

    def _enter_recording(self) -> None:
        logger.info("Recording started")
        self.overlay_visible = True
        self.animator.start()

    def _leave_recording(self) -> None:
        logger.info("Recording stopped")
        self.overlay_visible = False
        self._clock.stop()
        self.clock_label = None
        self.animator.stop()

    def _sync_clock(self, now: int) -> None:
        started_at = self.recording_state.started_at_ms
        if started_at is None:
            self._clock.stop()
            self.clock_label = None
            return
        self.clock_label = format_clock(now - started_at)
        self._clock.start()

    def _tick_clock(self) -> None:
        started_at = self.recording_state.started_at_ms
        if started_at is None:
            return
        self.clock_label = format_clock(self.scheduler.now_ms() - started_at)
        self._notify()

    def _recheck_stale(self) -> None:
        # No newer document arrived; the writer may have died mid-recording
        self.update_recording(self._raw_recording)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
