"""Audio level meter animation.

Target levels arrive whenever the recording document reloads, which can be
far less often than the meter redraws. The animator eases a smoothed level
toward the latest target on its own fixed tick, rising quickly and falling
gently.
"""

from __future__ import annotations

from collections.abc import Callable

from .scheduler import RepeatingTimer, Scheduler

BAR_COUNT = 10
BAR_WEIGHTS = (0.35, 0.55, 0.8, 1.0, 0.9, 0.9, 1.0, 0.8, 0.55, 0.35)
BAR_MIN_HEIGHT = 10
BAR_MAX_HEIGHT = 26
METER_TICK_MS = 150
ATTACK_GAIN = 0.45
RELEASE_GAIN = 0.2


def _clamp_level(level: float) -> float:
    return max(0.0, min(1.0, level))


def bar_heights(
    level: float,
    bar_count: int = BAR_COUNT,
    weights: tuple[float, ...] = BAR_WEIGHTS,
    min_height: int = BAR_MIN_HEIGHT,
    max_height: int = BAR_MAX_HEIGHT,
) -> list[int]:
    """Per-bar heights for a level, shaped by the weight curve."""
    clamped = _clamp_level(level)
    span = max_height - min_height
    return [
        round(min_height + span * clamped * weights[index % len(weights)])
        for index in range(bar_count)
    ]


class LevelAnimator:
    """Smooths a 0..1 target level into animated bar heights."""

    def __init__(
        self,
        scheduler: Scheduler,
        tick_ms: int = METER_TICK_MS,
        attack_gain: float = ATTACK_GAIN,
        release_gain: float = RELEASE_GAIN,
        on_frame: Callable[[list[int]], None] | None = None,
    ) -> None:
        if not 0 < release_gain <= 1 or not 0 < attack_gain <= 1:
            raise ValueError("Gains must be in (0, 1]")
        self.attack_gain = attack_gain
        self.release_gain = release_gain
        self.on_frame = on_frame
        self.smoothed = 0.0
        self.target = 0.0
        self.bars = bar_heights(0.0)
        self._timer = RepeatingTimer(scheduler, tick_ms, self.tick, "meter")

    @property
    def running(self) -> bool:
        return self._timer.running

    def set_target(self, level: float) -> None:
        self.target = _clamp_level(level)

    def tick(self) -> float:
        """Advance the smoothed level one step toward the target."""
        delta = self.target - self.smoothed
        gain = self.attack_gain if delta > 0 else self.release_gain
        self.smoothed = _clamp_level(self.smoothed + delta * gain)
        self.bars = bar_heights(self.smoothed)
        if self.on_frame is not None:
            self.on_frame(self.bars)
        return self.smoothed

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        """Stop ticking and drop the meter back to its resting height."""
        self._timer.stop()
        self.smoothed = 0.0
        self.target = 0.0
        self.bars = bar_heights(0.0)
        if self.on_frame is not None:
            self.on_frame(self.bars)
