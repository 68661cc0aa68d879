"""Tests for timer scheduling."""

from __future__ import annotations

import asyncio
from unittest.mock import Mock, patch

import pytest
from conftest import FakeScheduler

from whispr_indicator.indicator.scheduler import LoopScheduler, OneShotTimer, RepeatingTimer


class TestOneShotTimer:
    """Tests for OneShotTimer."""

    def test_fires_once_after_delay(self, scheduler: FakeScheduler) -> None:
        """Callback should run exactly once when the delay elapses."""
        callback = Mock()
        timer = OneShotTimer(scheduler, "test")
        timer.arm(100, callback)

        scheduler.advance(99)
        callback.assert_not_called()
        assert timer.active

        scheduler.advance(1)
        callback.assert_called_once()
        assert not timer.active

        scheduler.advance(1000)
        callback.assert_called_once()

    def test_rearm_replaces_pending_callback(self, scheduler: FakeScheduler) -> None:
        """Re-arming should cancel the earlier callback and restart the delay."""
        first = Mock()
        second = Mock()
        timer = OneShotTimer(scheduler, "test")
        timer.arm(100, first)
        scheduler.advance(50)
        timer.arm(100, second)

        scheduler.advance(60)
        first.assert_not_called()
        second.assert_not_called()

        scheduler.advance(40)
        first.assert_not_called()
        second.assert_called_once()

    def test_cancel_prevents_callback(self, scheduler: FakeScheduler) -> None:
        """A cancelled timer should never fire."""
        callback = Mock()
        timer = OneShotTimer(scheduler, "test")
        timer.arm(100, callback)
        timer.cancel()

        scheduler.advance(500)
        callback.assert_not_called()
        assert scheduler.pending == 0

    def test_cancel_when_idle_is_noop(self, scheduler: FakeScheduler) -> None:
        """Cancelling an unarmed timer should do nothing."""
        timer = OneShotTimer(scheduler, "test")
        timer.cancel()
        assert not timer.active


class TestRepeatingTimer:
    """Tests for RepeatingTimer."""

    def test_ticks_at_interval(self, scheduler: FakeScheduler) -> None:
        """Callback should run once per elapsed interval."""
        callback = Mock()
        timer = RepeatingTimer(scheduler, 150, callback, "test")
        timer.start()

        scheduler.advance(450)
        assert callback.call_count == 3
        assert timer.running

    def test_start_twice_does_not_double_tick(self, scheduler: FakeScheduler) -> None:
        """Starting a running timer should not schedule a second chain."""
        callback = Mock()
        timer = RepeatingTimer(scheduler, 100, callback, "test")
        timer.start()
        timer.start()

        scheduler.advance(100)
        assert callback.call_count == 1

    def test_stop_halts_ticks(self, scheduler: FakeScheduler) -> None:
        """No ticks should run after stop()."""
        callback = Mock()
        timer = RepeatingTimer(scheduler, 100, callback, "test")
        timer.start()
        scheduler.advance(200)
        timer.stop()
        scheduler.advance(1000)

        assert callback.call_count == 2
        assert not timer.running
        assert scheduler.pending == 0

    def test_stop_from_inside_callback(self, scheduler: FakeScheduler) -> None:
        """A callback stopping its own timer should prevent the next tick."""
        calls: list[int] = []

        def on_tick() -> None:
            calls.append(scheduler.now_ms())
            timer.stop()

        timer = RepeatingTimer(scheduler, 100, on_tick, "test")
        timer.start()
        scheduler.advance(1000)

        assert len(calls) == 1
        assert not timer.running

    @pytest.mark.parametrize("interval", [0, -5])
    def test_rejects_non_positive_interval(
        self, scheduler: FakeScheduler, interval: int
    ) -> None:
        """Non-positive intervals should be rejected."""
        with pytest.raises(ValueError, match="interval_ms"):
            RepeatingTimer(scheduler, interval, Mock(), "test")


class TestLoopScheduler:
    """Tests for the asyncio-backed scheduler."""

    def test_now_ms_uses_epoch_time(self) -> None:
        """now_ms should report wall-clock epoch milliseconds."""
        loop = asyncio.new_event_loop()
        try:
            with patch("whispr_indicator.indicator.scheduler.time.time", return_value=1.5):
                assert LoopScheduler(loop).now_ms() == 1500
        finally:
            loop.close()

    def test_call_later_runs_on_loop(self) -> None:
        """Callbacks should run on the loop after the delay."""
        loop = asyncio.new_event_loop()
        callback = Mock()
        try:
            LoopScheduler(loop).call_later(1, callback)
            loop.run_until_complete(asyncio.sleep(0.05))
        finally:
            loop.close()
        callback.assert_called_once()

    def test_cancelled_handle_does_not_run(self) -> None:
        """Cancelled handles should never run."""
        loop = asyncio.new_event_loop()
        callback = Mock()
        try:
            handle = LoopScheduler(loop).call_later(1, callback)
            handle.cancel()
            loop.run_until_complete(asyncio.sleep(0.05))
        finally:
            loop.close()
        callback.assert_not_called()
