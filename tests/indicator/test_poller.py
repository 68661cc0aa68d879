"""Tests for the polling change source."""

from __future__ import annotations

from unittest.mock import Mock

from conftest import FakeScheduler

from whispr_indicator.indicator.poller import PollingChangeSource


class TestPollingChangeSource:
    """Tests for PollingChangeSource."""

    def test_initialization(self, scheduler: FakeScheduler) -> None:
        """Source should keep its filenames and interval and start stopped."""
        source = PollingChangeSource(scheduler, ["overlay.json", "tray.json"], 500)
        assert source.filenames == ["overlay.json", "tray.json"]
        assert source.interval_ms == 500
        assert not source.running

    def test_reports_every_document_each_interval(self, scheduler: FakeScheduler) -> None:
        """Every tick should report all documents, changed or not."""
        callback = Mock()
        source = PollingChangeSource(scheduler, ["overlay.json", "tray.json"], 1000)
        source.start(callback)

        scheduler.advance(999)
        callback.assert_not_called()

        scheduler.advance(1)
        callback.assert_called_once_with(("overlay.json", "tray.json"))

        scheduler.advance(3000)
        assert callback.call_count == 4

    def test_stop_halts_polling(self, scheduler: FakeScheduler) -> None:
        """No reports should arrive after stop()."""
        callback = Mock()
        source = PollingChangeSource(scheduler, ["tray.json"], 1000)
        source.start(callback)
        scheduler.advance(1000)
        source.stop()
        scheduler.advance(5000)

        assert callback.call_count == 1
        assert not source.running
        assert scheduler.pending == 0

    def test_start_twice_keeps_one_timer(self, scheduler: FakeScheduler) -> None:
        """Starting twice should not poll twice per interval."""
        callback = Mock()
        source = PollingChangeSource(scheduler, ["tray.json"], 1000)
        source.start(callback)
        source.start(Mock())

        scheduler.advance(1000)
        callback.assert_called_once()

    def test_stop_when_not_running(self, scheduler: FakeScheduler) -> None:
        """Stopping a source that never started should be harmless."""
        PollingChangeSource(scheduler, ["tray.json"]).stop()
