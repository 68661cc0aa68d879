"""Tests for single/double click disambiguation."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from conftest import FakeScheduler

from whispr_indicator.indicator.clicks import ClickDisambiguator
from whispr_indicator.indicator.models import PendingClick


@pytest.fixture
def handlers() -> tuple[Mock, Mock]:
    """Single and double click callbacks."""
    return Mock(), Mock()


@pytest.fixture
def clicks(scheduler: FakeScheduler, handlers: tuple[Mock, Mock]) -> ClickDisambiguator:
    """Disambiguator with the default 220ms window."""
    on_single, on_double = handlers
    return ClickDisambiguator(scheduler, on_single, on_double, window_ms=220)


class TestClickDisambiguator:
    """Tests for ClickDisambiguator."""

    def test_single_click_fires_after_window(
        self,
        clicks: ClickDisambiguator,
        handlers: tuple[Mock, Mock],
        scheduler: FakeScheduler,
    ) -> None:
        """A lone press should run the primary action once, after the window."""
        on_single, on_double = handlers
        clicks.press()
        assert clicks.pending == PendingClick(armed_at_ms=scheduler.now)

        scheduler.advance(219)
        on_single.assert_not_called()

        scheduler.advance(1)
        on_single.assert_called_once()
        on_double.assert_not_called()
        assert clicks.pending is None

    def test_double_click_runs_alternate_only(
        self,
        clicks: ClickDisambiguator,
        handlers: tuple[Mock, Mock],
        scheduler: FakeScheduler,
    ) -> None:
        """Two presses inside the window should run only the alternate action."""
        on_single, on_double = handlers
        clicks.press()
        scheduler.advance(100)
        clicks.press()

        on_double.assert_called_once()
        scheduler.advance(1000)
        on_single.assert_not_called()
        assert clicks.pending is None
        assert scheduler.pending == 0

    def test_presses_outside_window_are_two_singles(
        self,
        clicks: ClickDisambiguator,
        handlers: tuple[Mock, Mock],
        scheduler: FakeScheduler,
    ) -> None:
        """Presses further apart than the window should each be single clicks."""
        on_single, on_double = handlers
        clicks.press()
        scheduler.advance(300)
        clicks.press()
        scheduler.advance(300)

        assert on_single.call_count == 2
        on_double.assert_not_called()

    def test_third_press_starts_new_click(
        self,
        clicks: ClickDisambiguator,
        handlers: tuple[Mock, Mock],
        scheduler: FakeScheduler,
    ) -> None:
        """A press right after a double click should begin a fresh single click."""
        on_single, on_double = handlers
        clicks.press()
        clicks.press()
        clicks.press()

        scheduler.advance(220)
        on_double.assert_called_once()
        on_single.assert_called_once()

    def test_cancel_drops_pending_click(
        self,
        clicks: ClickDisambiguator,
        handlers: tuple[Mock, Mock],
        scheduler: FakeScheduler,
    ) -> None:
        """A cancelled pending click should never fire."""
        on_single, _ = handlers
        clicks.press()
        clicks.cancel()

        scheduler.advance(1000)
        on_single.assert_not_called()
        assert clicks.pending is None
