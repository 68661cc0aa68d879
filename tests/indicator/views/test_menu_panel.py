"""Tests for the menu panel renderer."""

from __future__ import annotations

import io

from rich.console import Console
from rich.panel import Panel

from whispr_indicator.indicator.menu import build_menu
from whispr_indicator.indicator.models import RecentTranscript, TrayState
from whispr_indicator.indicator.views.menu_panel import render_menu_panel


def _render_plain(panel: Panel) -> str:
    console = Console(file=io.StringIO(), width=80, color_system=None)
    console.print(panel)
    return console.file.getvalue()


class TestRenderMenuPanel:
    """Tests for render_menu_panel."""

    def test_returns_panel(self) -> None:
        """Rendering should produce a titled panel."""
        panel = render_menu_panel(build_menu(False, TrayState()))
        assert isinstance(panel, Panel)
        assert "Menu" in _render_plain(panel)

    def test_keys_and_labels(self) -> None:
        """Enabled entries should show their shortcut key."""
        output = _render_plain(render_menu_panel(build_menu(False, TrayState())))
        assert "[t]" in output
        assert "Start Recording" in output
        assert "[Q]" in output
        assert "No recent transcripts" in output

    def test_transcript_text_is_not_markup(self) -> None:
        """Brackets in transcripts should be drawn literally."""
        tray = TrayState(recent=(RecentTranscript(text="[bold]not bold[/bold]"),))
        output = _render_plain(render_menu_panel(build_menu(False, tray)))
        assert "[bold]not bold[/bold]" in output
        assert "[1]" in output

    def test_long_labels_truncated(self) -> None:
        """Very long previews should be shortened."""
        tray = TrayState(recent=(RecentTranscript(text="word " * 40),))
        output = _render_plain(render_menu_panel(build_menu(False, tray)))
        assert "..." in output
