"""Indicator renderer: state icon, level meter and elapsed clock.

This module provides the render_indicator function that draws the panel-icon
equivalent of the indicator and, while recording, the overlay with its meter.
"""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..meter import BAR_MAX_HEIGHT, BAR_MIN_HEIGHT
from ..models import VisualState

METER_GLYPHS = "▁▂▃▄▅▆▇█"

# glyph, label, style per visual state
INDICATOR_STYLES: dict[VisualState, tuple[str, str, str]] = {
    VisualState.IDLE: ("○", "Idle", "dim"),
    VisualState.RECORDING: ("●", "Recording", "bold red"),
    VisualState.SUCCESS_FLASH: ("✓", "Transcribed", "bold green"),
    VisualState.ERROR_FLASH: ("⚠", "Error", "bold yellow"),
}


def render_meter(bars: list[int]) -> Text:
    """Draw bar heights as block glyphs.

    Args:
        bars: Per-bar heights between the meter's minimum and maximum

    Returns:
        Rich Text with one glyph per bar
    """
    span = BAR_MAX_HEIGHT - BAR_MIN_HEIGHT
    top = len(METER_GLYPHS) - 1
    glyphs = []
    for height in bars:
        fraction = (height - BAR_MIN_HEIGHT) / span
        glyphs.append(METER_GLYPHS[max(0, min(top, round(fraction * top)))])
    return Text("".join(glyphs), style="red")


def render_indicator(
    visual: VisualState,
    overlay_visible: bool,
    clock_label: str | None,
    bars: list[int],
) -> Panel:
    """Build Rich Panel displaying the indicator.

    Args:
        visual: Current visual state
        overlay_visible: Whether the recording overlay is shown
        clock_label: Elapsed recording time, or None to hide the clock
        bars: Current meter bar heights

    Returns:
        Rich Panel component ready for rendering
    """
    glyph, label, style = INDICATOR_STYLES[visual]

    grid = Table.grid(padding=(0, 2))
    grid.add_column(no_wrap=True)
    grid.add_column(no_wrap=True)
    grid.add_column(no_wrap=True)

    status = Text(f"{glyph} {label}", style=style)
    if overlay_visible:
        grid.add_row(status, render_meter(bars), Text(clock_label or "", style="bold"))
    else:
        grid.add_row(status, Text(visual.icon_name, style="dim"), Text(""))

    return Panel(
        grid,
        title="[bold]Whispr[/bold]",
        border_style=style if visual is not VisualState.IDLE else "blue",
        padding=(0, 1),
    )
