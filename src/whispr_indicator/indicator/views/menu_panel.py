"""Menu panel renderer for recorder actions and recent transcripts."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..menu import MenuEntry
from .footer_bar import truncate_text

MAX_LABEL_WIDTH = 48


def render_menu_panel(entries: list[MenuEntry]) -> Panel:
    """Build Rich Panel listing menu entries with their shortcut keys.

    Args:
        entries: Menu rows from build_menu

    Returns:
        Rich Panel component ready for rendering
    """
    table = Table.grid(padding=(0, 1))
    table.add_column("Key", style="cyan", no_wrap=True, justify="right")
    table.add_column("Entry", no_wrap=True)

    for entry in entries:
        if entry.separator:
            table.add_row("", "")
            continue
        # Plain Text rows: transcript previews may contain markup brackets
        label = truncate_text(entry.label, MAX_LABEL_WIDTH)
        if not entry.enabled:
            table.add_row(Text(""), Text(label, style="dim italic"))
        else:
            key = f"[{entry.key}]" if entry.key else ""
            table.add_row(Text(key), Text(label))

    return Panel(
        table,
        title="[bold white]Menu[/bold white]",
        border_style="blue",
        padding=(0, 1),
    )
