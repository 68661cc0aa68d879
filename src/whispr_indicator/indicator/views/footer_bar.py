"""Footer bar renderer for status indicators.

This module provides the render_footer_bar function that displays a status bar
with the change detection mode, the recorder's last error and a key hint.
"""

from __future__ import annotations

from rich.text import Text

KEY_HINT = "space: click  q: quit"

_MODE_LABELS = {
    "watch": ("Watching for changes", "green"),
    "poll": ("Polling for changes", "yellow"),
    "stopped": ("Not watching", "dim"),
}


def truncate_text(text: str, max_length: int) -> str:
    """Truncate text with ellipsis if it exceeds max length.

    Args:
        text: Text to truncate
        max_length: Maximum length including ellipsis

    Returns:
        Truncated text with "..." suffix if needed
    """
    if len(text) <= max_length:
        return text
    if max_length <= 3:
        return "..."[:max_length]
    return text[: max_length - 3] + "..."


def render_footer_bar(
    watch_mode: str,
    error_message: str | None = None,
    terminal_width: int = 80,
) -> Text:
    """Build Rich Text displaying footer status bar.

    Args:
        watch_mode: Change detection mode ("watch", "poll" or "stopped")
        error_message: Recorder error to display while it is flashed, if any
        terminal_width: Terminal width for truncation calculations

    Returns:
        Rich Text component ready for rendering
    """
    parts = [_MODE_LABELS.get(watch_mode, (watch_mode, "dim"))]

    if error_message:
        # Format: "[mode] | [error] | [key hint]"
        separators = len(" | ") * 2
        available_width = terminal_width - len(parts[0][0]) - len(KEY_HINT) - separators

        if available_width > 10:
            parts.append((" | ", "dim"))
            parts.append((truncate_text(error_message, available_width), "red"))

    parts.append((" | ", "dim"))
    parts.append((KEY_HINT, "cyan"))

    footer = Text()
    for text, style in parts:
        footer.append(text, style=style)

    return footer
