"""Indicator menu contents derived from the tray document."""

from __future__ import annotations

from dataclasses import dataclass

from .actions import Action
from .models import RecentTranscript, TrayState

NO_RECENT_LABEL = "No recent transcripts"


@dataclass(frozen=True)
class MenuEntry:
    """One menu row: an action, a transcript to copy, a placeholder or a separator."""

    label: str
    key: str | None = None
    action: Action | None = None
    transcript: RecentTranscript | None = None
    separator: bool = False

    @property
    def enabled(self) -> bool:
        return self.action is not None or self.transcript is not None


SEPARATOR = MenuEntry(label="", separator=True)


def with_hotkey(label: str, hotkey: str | None) -> str:
    """Append a shortcut hint to a label: "Open App  (Super+O)"."""
    return f"{label}  ({hotkey})" if hotkey else label


def build_menu(recording: bool, tray: TrayState) -> list[MenuEntry]:
    """Build the menu rows for the current recording flag and tray state.

    Recent transcripts get the number keys 1..N in newest-first order.
    """
    hotkeys = tray.hotkeys
    toggle_label = "Stop Recording" if recording else "Start Recording"
    entries = [
        MenuEntry(
            label=with_hotkey(toggle_label, hotkeys.get("record_toggle")),
            key="t",
            action=Action.TOGGLE,
        ),
        SEPARATOR,
    ]

    if tray.recent:
        for index, item in enumerate(tray.recent, start=1):
            entries.append(MenuEntry(label=item.label, key=str(index), transcript=item))
        entries.append(MenuEntry(label="Show All Transcripts", key="o", action=Action.SHOW))
    else:
        entries.append(MenuEntry(label=NO_RECENT_LABEL))

    entries.extend(
        [
            SEPARATOR,
            MenuEntry(label="Settings", key="s", action=Action.SHOW_SETTINGS),
            MenuEntry(
                label=with_hotkey("Open App", hotkeys.get("open_app")),
                key="o",
                action=Action.SHOW,
            ),
            MenuEntry(
                label=with_hotkey("Paste Last", hotkeys.get("paste_last")),
                key="p",
                action=Action.PASTE_LAST,
            ),
            SEPARATOR,
            MenuEntry(label="Quit", key="Q", action=Action.QUIT),
        ]
    )
    return entries
