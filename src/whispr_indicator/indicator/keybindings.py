"""Keyboard input handling for the terminal indicator.

This module maps keys to indicator actions. Space stands in for the primary
mouse button and goes through click disambiguation; every other key selects
the menu entry showing that key.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .controller import IndicatorController

logger = logging.getLogger(__name__)

PRIMARY_CLICK_KEY = " "
QUIT_KEY = "q"


class KeybindingHandler:
    """Handles keyboard input and dispatches actions."""

    def __init__(self, controller: IndicatorController) -> None:
        """Initialize keybinding handler.

        Args:
            controller: Indicator whose clicks and menu the keys drive
        """
        self.controller = controller

    def handle_key(self, key: str) -> tuple[bool, str | None]:
        """Process keyboard input and execute corresponding action.

        Args:
            key: Key press identifier (e.g., " ", "t", "1", "q")

        Returns:
            Tuple of (handled, message):
                - handled: True if key was recognized and handled, False otherwise
                - message: Optional feedback message for user ("quit" to exit)
        """
        if key == PRIMARY_CLICK_KEY:
            self.controller.clicks.press()
            return True, None
        if key == QUIT_KEY:
            return True, "quit"

        for entry in self.controller.menu():
            if entry.key != key or not entry.enabled:
                continue
            logger.debug(f"Key {key!r} selects menu entry {entry.label!r}")
            succeeded = self.controller.activate(entry)
            if entry.transcript is not None:
                if succeeded:
                    return True, f"Copied transcript {key}"
                return True, f"Error: Could not copy transcript {key}"
            if not succeeded:
                return True, "Error: Could not launch recorder"
            return True, None

        return False, None
