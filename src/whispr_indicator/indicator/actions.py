"""Outbound actions: asking the recorder to do something, copying transcripts.

Every action is fire-and-forget. A failed launch or clipboard write is logged
and dropped; the worst case is a click that does nothing.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING

import pyperclip

from ..subprocess_helpers import format_command_string, spawn_detached

if TYPE_CHECKING:
    from ..utils import Config
    from .models import RecentTranscript

logger = logging.getLogger(__name__)


class Action(Enum):
    """Recorder actions and the command-line flag requesting each."""

    TOGGLE = "--toggle"
    SHOW = "--show"
    SHOW_SETTINGS = "--show-settings"
    PASTE_LAST = "--paste-last"
    QUIT = "--quit"


class ActionInvoker:
    """Launches the recorder binary with an action flag."""

    def __init__(self, config: Config, env: Mapping[str, str] | None = None) -> None:
        """Initialize action invoker.

        Args:
            config: Runtime configuration (binary lookup settings)
            env: Environment to read the binary override from (default: os.environ)
        """
        self.config = config
        self.env = os.environ if env is None else env

    def _read_config_binary(self) -> str | None:
        """Binary path from the indicator config file, if it names one."""
        path = self.config.binary_config_path
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as err:
            logger.debug(f"Ignoring unreadable {path}: {err}")
            return None

        if not isinstance(data, dict):
            return None
        binary = data.get("binary")
        if isinstance(binary, str) and binary.strip():
            return binary.strip()
        return None

    def resolve_binary(self) -> str:
        """Recorder executable: environment override, then config file, then default."""
        env_binary = self.env.get(self.config.binary_env_var, "").strip()
        if env_binary:
            return env_binary
        return self._read_config_binary() or self.config.default_binary

    def invoke(self, action: Action) -> bool:
        """Launch the recorder with the flag for action.

        Returns:
            True if the process was started, False if the launch failed
        """
        command = [self.resolve_binary(), action.value]
        try:
            spawn_detached(command)
        except OSError as err:
            logger.warning(
                "Failed to launch recorder action",
                extra={
                    "extra_context": {
                        "command": format_command_string(command),
                        "error": str(err),
                    }
                },
            )
            return False

        logger.info(f"Launched {format_command_string(command)}")
        return True

    def toggle(self) -> bool:
        return self.invoke(Action.TOGGLE)

    def show(self) -> bool:
        return self.invoke(Action.SHOW)

    def show_settings(self) -> bool:
        return self.invoke(Action.SHOW_SETTINGS)

    def paste_last(self) -> bool:
        return self.invoke(Action.PASTE_LAST)

    def quit(self) -> bool:
        return self.invoke(Action.QUIT)

    def copy_transcript(self, item: RecentTranscript) -> bool:
        """Put a transcript's full text on the clipboard.

        Returns:
            True if text was copied, False for empty text or clipboard failure
        """
        if not item.text:
            return False
        try:
            pyperclip.copy(item.text)
        except pyperclip.PyperclipException as err:
            logger.warning(f"Clipboard unavailable: {err}")
            return False
        logger.info("Copied transcript", extra={"extra_context": {"id": item.id}})
        return True
