"""Platform-agnostic subprocess helpers for Windows/Linux/macOS compatibility.

This module centralizes the platform-specific parts of launching the recorder
binary so callers only deal with an argument list.
"""

from __future__ import annotations

import logging
import platform
import shlex
import subprocess
from typing import Any

logger = logging.getLogger(__name__)


def format_command_string(command: list[str] | tuple[str, ...]) -> str:
    """Format command as a properly quoted string for the current platform.

    Uses platform-specific quoting rules:
    - Windows: subprocess.list2cmdline() for cmd.exe/PowerShell compatibility
    - Linux/macOS: shlex.join() for POSIX shell compatibility

    Args:
        command: Command as list or tuple

    Returns:
        Properly quoted command string suitable for display or shell execution

    Examples:
        >>> format_command_string(['whispr', '--toggle'])
        'whispr --toggle'
    """
    if platform.system() == "Windows":
        return subprocess.list2cmdline(command)
    return shlex.join(command)


def spawn_detached(command: list[str] | tuple[str, ...]) -> subprocess.Popen[Any]:
    """Start a command without waiting for it or keeping its output.

    The child gets its own session (POSIX) or is detached from the console
    (Windows) so it outlives the indicator and never receives its signals.

    Args:
        command: Command as list or tuple

    Returns:
        Popen process object

    Raises:
        OSError: If the executable cannot be started
    """
    if platform.system() == "Windows":
        return subprocess.Popen(
            format_command_string(command),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            shell=True,
            creationflags=getattr(subprocess, "DETACHED_PROCESS", 0),
        )
    return subprocess.Popen(
        list(command),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        shell=False,
        start_new_session=True,
    )
