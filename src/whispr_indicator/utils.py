"""Shared configuration helpers for the recording indicator."""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .indicator.exceptions import ConfigError

APP_DIR_NAME = "whispr"
BINARY_CONFIG_FILENAME = "overlay-config.json"
DEFAULT_BINARY = "whispr"
BINARY_ENV_VAR = "WHISPR_BIN"

_DURATION_FIELDS = (
    "stale_after_ms",
    "success_flash_ms",
    "error_flash_ms",
    "double_click_ms",
    "recording_debounce_ms",
    "tray_debounce_ms",
    "poll_interval_ms",
    "meter_tick_ms",
    "clock_tick_ms",
)


def default_state_dir(env: Mapping[str, str] | None = None) -> Path:
    """Directory the recorder writes its state documents into.

    $XDG_STATE_HOME/whispr, then ~/.local/state/whispr, then a temp directory.
    """
    env = os.environ if env is None else env
    if env.get("XDG_STATE_HOME"):
        return Path(env["XDG_STATE_HOME"]) / APP_DIR_NAME
    if env.get("HOME"):
        return Path(env["HOME"]) / ".local" / "state" / APP_DIR_NAME
    return Path(tempfile.gettempdir()) / APP_DIR_NAME


def default_config_dir(env: Mapping[str, str] | None = None) -> Path:
    """Directory holding the small indicator config file ($XDG_CONFIG_HOME/whispr)."""
    env = os.environ if env is None else env
    if env.get("XDG_CONFIG_HOME"):
        return Path(env["XDG_CONFIG_HOME"]) / APP_DIR_NAME
    return Path(env.get("HOME") or Path.home()) / ".config" / APP_DIR_NAME


@dataclass(frozen=True)
class Config:
    """Runtime configuration for the indicator."""

    state_dir: Path
    binary_config_path: Path
    recording_filename: str = "overlay.json"
    tray_filename: str = "tray.json"
    stale_after_ms: int = 5000
    success_flash_ms: int = 3000
    error_flash_ms: int = 4000
    double_click_ms: int = 220
    recording_debounce_ms: int = 60
    tray_debounce_ms: int = 120
    poll_interval_ms: int = 1000
    meter_tick_ms: int = 150
    clock_tick_ms: int = 1000
    default_binary: str = DEFAULT_BINARY
    binary_env_var: str = BINARY_ENV_VAR
    force_polling: bool = False

    @classmethod
    def from_dict(cls, payload: dict, env: Mapping[str, str] | None = None) -> Config:
        """Create a Config object from a raw dictionary.

        Missing keys fall back to defaults; paths default to the XDG locations.
        """
        if not isinstance(payload, dict):
            raise TypeError("config must be a JSON object")

        state_dir_raw = payload.get("state_dir")
        state_dir = (
            Path(os.path.expanduser(state_dir_raw))
            if state_dir_raw
            else default_state_dir(env)
        )
        binary_config_raw = payload.get("binary_config_path")
        binary_config_path = (
            Path(os.path.expanduser(binary_config_raw))
            if binary_config_raw
            else default_config_dir(env) / BINARY_CONFIG_FILENAME
        )

        durations: dict[str, int] = {}
        for name in _DURATION_FIELDS:
            value = int(payload.get(name, cls.__dataclass_fields__[name].default))
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
            durations[name] = value

        recording_filename = str(payload.get("recording_filename", "overlay.json"))
        tray_filename = str(payload.get("tray_filename", "tray.json"))
        if recording_filename == tray_filename:
            raise ValueError("recording_filename and tray_filename must differ")

        return cls(
            state_dir=state_dir,
            binary_config_path=binary_config_path,
            recording_filename=recording_filename,
            tray_filename=tray_filename,
            default_binary=str(payload.get("default_binary", DEFAULT_BINARY)),
            binary_env_var=str(payload.get("binary_env_var", BINARY_ENV_VAR)),
            force_polling=bool(payload.get("force_polling", False)),
            **durations,
        )


def default_config(env: Mapping[str, str] | None = None) -> Config:
    """Configuration used when no config file is given."""
    return Config.from_dict({}, env=env)


def load_config(path: Path) -> Config:
    """Load configuration from the provided path.

    Raises:
        ConfigError: If the file cannot be read or holds invalid values
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        return Config.from_dict(data)
    except (OSError, ValueError, TypeError) as err:
        raise ConfigError(f"Invalid config {path}: {err}") from err
