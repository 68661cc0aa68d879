"""State data models for the indicator.

The recorder writes two JSON documents; these dataclasses are their parsed,
validated form. Parsing is field-by-field: a bad field is dropped, never the
whole document.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

MAX_RECENT = 8
UNTITLED_TRANSCRIPT = "Untitled transcript"


def _finite_number(value: Any) -> float | None:
    """Return value as a float if it is a finite JSON number, else None."""
    # bool is an int subclass; JSON true/false are not numbers here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return number


def _timestamp_ms(value: Any) -> int | None:
    number = _finite_number(value)
    if number is None:
        return None
    return int(number)


def _string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class RecordingState:
    """Recording and audio level state written by the recorder."""

    recording: bool = False
    started_at_ms: int | None = None
    level: float = 0.0
    updated_at_ms: int | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> RecordingState:
        level = _finite_number(payload.get("level"))
        return cls(
            recording=payload.get("recording") is True,
            started_at_ms=_timestamp_ms(payload.get("started_at_ms")),
            level=0.0 if level is None else max(0.0, min(1.0, level)),
            updated_at_ms=_timestamp_ms(payload.get("updated_at_ms")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "recording": self.recording,
            "started_at_ms": self.started_at_ms,
            "level": self.level,
            "updated_at_ms": self.updated_at_ms,
        }


@dataclass(frozen=True)
class RecentTranscript:
    """One entry of the tray's recent transcript list."""

    id: str | None = None
    text: str = ""
    preview: str = ""

    @property
    def label(self) -> str:
        """Menu label: preview, falling back to the full text."""
        return self.preview or self.text or UNTITLED_TRANSCRIPT

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> RecentTranscript:
        raw_id = payload.get("id")
        if isinstance(raw_id, int) and not isinstance(raw_id, bool):
            raw_id = str(raw_id)
        return cls(
            id=_string(raw_id),
            text=_string(payload.get("text")) or "",
            preview=_string(payload.get("preview")) or "",
        )


@dataclass(frozen=True)
class TrayState:
    """History and status state backing the menu and flash timing."""

    recent: tuple[RecentTranscript, ...] = ()
    last_transcript_at_ms: int | None = None
    last_error_at_ms: int | None = None
    last_error: str | None = None
    hotkeys: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> TrayState:
        recent_raw = payload.get("recent")
        recent: list[RecentTranscript] = []
        if isinstance(recent_raw, list):
            for item in recent_raw:
                if isinstance(item, dict):
                    recent.append(RecentTranscript.from_dict(item))
                if len(recent) >= MAX_RECENT:
                    break

        hotkeys_raw = payload.get("hotkeys")
        hotkeys: dict[str, str] = {}
        if isinstance(hotkeys_raw, dict):
            hotkeys = {
                str(name): shortcut
                for name, shortcut in hotkeys_raw.items()
                if isinstance(shortcut, str) and shortcut
            }

        return cls(
            recent=tuple(recent),
            last_transcript_at_ms=_timestamp_ms(payload.get("last_transcript_at_ms")),
            last_error_at_ms=_timestamp_ms(payload.get("last_error_at_ms")),
            last_error=_string(payload.get("last_error")),
            hotkeys=hotkeys,
        )


class VisualState(Enum):
    """Visual state of the indicator icon."""

    IDLE = "idle"
    RECORDING = "recording"
    SUCCESS_FLASH = "success"
    ERROR_FLASH = "error"

    @property
    def icon_name(self) -> str:
        return _ICON_NAMES[self]

    @property
    def is_flash(self) -> bool:
        return self in (VisualState.SUCCESS_FLASH, VisualState.ERROR_FLASH)


_ICON_NAMES = {
    VisualState.IDLE: "audio-input-microphone-symbolic",
    VisualState.RECORDING: "media-record-symbolic",
    VisualState.SUCCESS_FLASH: "emblem-ok-symbolic",
    VisualState.ERROR_FLASH: "dialog-warning-symbolic",
}


@dataclass(frozen=True)
class Presentation:
    """Derived visual state; flash states carry their expiry time."""

    visual: VisualState
    expires_at_ms: int | None = None


@dataclass(frozen=True)
class PendingClick:
    """A primary click waiting to learn whether a second one follows."""

    armed_at_ms: int


@dataclass(frozen=True)
class ChangeEvent:
    """A coalesced change of one logical document."""

    key: str
    names: tuple[str, ...]
