"""Reading the recorder's state documents and distrusting stale ones.

StateStore never raises: a document that is missing, half-written or malformed
reads as the default state, so a write in progress can never crash or freeze
the indicator. FreshnessGuard is the crash-recovery rule layered on top.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .models import RecordingState, TrayState

logger = logging.getLogger(__name__)

RECORDING_FILENAME = "overlay.json"
TRAY_FILENAME = "tray.json"
DEFAULT_STALE_AFTER_MS = 5000


def tmp_filename(filename: str) -> str:
    """Name the recorder writes to before renaming (overlay.json -> overlay.tmp)."""
    return str(Path(filename).with_suffix(".tmp"))


class StateStore:
    """Loads the recording and tray documents from the state directory."""

    def __init__(
        self,
        directory: Path,
        recording_filename: str = RECORDING_FILENAME,
        tray_filename: str = TRAY_FILENAME,
    ) -> None:
        """Initialize state store.

        Args:
            directory: Directory the recorder writes its documents into
            recording_filename: Name of the recording/level document
            tray_filename: Name of the tray/history document
        """
        self.directory = directory
        self.recording_path = directory / recording_filename
        self.tray_path = directory / tray_filename

    def _read_document(self, path: Path) -> dict[str, Any] | None:
        """Read a JSON object from disk, returning None when it cannot be used."""
        try:
            with path.open("rb") as f:
                raw = f.read()
            data = json.loads(raw.decode("utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError, RecursionError) as err:
            # UnicodeDecodeError and JSONDecodeError are both ValueErrors
            logger.debug(f"Unreadable state document {path.name}: {err}")
            return None

        if not isinstance(data, dict):
            logger.debug(f"State document {path.name} is not a JSON object")
            return None
        return data

    def load_recording(self) -> RecordingState:
        """Load the recording document.

        Returns:
            Parsed state, or the default (not recording) state on any failure
        """
        data = self._read_document(self.recording_path)
        if data is None:
            return RecordingState()
        return RecordingState.from_dict(data)

    def load_tray(self) -> TrayState:
        """Load the tray document.

        Returns:
            Parsed state, or the default (empty) state on any failure
        """
        data = self._read_document(self.tray_path)
        if data is None:
            return TrayState()
        return TrayState.from_dict(data)


class FreshnessGuard:
    """Treats a "recording" state that stopped updating as a crashed writer."""

    def __init__(self, stale_after_ms: int = DEFAULT_STALE_AFTER_MS) -> None:
        if stale_after_ms <= 0:
            raise ValueError(f"stale_after_ms must be positive, got {stale_after_ms}")
        self.stale_after_ms = stale_after_ms
        self._discarded: RecordingState | None = None

    def is_stale(self, state: RecordingState, now_ms: int) -> bool:
        """Check whether a recording state can no longer be trusted.

        Only recording states go stale. Exactly at the threshold is still fresh;
        a recording state without an update time is never fresh.
        """
        if not state.recording:
            return False
        if state.updated_at_ms is None:
            return True
        return now_ms - state.updated_at_ms > self.stale_after_ms

    def apply(self, state: RecordingState, now_ms: int) -> RecordingState:
        """Normalize a stale recording state to idle.

        The discard is logged once per stale document, not on every reload of it.
        """
        if not self.is_stale(state, now_ms):
            self._discarded = None
            return state
        if state != self._discarded:
            self._discarded = state
            logger.info(
                "Discarding stale recording state",
                extra={
                    "extra_context": {
                        "updated_at_ms": state.updated_at_ms,
                        "now_ms": now_ms,
                        "stale_after_ms": self.stale_after_ms,
                    }
                },
            )
        return RecordingState(
            recording=False,
            started_at_ms=None,
            level=0.0,
            updated_at_ms=state.updated_at_ms,
        )

    def expires_at_ms(self, state: RecordingState) -> int | None:
        """Time after which a fresh recording state turns stale."""
        if not state.recording or state.updated_at_ms is None:
            return None
        return state.updated_at_ms + self.stale_after_ms + 1
