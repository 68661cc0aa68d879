"""State management for the indicator.

This module provides a unified interface to state models, loading and change
detection. The implementation is split into smaller modules:
- models.py: State data models
- store.py: Document loading and the freshness rule
- watcher.py: Directory watching and debouncing
- poller.py: Fixed-interval polling fallback
"""

from __future__ import annotations

from .models import (
    ChangeEvent,
    PendingClick,
    Presentation,
    RecentTranscript,
    RecordingState,
    TrayState,
    VisualState,
)
from .poller import PollingChangeSource
from .store import FreshnessGuard, StateStore
from .watcher import ChangeSource, ChangeWatcher, DirectoryChangeSource, WatchedDocument

__all__ = [
    "ChangeEvent",
    "ChangeSource",
    "ChangeWatcher",
    "DirectoryChangeSource",
    "FreshnessGuard",
    "PendingClick",
    "PollingChangeSource",
    "Presentation",
    "RecentTranscript",
    "RecordingState",
    "StateStore",
    "TrayState",
    "VisualState",
    "WatchedDocument",
]
