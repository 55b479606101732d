"""Structured debug events.

Events are cheap to emit and are dropped unless debug logging has been
enabled, either with the ``debug_events_enabled`` setting or by setting
``LAZYLODE_DEBUG=1`` in the environment.
"""

from __future__ import annotations

import json
import os
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

DEBUG_ENV_VAR = "LAZYLODE_DEBUG"
MAX_HISTORY = 500


@dataclass(frozen=True)
class DebugEvent:
    """A single recorded debug event."""

    name: str
    category: str
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    @property
    def iso(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc).isoformat(timespec="milliseconds")

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.iso,
            "category": self.category,
            "event": self.name,
            "data": self.data,
        }


def format_debug_data(data: dict[str, Any]) -> str:
    """Render event data as a compact ``key=value`` string."""
    parts = []
    for key, value in data.items():
        if value is None:
            continue
        parts.append(f"{key}={value}")
    return " ".join(parts)


class DebugEventRecorder:
    """Collects debug events in memory and optionally appends them to a JSONL file."""

    def __init__(self, max_history: int = MAX_HISTORY) -> None:
        self._lock = threading.Lock()
        self._history: deque[DebugEvent] = deque(maxlen=max_history)
        self._enabled = os.environ.get(DEBUG_ENV_VAR, "").strip() in {"1", "true", "yes", "on"}
        self._log_path: Path | None = None
        self._listeners: list[Callable[[DebugEvent], None]] = []

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def log_path(self) -> Path | None:
        return self._log_path

    def set_enabled(self, enabled: bool, log_path: Path | None = None) -> None:
        with self._lock:
            self._enabled = bool(enabled)
            if log_path is not None:
                self._log_path = log_path

    def add_listener(self, listener: Callable[[DebugEvent], None]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[DebugEvent], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def record(self, event: DebugEvent) -> None:
        if not self._enabled:
            return
        with self._lock:
            self._history.append(event)
            path = self._log_path
        if path is not None:
            self._append_to_log(path, event)
        for listener in list(self._listeners):
            listener(event)

    def history(self) -> list[DebugEvent]:
        with self._lock:
            return list(self._history)

    def clear(self) -> None:
        with self._lock:
            self._history.clear()

    def _append_to_log(self, path: Path, event: DebugEvent) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(event.to_dict(), default=str) + "\n")
        except OSError:
            # A broken log file must not take the input loop down.
            self._log_path = None


_recorder = DebugEventRecorder()


def get_recorder() -> DebugEventRecorder:
    return _recorder


def emit_debug_event(name: str, /, *, category: str = "general", **data: Any) -> None:
    """Record a debug event if debug logging is enabled."""
    if not _recorder.enabled:
        return
    _recorder.record(DebugEvent(name=name, category=category, data=data))
