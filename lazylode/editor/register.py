"""The shared yank register."""

from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class Register:
    """A register holding yanked/deleted text."""

    content: str = ""
    linewise: bool = False  # True if content was yanked linewise


class YankRegister:
    """Last copied text, shared by every editor in the session.

    Owned by the dispatcher and handed to each editor. Access is guarded
    by a lock because clipboard work may happen on a worker thread.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._register = Register()
        self._version = 0

    @property
    def version(self) -> int:
        """Incremented on every write; lets callers notice new yanks."""
        with self._lock:
            return self._version

    def get(self) -> Register:
        with self._lock:
            return self._register

    @property
    def content(self) -> str:
        return self.get().content

    def set(self, text: str, linewise: bool = False) -> None:
        with self._lock:
            self._register = Register(content=text, linewise=linewise)
            self._version += 1

    def clear(self) -> None:
        self.set("")
