"""Completion messages from background work, consumed by the dispatch loop."""

from __future__ import annotations

import queue
from dataclasses import dataclass
from enum import Enum
from typing import Any


class CompletionKind(Enum):
    QUERY = "query"
    LOOKUP = "lookup"
    SCHEMA = "schema"


@dataclass(frozen=True)
class Completion:
    """Outcome of one external request; exactly one of value/error is set."""

    kind: CompletionKind
    request_id: int
    value: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CompletionQueue:
    """Thread-safe FIFO of completions.

    Any thread may ``post``; only the dispatch thread should ``drain``.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[Completion] = queue.SimpleQueue()

    def post(self, completion: Completion) -> None:
        self._queue.put(completion)

    def drain(self) -> list[Completion]:
        items = []
        while True:
            try:
                items.append(self._queue.get_nowait())
            except queue.Empty:
                return items

    def empty(self) -> bool:
        return self._queue.empty()
