"""Issues backend requests and reports their outcome as completions."""

from __future__ import annotations

import itertools
import threading
from typing import Callable

from lazylode.core.completions import Completion, CompletionKind, CompletionQueue
from lazylode.shared.debug_events import emit_debug_event

from .base import BackendError, CellRef, QueryBackend, QuerySpec

Submit = Callable[[Callable[[], None]], None]


def run_inline(job: Callable[[], None]) -> None:
    job()


class RequestRunner:
    """Turns backend calls into numbered requests.

    Each call returns a request id immediately; the blocking backend work
    runs through ``submit`` (inline by default, a worker thread in the
    app) and its result is posted to the completion queue.
    """

    def __init__(
        self,
        backend: QueryBackend,
        completions: CompletionQueue,
        submit: Submit | None = None,
    ) -> None:
        self._backend = backend
        self._completions = completions
        self._submit = submit or run_inline
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def backend(self) -> QueryBackend:
        return self._backend

    def _next_id(self) -> int:
        with self._lock:
            return next(self._ids)

    def _start(self, kind: CompletionKind, work: Callable[[], object]) -> int:
        request_id = self._next_id()

        def job() -> None:
            try:
                value = work()
            except BackendError as exc:
                self._completions.post(Completion(kind, request_id, error=exc))
                return
            except Exception as exc:
                emit_debug_event(
                    "request.crashed",
                    category="backend",
                    kind=kind.value,
                    request_id=request_id,
                    error=repr(exc),
                )
                self._completions.post(Completion(kind, request_id, error=exc))
                return
            self._completions.post(Completion(kind, request_id, value=value))

        emit_debug_event("request.start", category="backend", kind=kind.value, request_id=request_id)
        self._submit(job)
        return request_id

    def execute_query(self, connection: str, spec: QuerySpec) -> int:
        return self._start(CompletionKind.QUERY, lambda: self._backend.run_query(connection, spec))

    def follow_foreign_key(self, cell: CellRef) -> int:
        return self._start(CompletionKind.LOOKUP, lambda: self._backend.lookup_foreign_key(cell))

    def fetch_schema(self, connection: str) -> int:
        return self._start(CompletionKind.SCHEMA, lambda: self._backend.load_schema(connection))
