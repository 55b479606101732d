"""Contracts between the navigation core and a database backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from lazylode.core.types import BoxKind, PaneKind


@dataclass(frozen=True)
class QuerySpec:
    """A query to run, as typed in the query box."""

    text: str
    page: int = 0
    page_size: int = 100
    sort_column: str | None = None


@dataclass(frozen=True)
class QueryResult:
    """Rows returned by a query."""

    columns: list[str]
    rows: list[tuple[Any, ...]]
    table: str = ""
    page: int = 0
    row_count: int | None = None


@dataclass(frozen=True)
class CellRef:
    """A cell in a results table."""

    table: str
    column: str
    row: int
    value: Any = None


@dataclass(frozen=True)
class TargetLocation:
    """Where a foreign-key lookup landed: the pane/box to focus and the row to select."""

    pane: PaneKind
    box: BoxKind | None = None
    table: str = ""
    row: int = 0
    result: QueryResult | None = None


@dataclass(frozen=True)
class SchemaResult:
    """Flattened schema listing for the explorer."""

    connection: str
    items: list[str] = field(default_factory=list)


class BackendError(Exception):
    """Base class for failures reported by a backend."""


class QueryError(BackendError):
    """The backend could not run a query."""


class ForeignKeyLookupError(BackendError):
    """The cell has no foreign-key target, or the target row is missing."""


class SchemaError(BackendError):
    """The schema could not be loaded."""


@runtime_checkable
class QueryBackend(Protocol):
    """Blocking backend operations.

    Implementations may take as long as they need; callers run them off the
    input loop and feed the outcome back as completion messages.
    """

    def run_query(self, connection: str, spec: QuerySpec) -> QueryResult:
        """Run a query. Raises QueryError on failure."""
        ...

    def lookup_foreign_key(self, cell: CellRef) -> TargetLocation:
        """Resolve a cell's referenced row. Raises ForeignKeyLookupError on failure."""
        ...

    def load_schema(self, connection: str) -> SchemaResult:
        """Load the schema listing for a connection. Raises SchemaError on failure."""
        ...

    def list_connections(self) -> list[str]:
        ...
