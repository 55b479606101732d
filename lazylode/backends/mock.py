"""In-memory backend used by ``--mock`` and by the tests."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from typing import Any

from lazylode.core.types import BoxKind, PaneKind

from .base import (
    CellRef,
    ForeignKeyLookupError,
    QueryError,
    QueryResult,
    QuerySpec,
    SchemaError,
    SchemaResult,
    TargetLocation,
)

SELECT_RE = re.compile(
    r"^\s*select\s+(?P<columns>.+?)\s+from\s+(?P<table>\w+)"
    r"(?:\s+where\s+(?P<where_col>\w+)\s*=\s*(?P<where_val>'[^']*'|\S+))?\s*;?\s*$",
    re.IGNORECASE | re.DOTALL,
)


@dataclass
class MockTable:
    columns: list[str]
    rows: list[tuple[Any, ...]]
    # column -> (referenced table, referenced column)
    foreign_keys: dict[str, tuple[str, str]] = field(default_factory=dict)


def _shop_profile() -> dict[str, MockTable]:
    return {
        "customers": MockTable(
            ["id", "name", "email"],
            [
                (1, "Ada", "ada@example.com"),
                (2, "Grace", "grace@example.com"),
                (3, "Linus", "linus@example.com"),
            ],
        ),
        "orders": MockTable(
            ["id", "customer_id", "total"],
            [
                (10, 2, 25.5),
                (11, 1, 12.0),
                (12, 3, 99.9),
                (13, 2, 5.25),
            ],
            foreign_keys={"customer_id": ("customers", "id")},
        ),
    }


def _empty_profile() -> dict[str, MockTable]:
    return {}


MOCK_PROFILES = {
    "shop": _shop_profile,
    "empty": _empty_profile,
}


def _parse_literal(raw: str) -> Any:
    if raw.startswith("'") and raw.endswith("'"):
        return raw[1:-1]
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        return raw


class MockBackend:
    """Serves a fixed set of tables from memory.

    Understands ``SELECT cols FROM table [WHERE col = value]`` and nothing
    else. ``latency`` adds an artificial delay to every call.
    """

    def __init__(self, profile: str = "shop", latency: float = 0.0) -> None:
        factory = MOCK_PROFILES.get(profile)
        if factory is None:
            raise ValueError(f"Unknown mock profile: {profile}")
        self.profile = profile
        self.latency = latency
        self.tables = factory()
        self.queries: list[str] = []

    def list_connections(self) -> list[str]:
        return [f"mock:{self.profile}"]

    def _sleep(self) -> None:
        if self.latency > 0:
            time.sleep(self.latency)

    def _table(self, name: str, error: type[Exception]) -> MockTable:
        table = self.tables.get(name.lower())
        if table is None:
            raise error(f"Unknown table: {name}")
        return table

    def run_query(self, connection: str, spec: QuerySpec) -> QueryResult:
        self._sleep()
        self.queries.append(spec.text)
        match = SELECT_RE.match(spec.text)
        if match is None:
            raise QueryError(f"Unsupported query: {spec.text.strip()[:60]}")

        table_name = match.group("table").lower()
        table = self._table(table_name, QueryError)

        requested = [c.strip() for c in match.group("columns").split(",")]
        if requested == ["*"]:
            columns = list(table.columns)
        else:
            unknown = [c for c in requested if c not in table.columns]
            if unknown:
                raise QueryError(f"Unknown column: {unknown[0]}")
            columns = requested
        indexes = [table.columns.index(c) for c in columns]

        rows = list(table.rows)
        if match.group("where_col"):
            where_col = match.group("where_col")
            if where_col not in table.columns:
                raise QueryError(f"Unknown column: {where_col}")
            value = _parse_literal(match.group("where_val"))
            pos = table.columns.index(where_col)
            rows = [row for row in rows if row[pos] == value]

        if spec.sort_column is not None:
            if spec.sort_column not in table.columns:
                raise QueryError(f"Unknown column: {spec.sort_column}")
            pos = table.columns.index(spec.sort_column)
            rows.sort(key=lambda row: (row[pos] is None, row[pos]))

        total = len(rows)
        start = spec.page * spec.page_size
        page_rows = rows[start : start + spec.page_size]
        return QueryResult(
            columns=columns,
            rows=[tuple(row[i] for i in indexes) for row in page_rows],
            table=table_name,
            page=spec.page,
            row_count=total,
        )

    def lookup_foreign_key(self, cell: CellRef) -> TargetLocation:
        self._sleep()
        table = self._table(cell.table, ForeignKeyLookupError)
        reference = table.foreign_keys.get(cell.column)
        if reference is None:
            raise ForeignKeyLookupError(f"{cell.table}.{cell.column} is not a foreign key")
        ref_table_name, ref_column = reference
        ref_table = self._table(ref_table_name, ForeignKeyLookupError)
        pos = ref_table.columns.index(ref_column)
        for index, row in enumerate(ref_table.rows):
            if row[pos] == cell.value:
                return TargetLocation(
                    pane=PaneKind.RESULTS,
                    box=BoxKind.DATA_TABLE,
                    table=ref_table_name,
                    row=index,
                    result=QueryResult(
                        columns=list(ref_table.columns),
                        rows=list(ref_table.rows),
                        table=ref_table_name,
                        row_count=len(ref_table.rows),
                    ),
                )
        raise ForeignKeyLookupError(f"No {ref_table_name} row with {ref_column} = {cell.value!r}")

    def load_schema(self, connection: str) -> SchemaResult:
        self._sleep()
        if connection not in self.list_connections():
            raise SchemaError(f"Unknown connection: {connection}")
        items: list[str] = []
        for name in sorted(self.tables):
            table = self.tables[name]
            items.append(name)
            for column in table.columns:
                suffix = ""
                if column in table.foreign_keys:
                    ref_table, ref_column = table.foreign_keys[column]
                    suffix = f" -> {ref_table}.{ref_column}"
                items.append(f"  {column}{suffix}")
        return SchemaResult(connection=connection, items=items)
