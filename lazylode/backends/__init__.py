"""Database backends behind the navigation core."""

from .base import (
    BackendError,
    CellRef,
    ForeignKeyLookupError,
    QueryBackend,
    QueryError,
    QueryResult,
    QuerySpec,
    SchemaError,
    SchemaResult,
    TargetLocation,
)
from .mock import MOCK_PROFILES, MockBackend

__all__ = [
    "MOCK_PROFILES",
    "BackendError",
    "CellRef",
    "ForeignKeyLookupError",
    "MockBackend",
    "QueryBackend",
    "QueryError",
    "QueryResult",
    "QuerySpec",
    "SchemaError",
    "SchemaResult",
    "TargetLocation",
]
