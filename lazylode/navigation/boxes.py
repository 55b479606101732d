"""Boxes and the content models they navigate."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lazylode.core.types import BOX_LABELS, BoxKind, EditingMode, ViewMode, VimMode
from lazylode.editor.editor import VimEditor
from lazylode.editor.register import YankRegister

from .layout import BoxSpec, Rect


@dataclass
class TableGrid:
    """Rows and columns shown in a data table, with a cell cursor."""

    table: str = ""
    columns: list[str] = field(default_factory=list)
    rows: list[tuple[Any, ...]] = field(default_factory=list)
    row: int = 0
    col: int = 0
    page: int = 0

    def load(self, table: str, columns: list[str], rows: list[tuple[Any, ...]], page: int = 0) -> None:
        self.table = table
        self.columns = list(columns)
        self.rows = [tuple(row) for row in rows]
        self.page = page
        self.row = 0
        self.col = 0

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def move_to(self, row: int, col: int | None = None) -> bool:
        """Move the cell cursor, clamped to the grid. Returns True if it moved."""
        old = (self.row, self.col)
        max_row = max(0, len(self.rows) - 1)
        max_col = max(0, len(self.columns) - 1)
        self.row = max(0, min(row, max_row))
        if col is not None:
            self.col = max(0, min(col, max_col))
        return (self.row, self.col) != old

    def move_by(self, rows: int = 0, cols: int = 0) -> bool:
        return self.move_to(self.row + rows, self.col + cols)

    @property
    def column_name(self) -> str | None:
        if 0 <= self.col < len(self.columns):
            return self.columns[self.col]
        return None

    def cell_value(self) -> Any:
        if self.is_empty or not self.columns:
            return None
        row = self.rows[self.row]
        return row[self.col] if self.col < len(row) else None

    def row_values(self) -> tuple[Any, ...]:
        if self.is_empty:
            return ()
        return self.rows[self.row]

    def set_cell(self, text: str) -> Any:
        """Store an edited cell, keeping numeric columns numeric. Returns the stored value."""
        previous = self.cell_value()
        value = _coerce_cell(text, previous)
        row = list(self.rows[self.row])
        row[self.col] = value
        self.rows[self.row] = tuple(row)
        return value


def _coerce_cell(text: str, previous: Any) -> Any:
    if text == "" and previous is None:
        return None
    if isinstance(previous, bool) or not isinstance(previous, (int, float)):
        return text
    try:
        return type(previous)(text)
    except ValueError:
        return text


@dataclass
class ItemList:
    """A flat list of labels with a selection index (trees are pre-flattened)."""

    items: list[str] = field(default_factory=list)
    index: int = 0

    def load(self, items: list[str]) -> None:
        self.items = list(items)
        self.index = 0

    def select(self, index: int) -> bool:
        old = self.index
        self.index = max(0, min(index, len(self.items) - 1)) if self.items else 0
        return self.index != old

    @property
    def selected(self) -> str | None:
        if 0 <= self.index < len(self.items):
            return self.items[self.index]
        return None


class Box:
    """A focusable unit inside a pane.

    Every box owns a ``VimEditor``: text boxes edit its buffer, tables
    use it as the cell editor, and the rest only use its count prefix.
    """

    def __init__(
        self,
        kind: BoxKind,
        register: YankRegister,
        *,
        name: str = "",
        rect: Rect | None = None,
        supports_editing: bool = False,
        editing_mode: EditingMode = EditingMode.VIM,
        text: str = "",
    ) -> None:
        self.kind = kind
        self.name = name or kind.value
        self.rect = rect or Rect(0, 0, 0, 0)
        self.supports_editing = supports_editing
        self.editing_mode = editing_mode
        self.view_mode = ViewMode.VIEW
        self.editor = VimEditor(register, text)
        self.grid = TableGrid() if kind is BoxKind.DATA_TABLE else None
        self.items = ItemList() if kind in (BoxKind.TREE_VIEW, BoxKind.LIST_VIEW, BoxKind.MODAL) else None
        self.title = ""

    @classmethod
    def from_spec(cls, spec: BoxSpec, register: YankRegister, editing_mode: EditingMode) -> Box:
        return cls(
            spec.kind,
            register,
            name=spec.name,
            rect=spec.rect,
            supports_editing=spec.supports_editing,
            editing_mode=editing_mode,
        )

    @property
    def label(self) -> str:
        return BOX_LABELS[self.kind]

    @property
    def is_text(self) -> bool:
        return self.kind is BoxKind.TEXT_INPUT

    @property
    def editing_cell(self) -> bool:
        """True while a table cell is open in the cell editor."""
        return self.grid is not None and self.view_mode is ViewMode.EDIT

    @property
    def vim_mode(self) -> VimMode | None:
        if self.editing_mode is EditingMode.VIM:
            return self.editor.mode
        return None

    def selection_value(self) -> Any:
        """The value a CONFIRM on this box refers to."""
        if self.items is not None:
            return self.items.selected
        if self.grid is not None:
            return self.grid.row_values() or None
        return self.editor.text

    def __repr__(self) -> str:
        return f"Box({self.kind.value}, name={self.name!r})"
