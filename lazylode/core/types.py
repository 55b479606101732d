"""Shared enums describing panes, boxes and editing modes."""

from __future__ import annotations

from enum import Enum


class PaneKind(Enum):
    """Top-level focusable regions of the interface."""

    CONNECTIONS = "connections"
    QUERY_INPUT = "query_input"
    RESULTS = "results"
    SCHEMA_EXPLORER = "schema_explorer"
    COMMAND_LINE = "command_line"


class BoxKind(Enum):
    """Focusable units inside a pane."""

    TEXT_INPUT = "text_input"
    DATA_TABLE = "data_table"
    TREE_VIEW = "tree_view"
    LIST_VIEW = "list_view"
    MODAL = "modal"


class EditingMode(Enum):
    """Style of text interaction for a box."""

    VIM = "vim"
    CURSOR = "cursor"


class VimMode(Enum):
    """Vim editing sub-modes."""

    NORMAL = "NORMAL"
    INSERT = "INSERT"
    VISUAL = "VISUAL"
    COMMAND = "COMMAND"


class ViewMode(Enum):
    """View/edit toggle used by boxes in cursor editing mode."""

    VIEW = "view"
    EDIT = "edit"


class Direction(Enum):
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


class PaneModifier(Enum):
    """Modifier combined with h/j/k/l for directional pane focus."""

    SHIFT = "shift"
    CTRL = "ctrl"
    ALT = "alt"


class PageDirection(Enum):
    FIRST = "first"
    LAST = "last"
    NEXT = "next"
    PREVIOUS = "previous"


PANE_LABELS: dict[PaneKind, str] = {
    PaneKind.CONNECTIONS: "Connections",
    PaneKind.QUERY_INPUT: "Query",
    PaneKind.RESULTS: "Results",
    PaneKind.SCHEMA_EXPLORER: "Schema",
    PaneKind.COMMAND_LINE: "Command",
}

BOX_LABELS: dict[BoxKind, str] = {
    BoxKind.TEXT_INPUT: "Text",
    BoxKind.DATA_TABLE: "Table",
    BoxKind.TREE_VIEW: "Tree",
    BoxKind.LIST_VIEW: "List",
    BoxKind.MODAL: "Modal",
}
