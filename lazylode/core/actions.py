"""The navigation action vocabulary.

Every chord resolves to one of these tags and every handler consumes
them; no handler looks at raw keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .types import BoxKind, Direction, PageDirection, PaneKind


class NavigationAction(Enum):
    """All actions the key resolver can produce."""

    # Pane focus
    FOCUS_CONNECTIONS = "focus_connections"
    FOCUS_QUERY_INPUT = "focus_query_input"
    FOCUS_RESULTS = "focus_results"
    FOCUS_SCHEMA_EXPLORER = "focus_schema_explorer"
    FOCUS_COMMAND_LINE = "focus_command_line"
    NEXT_PANE = "next_pane"
    PREVIOUS_PANE = "previous_pane"

    # Box focus
    FOCUS_TEXT_INPUT = "focus_text_input"
    FOCUS_DATA_TABLE = "focus_data_table"
    FOCUS_TREE_VIEW = "focus_tree_view"
    FOCUS_LIST_VIEW = "focus_list_view"
    FOCUS_MODAL = "focus_modal"
    NEXT_BOX = "next_box"
    PREVIOUS_BOX = "previous_box"

    # Directional focus moves (spatial)
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"

    # Cursor motions inside the active box
    CURSOR_LEFT = "cursor_left"
    CURSOR_RIGHT = "cursor_right"
    CURSOR_UP = "cursor_up"
    CURSOR_DOWN = "cursor_down"
    CURSOR_WORD_FORWARD = "cursor_word_forward"
    CURSOR_WORD_BACK = "cursor_word_back"
    CURSOR_LINE_START = "cursor_line_start"
    CURSOR_LINE_END = "cursor_line_end"
    CURSOR_FIRST = "cursor_first"
    CURSOR_LAST = "cursor_last"

    # Editing modes
    ENTER_INSERT_MODE = "enter_insert_mode"
    ENTER_APPEND_MODE = "enter_append_mode"
    ENTER_VISUAL_MODE = "enter_visual_mode"
    ENTER_COMMAND_MODE = "enter_command_mode"
    ENTER_NORMAL_MODE = "enter_normal_mode"
    TOGGLE_VIEW_EDIT = "toggle_view_edit"
    TOGGLE_EDITING_MODE = "toggle_editing_mode"

    # Text editing
    INSERT_CHAR = "insert_char"
    INSERT_NEWLINE = "insert_newline"
    DELETE_CHAR = "delete_char"
    DELETE_CHAR_BEFORE = "delete_char_before"
    DELETE_LINE = "delete_line"
    DELETE_OPERATOR = "delete_operator"
    OPEN_LINE_BELOW = "open_line_below"
    OPEN_LINE_ABOVE = "open_line_above"
    REPLACE_CHAR = "replace_char"
    UNDO = "undo"
    REDO = "redo"

    # Clipboard
    COPY = "copy"
    PASTE = "paste"
    CUT = "cut"
    YANK_OPERATOR = "yank_operator"
    YANK_WORD = "yank_word"
    YANK_TO_LINE_END = "yank_to_line_end"
    YANK_TO_LINE_START = "yank_to_line_start"
    COPY_CELL = "copy_cell"
    COPY_ROW = "copy_row"

    # Results
    FIRST_PAGE = "first_page"
    LAST_PAGE = "last_page"
    NEXT_PAGE = "next_page"
    PREVIOUS_PAGE = "previous_page"
    SORT = "sort"
    FOLLOW_FOREIGN_KEY = "follow_foreign_key"

    # Special
    SEARCH = "search"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    QUIT = "quit"


PANE_FOCUS_ACTIONS: dict[NavigationAction, PaneKind] = {
    NavigationAction.FOCUS_CONNECTIONS: PaneKind.CONNECTIONS,
    NavigationAction.FOCUS_QUERY_INPUT: PaneKind.QUERY_INPUT,
    NavigationAction.FOCUS_RESULTS: PaneKind.RESULTS,
    NavigationAction.FOCUS_SCHEMA_EXPLORER: PaneKind.SCHEMA_EXPLORER,
    NavigationAction.FOCUS_COMMAND_LINE: PaneKind.COMMAND_LINE,
}

BOX_FOCUS_ACTIONS: dict[NavigationAction, BoxKind] = {
    NavigationAction.FOCUS_TEXT_INPUT: BoxKind.TEXT_INPUT,
    NavigationAction.FOCUS_DATA_TABLE: BoxKind.DATA_TABLE,
    NavigationAction.FOCUS_TREE_VIEW: BoxKind.TREE_VIEW,
    NavigationAction.FOCUS_LIST_VIEW: BoxKind.LIST_VIEW,
    NavigationAction.FOCUS_MODAL: BoxKind.MODAL,
}

DIRECTIONAL_ACTIONS: dict[NavigationAction, Direction] = {
    NavigationAction.MOVE_LEFT: Direction.LEFT,
    NavigationAction.MOVE_RIGHT: Direction.RIGHT,
    NavigationAction.MOVE_UP: Direction.UP,
    NavigationAction.MOVE_DOWN: Direction.DOWN,
}

PAGE_ACTIONS: dict[NavigationAction, PageDirection] = {
    NavigationAction.FIRST_PAGE: PageDirection.FIRST,
    NavigationAction.LAST_PAGE: PageDirection.LAST,
    NavigationAction.NEXT_PAGE: PageDirection.NEXT,
    NavigationAction.PREVIOUS_PAGE: PageDirection.PREVIOUS,
}

MOTION_ACTIONS = frozenset(
    {
        NavigationAction.CURSOR_LEFT,
        NavigationAction.CURSOR_RIGHT,
        NavigationAction.CURSOR_UP,
        NavigationAction.CURSOR_DOWN,
        NavigationAction.CURSOR_WORD_FORWARD,
        NavigationAction.CURSOR_WORD_BACK,
        NavigationAction.CURSOR_LINE_START,
        NavigationAction.CURSOR_LINE_END,
        NavigationAction.CURSOR_FIRST,
        NavigationAction.CURSOR_LAST,
    }
)

# Actions a numeric prefix repeats.
REPEATABLE_ACTIONS = MOTION_ACTIONS | {
    NavigationAction.DELETE_CHAR,
    NavigationAction.DELETE_CHAR_BEFORE,
}

MODE_ENTRY_ACTIONS = frozenset(
    {
        NavigationAction.ENTER_INSERT_MODE,
        NavigationAction.ENTER_APPEND_MODE,
        NavigationAction.ENTER_VISUAL_MODE,
        NavigationAction.ENTER_COMMAND_MODE,
        NavigationAction.ENTER_NORMAL_MODE,
    }
)

EDIT_ACTIONS = frozenset(
    {
        NavigationAction.INSERT_CHAR,
        NavigationAction.INSERT_NEWLINE,
        NavigationAction.DELETE_CHAR,
        NavigationAction.DELETE_CHAR_BEFORE,
        NavigationAction.DELETE_LINE,
        NavigationAction.DELETE_OPERATOR,
        NavigationAction.OPEN_LINE_BELOW,
        NavigationAction.OPEN_LINE_ABOVE,
        NavigationAction.REPLACE_CHAR,
        NavigationAction.UNDO,
        NavigationAction.REDO,
        NavigationAction.PASTE,
        NavigationAction.CUT,
    }
)


@dataclass(frozen=True)
class ResolvedAction:
    """An action plus the literal character it carries, if any."""

    action: NavigationAction
    text: str = ""


@dataclass(frozen=True)
class CountDigit:
    """A digit intercepted as part of a numeric prefix."""

    digit: str


def parse_action(name: str) -> NavigationAction:
    """Look up an action by its configuration name.

    Raises:
        ValueError: If the name is not a known action.
    """
    try:
        return NavigationAction(name)
    except ValueError:
        raise ValueError(f"Unknown action: {name}") from None
