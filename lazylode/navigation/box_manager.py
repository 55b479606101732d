"""Per-pane box ownership and in-box action routing."""

from __future__ import annotations

from lazylode.backends.base import CellRef
from lazylode.core.actions import (
    BOX_FOCUS_ACTIONS,
    EDIT_ACTIONS,
    MODE_ENTRY_ACTIONS,
    MOTION_ACTIONS,
    PAGE_ACTIONS,
    REPEATABLE_ACTIONS,
    NavigationAction,
    ResolvedAction,
)
from lazylode.core.effects import NO_EFFECT, Effect, EffectKind
from lazylode.core.types import BoxKind, EditingMode, ViewMode, VimMode
from lazylode.editor.register import YankRegister
from lazylode.shared.debug_events import emit_debug_event

from .boxes import Box

A = NavigationAction

MOVED = Effect(EffectKind.CURSOR_MOVED)
CHANGED = Effect(EffectKind.BUFFER_CHANGED)
MODE_CHANGED = Effect(EffectKind.MODE_CHANGED)
FOCUS_CHANGED = Effect(EffectKind.FOCUS_CHANGED)


class BoxManager:
    """Owns the boxes of one pane and which of them is active.

    Exactly one box is active whenever the pane has any boxes. Only the
    active box receives edit actions.
    """

    def __init__(self, boxes: list[Box], register: YankRegister) -> None:
        self._boxes = list(boxes)
        self._register = register
        self._active = 0 if self._boxes else None

    @property
    def boxes(self) -> list[Box]:
        return list(self._boxes)

    @property
    def active_index(self) -> int | None:
        return self._active

    @property
    def active_box(self) -> Box | None:
        if self._active is None:
            return None
        return self._boxes[self._active]

    def box(self, kind: BoxKind) -> Box | None:
        for box in self._boxes:
            if box.kind is kind:
                return box
        return None

    # ─────────────────────────────────────────────────────────────────
    # Focus
    # ─────────────────────────────────────────────────────────────────

    def set_active(self, index: int) -> bool:
        if not self._boxes or not 0 <= index < len(self._boxes):
            return False
        changed = index != self._active
        self._active = index
        return changed

    def activate(self, box: Box) -> bool:
        if box not in self._boxes:
            return False
        return self.set_active(self._boxes.index(box))

    def focus_kind(self, kind: BoxKind) -> bool:
        """Activate the first box of ``kind``. Returns True if focus changed."""
        for index, box in enumerate(self._boxes):
            if box.kind is kind:
                return self.set_active(index)
        return False

    def cycle(self, step: int) -> bool:
        """Rotate the active index with wraparound."""
        if self._active is None or len(self._boxes) < 2:
            return False
        return self.set_active((self._active + step) % len(self._boxes))

    # ─────────────────────────────────────────────────────────────────
    # Dispatch
    # ─────────────────────────────────────────────────────────────────

    def dispatch(self, resolved: ResolvedAction, count: int = 1) -> Effect | None:
        """Route an action to the active box.

        Returns None when the action is not a box-level action, so the
        caller can hand it to the navigation manager.
        """
        box = self.active_box
        if box is None:
            return None
        action = resolved.action

        if action in BOX_FOCUS_ACTIONS:
            return None
        if action is A.TOGGLE_EDITING_MODE:
            return self._toggle_editing_mode(box)
        if action is A.TOGGLE_VIEW_EDIT:
            return self._toggle_view_edit(box)
        if box.editing_cell:
            return self._dispatch_cell_edit(box, resolved)

        if action not in REPEATABLE_ACTIONS or (box.is_text and box.editor.pending_operator is not None):
            count = 1
        effect: Effect | None = None
        for _ in range(count):
            step = self._dispatch_once(box, resolved)
            if step is None:
                return effect
            if step.is_none:
                break
            effect = step
        return effect or NO_EFFECT

    def _dispatch_once(self, box: Box, resolved: ResolvedAction) -> Effect | None:
        if box.is_text:
            return self._dispatch_text(box, resolved)
        if box.grid is not None:
            return self._dispatch_table(box, resolved)
        return self._dispatch_items(box, resolved)

    def _toggle_editing_mode(self, box: Box) -> Effect:
        if not (box.is_text and box.supports_editing):
            return self._ignored(box, A.TOGGLE_EDITING_MODE)
        box.editor.enter_normal_mode()
        box.view_mode = ViewMode.VIEW
        box.editing_mode = EditingMode.CURSOR if box.editing_mode is EditingMode.VIM else EditingMode.VIM
        return MODE_CHANGED

    def _toggle_view_edit(self, box: Box) -> Effect:
        if not box.supports_editing:
            return self._ignored(box, A.TOGGLE_VIEW_EDIT)
        if box.grid is not None:
            if box.editing_cell:
                return self._commit_cell(box)
            return self._open_cell(box)
        if box.editing_mode is EditingMode.CURSOR:
            box.view_mode = ViewMode.EDIT if box.view_mode is ViewMode.VIEW else ViewMode.VIEW
            return MODE_CHANGED
        if box.editor.mode is VimMode.NORMAL:
            return box.editor.enter_insert_mode()
        return box.editor.enter_normal_mode()

    # Text boxes

    def _dispatch_text(self, box: Box, resolved: ResolvedAction) -> Effect | None:
        action = resolved.action
        if not box.supports_editing:
            if action in MOTION_ACTIONS:
                return MOVED if box.editor.move(action) else NO_EFFECT
            if action in EDIT_ACTIONS or action in MODE_ENTRY_ACTIONS:
                return self._ignored(box, action)
            return None
        if box.editing_mode is EditingMode.VIM:
            return box.editor.handle(resolved)
        return self._dispatch_cursor_text(box, resolved)

    def _dispatch_cursor_text(self, box: Box, resolved: ResolvedAction) -> Effect | None:
        action = resolved.action
        editor = box.editor
        if action in MOTION_ACTIONS:
            return MOVED if editor.move(action) else NO_EFFECT
        if action is A.COPY:
            editor.register.set(editor.text)
            return NO_EFFECT
        if action in MODE_ENTRY_ACTIONS:
            return self._ignored(box, action)
        if action not in EDIT_ACTIONS:
            return None
        if box.view_mode is ViewMode.VIEW:
            return self._ignored(box, action)
        if action is A.INSERT_CHAR:
            return editor.insert_text(resolved.text)
        if action is A.INSERT_NEWLINE:
            return editor.insert_text("\n")
        if action is A.DELETE_CHAR:
            return editor.delete_at_cursor()
        if action is A.DELETE_CHAR_BEFORE:
            return editor.delete_before_cursor()
        if action is A.PASTE:
            return editor.insert_text(editor.register.content)
        if action is A.CUT:
            editor.register.set(editor.text)
            editor.set_text("")
            return CHANGED
        if action is A.UNDO:
            return editor.undo()
        if action is A.REDO:
            return editor.redo()
        return self._ignored(box, action)

    # Data tables

    def _dispatch_table(self, box: Box, resolved: ResolvedAction) -> Effect | None:
        action = resolved.action
        grid = box.grid
        if grid is None:
            return None
        moves = {
            A.CURSOR_UP: lambda: grid.move_by(rows=-1),
            A.CURSOR_DOWN: lambda: grid.move_by(rows=1),
            A.CURSOR_LEFT: lambda: grid.move_by(cols=-1),
            A.CURSOR_RIGHT: lambda: grid.move_by(cols=1),
            A.CURSOR_WORD_BACK: lambda: grid.move_by(cols=-1),
            A.CURSOR_WORD_FORWARD: lambda: grid.move_by(cols=1),
            A.CURSOR_LINE_START: lambda: grid.move_to(grid.row, 0),
            A.CURSOR_LINE_END: lambda: grid.move_to(grid.row, len(grid.columns) - 1),
            A.CURSOR_FIRST: lambda: grid.move_to(0),
            A.CURSOR_LAST: lambda: grid.move_to(len(grid.rows) - 1),
        }
        if action in moves:
            return MOVED if moves[action]() else NO_EFFECT
        if action in (A.COPY, A.COPY_CELL):
            value = grid.cell_value()
            if value is None:
                return NO_EFFECT
            self._register.set(str(value))
            return NO_EFFECT
        if action is A.COPY_ROW:
            if grid.is_empty:
                return NO_EFFECT
            self._register.set("\t".join("" if v is None else str(v) for v in grid.row_values()))
            return NO_EFFECT
        if action in PAGE_ACTIONS:
            return Effect(EffectKind.REQUEST_PAGE_CHANGE, page=PAGE_ACTIONS[action], target=grid.table)
        if action is A.SORT:
            if grid.column_name is None:
                return NO_EFFECT
            return Effect(EffectKind.REQUEST_SORT, column=grid.column_name, target=grid.table)
        if action is A.FOLLOW_FOREIGN_KEY:
            return self._foreign_key_effect(box)
        if action in EDIT_ACTIONS or action in MODE_ENTRY_ACTIONS:
            return self._ignored(box, action)
        return None

    def _open_cell(self, box: Box) -> Effect:
        grid = box.grid
        if grid is None or grid.is_empty or grid.column_name is None:
            return self._ignored(box, A.TOGGLE_VIEW_EDIT)
        value = grid.cell_value()
        box.editor.set_text("" if value is None else str(value))
        box.editor.buffer.move_to(len(box.editor.text))
        box.view_mode = ViewMode.EDIT
        return MODE_CHANGED

    def _commit_cell(self, box: Box) -> Effect:
        grid = box.grid
        box.view_mode = ViewMode.VIEW
        if grid is None or grid.is_empty:
            return MODE_CHANGED
        value = grid.set_cell(box.editor.text)
        emit_debug_event("table.cell_edited", category="navigation", table=grid.table, column=grid.column_name)
        cell = CellRef(table=grid.table, column=grid.column_name or "", row=grid.row, value=value)
        return Effect(EffectKind.BUFFER_CHANGED, cell=cell, target=grid.table)

    def _dispatch_cell_edit(self, box: Box, resolved: ResolvedAction) -> Effect | None:
        """Route keys while a table cell is open; the grid cursor stays put."""
        action = resolved.action
        editor = box.editor
        if action is A.CONFIRM:
            return self._commit_cell(box)
        if action is A.CANCEL:
            box.view_mode = ViewMode.VIEW
            return MODE_CHANGED
        if action is A.INSERT_CHAR:
            return editor.insert_text(resolved.text)
        if action is A.DELETE_CHAR:
            return editor.delete_at_cursor()
        if action is A.DELETE_CHAR_BEFORE:
            return editor.delete_before_cursor()
        if action is A.PASTE:
            return editor.insert_text(editor.register.content.replace("\n", " "))
        if action in MOTION_ACTIONS:
            return MOVED if editor.move(action) else NO_EFFECT
        if action in EDIT_ACTIONS or action in MODE_ENTRY_ACTIONS:
            return self._ignored(box, action)
        return None

    def _foreign_key_effect(self, box: Box) -> Effect:
        grid = box.grid
        if grid is None or grid.is_empty or grid.column_name is None:
            return self._ignored(box, A.FOLLOW_FOREIGN_KEY)
        cell = CellRef(table=grid.table, column=grid.column_name, row=grid.row, value=grid.cell_value())
        return Effect(EffectKind.REQUEST_FOREIGN_KEY_FOLLOW, cell=cell)

    # Lists and trees

    def _dispatch_items(self, box: Box, resolved: ResolvedAction) -> Effect | None:
        action = resolved.action
        items = box.items
        if items is None:
            return None
        moves = {
            A.CURSOR_UP: lambda: items.select(items.index - 1),
            A.CURSOR_DOWN: lambda: items.select(items.index + 1),
            A.CURSOR_FIRST: lambda: items.select(0),
            A.CURSOR_LAST: lambda: items.select(len(items.items) - 1),
        }
        if action in moves:
            return MOVED if moves[action]() else NO_EFFECT
        if action in MOTION_ACTIONS:
            return NO_EFFECT
        if action is A.COPY:
            if items.selected is not None:
                self._register.set(items.selected)
            return NO_EFFECT
        if action in EDIT_ACTIONS or action in MODE_ENTRY_ACTIONS:
            return self._ignored(box, action)
        return None

    def _ignored(self, box: Box, action: NavigationAction) -> Effect:
        emit_debug_event(
            "box.ignored",
            category="navigation",
            box=box.name,
            kind=box.kind.value,
            action=action.value,
        )
        return NO_EFFECT
