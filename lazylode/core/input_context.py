"""Read-only snapshot of the focus and mode state used to resolve keys."""

from __future__ import annotations

from dataclasses import dataclass

from .keymap import CURSOR_CONTEXTS, MODE_CONTEXTS, TABLE_EDIT_CONTEXT
from .types import BoxKind, EditingMode, PaneKind, ViewMode, VimMode


@dataclass(frozen=True)
class InputContext:
    """Everything the key resolver needs to know about the current focus."""

    pane: PaneKind
    box: BoxKind | None = None
    editing_mode: EditingMode = EditingMode.VIM
    vim_mode: VimMode | None = VimMode.NORMAL
    view_mode: ViewMode = ViewMode.VIEW
    supports_editing: bool = False
    pending_count: bool = False
    awaiting_char: bool = False
    editing_cell: bool = False
    modal_open: bool = False

    @property
    def is_text_box(self) -> bool:
        return self.box is BoxKind.TEXT_INPUT

    def editing_scope(self) -> str | None:
        """Name the editing-mode key context, if one applies."""
        if self.box is None:
            return None
        if self.editing_cell:
            return TABLE_EDIT_CONTEXT
        if self.editing_mode is EditingMode.VIM:
            if self.is_text_box and self.vim_mode is not None:
                return MODE_CONTEXTS[self.vim_mode]
            return None
        if self.supports_editing:
            return CURSOR_CONTEXTS[self.view_mode]
        return None

    def literal_text(self) -> bool:
        """True when printable keys should be inserted as text."""
        if self.awaiting_char or self.editing_cell:
            return True
        if not self.is_text_box:
            return False
        if self.editing_mode is EditingMode.VIM:
            return self.vim_mode in (VimMode.INSERT, VimMode.COMMAND)
        return self.supports_editing and self.view_mode is ViewMode.EDIT

    def counts_enabled(self) -> bool:
        """True when digit keys accumulate a numeric prefix."""
        return (
            self.box is not None
            and self.editing_mode is EditingMode.VIM
            and self.vim_mode is VimMode.NORMAL
            and not self.awaiting_char
            and not self.editing_cell
        )
