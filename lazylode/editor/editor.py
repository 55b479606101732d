"""Vim-style modal editor for a single box.

The VimEditor owns a text buffer, a vim state (mode, visual anchor,
count prefix) and a command line. It consumes resolved navigation
actions and reports what happened as an ``Effect``. The yank register is
shared between editors and passed in by the owner.
"""

from __future__ import annotations

from lazylode.core.actions import MOTION_ACTIONS, NavigationAction, ResolvedAction
from lazylode.core.effects import NO_EFFECT, Effect, EffectKind, notify
from lazylode.core.types import VimMode
from lazylode.shared.debug_events import emit_debug_event

from .buffer import TextBuffer
from .command import CommandAction, CommandResult, VimCommandHandler
from .motions import apply_motion
from .register import YankRegister
from .state import VimState

MAX_HISTORY = 200

A = NavigationAction

MOVED = Effect(EffectKind.CURSOR_MOVED)
CHANGED = Effect(EffectKind.BUFFER_CHANGED)
MODE_CHANGED = Effect(EffectKind.MODE_CHANGED)

# Direct yank actions and the span each one copies
YANK_SPANS = {
    A.YANK_WORD: "word",
    A.YANK_TO_LINE_END: "line_end",
    A.YANK_TO_LINE_START: "line_start",
}

# Motions an operator accepts after d or y
OPERATOR_SPANS = {
    "yank": {
        A.CURSOR_WORD_FORWARD: "word",
        A.CURSOR_LINE_END: "line_end",
        A.CURSOR_LINE_START: "line_start",
    },
    "delete": {
        A.CURSOR_WORD_FORWARD: "word_forward",
        A.CURSOR_LINE_END: "line_end",
        A.CURSOR_LINE_START: "line_start",
    },
}


class VimEditor:
    """Main vim emulation controller for one buffer."""

    def __init__(self, register: YankRegister, text: str = "") -> None:
        self._register = register
        self._buffer = TextBuffer(text)
        self._state = VimState()
        self._command_handler = VimCommandHandler()
        self._undo: list[tuple[str, int]] = []
        self._redo: list[tuple[str, int]] = []

    # ─────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────

    @property
    def mode(self) -> VimMode:
        """Current vim mode."""
        return self._state.mode

    @property
    def state(self) -> VimState:
        return self._state

    @property
    def buffer(self) -> TextBuffer:
        return self._buffer

    @property
    def text(self) -> str:
        return self._buffer.text

    @property
    def cursor(self) -> int:
        return self._buffer.cursor

    @property
    def register(self) -> YankRegister:
        return self._register

    @property
    def command_buffer(self) -> str:
        """Get the current command buffer."""
        return self._command_handler.buffer

    @property
    def pending_replace(self) -> bool:
        return self._state.pending_replace

    @property
    def pending_operator(self) -> str | None:
        return self._state.pending_operator

    def set_text(self, text: str) -> None:
        """Replace the buffer contents, keeping the cursor clamped."""
        self._push_undo()
        self._buffer.set_text(text)

    # ─────────────────────────────────────────────────────────────────
    # Selection
    # ─────────────────────────────────────────────────────────────────

    def selection(self) -> tuple[int, int] | None:
        """Inclusive (start, end) of the visual selection, clamped to the buffer."""
        anchor = self._state.visual_anchor
        if self._state.mode is not VimMode.VISUAL or anchor is None:
            return None
        length = len(self._buffer)
        if length == 0:
            return (0, 0)
        start = max(0, min(anchor, self.cursor))
        end = min(max(anchor, self.cursor), length - 1)
        return (min(start, end), end)

    def selected_text(self) -> str:
        sel = self.selection()
        if sel is None or not self.text:
            return ""
        return self.text[sel[0] : sel[1] + 1]

    # ─────────────────────────────────────────────────────────────────
    # Count prefix
    # ─────────────────────────────────────────────────────────────────

    @property
    def has_count(self) -> bool:
        return self._state.has_count

    @property
    def count_text(self) -> str:
        return self._state.input_buffer

    def accumulate_digit(self, digit: str) -> bool:
        return self._state.accumulate_digit(digit)

    def consume_count(self) -> int:
        return self._state.consume_count()

    def clear_count(self) -> None:
        self._state.clear_count()

    # ─────────────────────────────────────────────────────────────────
    # Primitive operations (also used by cursor editing mode)
    # ─────────────────────────────────────────────────────────────────

    def move(self, action: NavigationAction) -> bool:
        return apply_motion(self._buffer, action)

    def insert_text(self, text: str) -> Effect:
        if not text:
            return NO_EFFECT
        self._push_undo()
        self._buffer.insert(text)
        return CHANGED

    def delete_at_cursor(self) -> Effect:
        if self.cursor >= len(self._buffer):
            return NO_EFFECT
        self._push_undo()
        self._buffer.delete_range(self.cursor, self.cursor + 1)
        return CHANGED

    def delete_before_cursor(self) -> Effect:
        if self.cursor == 0:
            return NO_EFFECT
        self._push_undo()
        self._buffer.delete_range(self.cursor - 1, self.cursor)
        return CHANGED

    def undo(self) -> Effect:
        if not self._undo:
            return NO_EFFECT
        self._redo.append((self.text, self.cursor))
        text, cursor = self._undo.pop()
        self._buffer.set_text(text, cursor)
        return CHANGED

    def redo(self) -> Effect:
        if not self._redo:
            return NO_EFFECT
        self._undo.append((self.text, self.cursor))
        text, cursor = self._redo.pop()
        self._buffer.set_text(text, cursor)
        return CHANGED

    def _push_undo(self) -> None:
        self._undo.append((self.text, self.cursor))
        if len(self._undo) > MAX_HISTORY:
            del self._undo[0]
        self._redo.clear()

    # ─────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────

    def handle(self, resolved: ResolvedAction) -> Effect | None:
        """Apply one resolved action.

        Returns the resulting effect, ``NO_EFFECT`` for an action that is
        invalid in the current mode, or None for actions the editor does
        not own (the caller routes those elsewhere).
        """
        mode = self._state.mode
        if mode is VimMode.INSERT:
            return self._handle_insert_mode(resolved)
        if mode is VimMode.VISUAL:
            return self._handle_visual_mode(resolved)
        if mode is VimMode.COMMAND:
            return self._handle_command_mode(resolved)
        return self._handle_normal_mode(resolved)

    def enter_insert_mode(self, append: bool = False) -> Effect:
        if append:
            self._buffer.move_to(self.cursor + 1)
        self._state.enter_mode(VimMode.INSERT)
        return MODE_CHANGED

    def enter_normal_mode(self) -> Effect:
        state = self._state
        if state.mode is VimMode.NORMAL and not state.pending_replace and state.pending_operator is None:
            return NO_EFFECT
        self._command_handler.cancel()
        self._state.enter_mode(VimMode.NORMAL)
        return MODE_CHANGED

    def enter_visual_mode(self) -> Effect:
        self._state.start_visual(self.cursor)
        return MODE_CHANGED

    def enter_command_mode(self) -> Effect:
        self._command_handler.start()
        self._state.enter_mode(VimMode.COMMAND)
        return MODE_CHANGED

    # ─────────────────────────────────────────────────────────────────
    # Mode handlers
    # ─────────────────────────────────────────────────────────────────

    def _handle_normal_mode(self, resolved: ResolvedAction) -> Effect | None:
        action = resolved.action

        if self._state.pending_replace:
            if action is A.INSERT_CHAR:
                self._state.pending_replace = False
                if self._buffer.char_at_cursor in ("", "\n"):
                    return NO_EFFECT
                self._push_undo()
                self._buffer.replace_at_cursor(resolved.text)
                return CHANGED
            if action in (A.CANCEL, A.ENTER_NORMAL_MODE):
                self._state.pending_replace = False
                return MODE_CHANGED

        if self._state.pending_operator is not None:
            return self._finish_operator(action)

        if action in MOTION_ACTIONS:
            return MOVED if self.move(action) else NO_EFFECT
        if action is A.ENTER_INSERT_MODE:
            return self.enter_insert_mode()
        if action is A.ENTER_APPEND_MODE:
            return self.enter_insert_mode(append=True)
        if action is A.ENTER_VISUAL_MODE:
            return self.enter_visual_mode()
        if action is A.ENTER_COMMAND_MODE:
            return self.enter_command_mode()
        if action is A.ENTER_NORMAL_MODE:
            return NO_EFFECT
        if action is A.DELETE_CHAR:
            return self.delete_at_cursor()
        if action is A.DELETE_CHAR_BEFORE:
            return self.delete_before_cursor()
        if action is A.REPLACE_CHAR:
            self._state.pending_replace = True
            return MODE_CHANGED
        if action is A.DELETE_LINE or action is A.CUT:
            return self._delete_line()
        if action is A.COPY:
            return self._yank_line()
        if action is A.DELETE_OPERATOR:
            self._state.pending_operator = "delete"
            return MODE_CHANGED
        if action is A.YANK_OPERATOR:
            self._state.pending_operator = "yank"
            return MODE_CHANGED
        if action in YANK_SPANS:
            return self._yank_span(YANK_SPANS[action])
        if action is A.OPEN_LINE_BELOW:
            return self._open_line(below=True)
        if action is A.OPEN_LINE_ABOVE:
            return self._open_line(below=False)
        if action is A.PASTE:
            return self._paste()
        if action is A.UNDO:
            return self.undo()
        if action is A.REDO:
            return self.redo()
        if action in (A.INSERT_CHAR, A.INSERT_NEWLINE):
            return self._invalid(action)
        return None

    def _handle_insert_mode(self, resolved: ResolvedAction) -> Effect | None:
        action = resolved.action

        if action in (A.ENTER_NORMAL_MODE, A.CANCEL):
            return self.enter_normal_mode()
        if action is A.INSERT_CHAR:
            return self.insert_text(resolved.text)
        if action is A.INSERT_NEWLINE:
            return self.insert_text("\n")
        if action is A.DELETE_CHAR_BEFORE:
            return self.delete_before_cursor()
        if action is A.DELETE_CHAR:
            return self.delete_at_cursor()
        if action in MOTION_ACTIONS:
            return MOVED if self.move(action) else NO_EFFECT
        if action is A.PASTE:
            return self._paste()
        if action in (A.UNDO, A.REDO, A.REPLACE_CHAR, A.DELETE_LINE):
            return self._invalid(action)
        if action in (
            A.ENTER_INSERT_MODE,
            A.ENTER_APPEND_MODE,
            A.ENTER_VISUAL_MODE,
            A.ENTER_COMMAND_MODE,
        ):
            return self._invalid(action)
        return None

    def _handle_visual_mode(self, resolved: ResolvedAction) -> Effect | None:
        action = resolved.action

        if action in (A.ENTER_NORMAL_MODE, A.CANCEL, A.ENTER_VISUAL_MODE):
            return self.enter_normal_mode()
        if action in MOTION_ACTIONS:
            return MOVED if self.move(action) else NO_EFFECT
        if action is A.COPY:
            sel = self.selection()
            self._register.set(self.selected_text())
            start = sel[0] if sel else self.cursor
            self._state.enter_mode(VimMode.NORMAL)
            self._buffer.move_to(start)
            return MODE_CHANGED
        if action in (A.CUT, A.DELETE_CHAR, A.DELETE_LINE):
            sel = self.selection()
            self._state.enter_mode(VimMode.NORMAL)
            if sel is None or not self.text:
                return MODE_CHANGED
            self._push_undo()
            removed = self._buffer.delete_range(sel[0], sel[1] + 1)
            self._register.set(removed)
            return CHANGED
        if action in (
            A.INSERT_CHAR,
            A.INSERT_NEWLINE,
            A.DELETE_CHAR_BEFORE,
            A.REPLACE_CHAR,
            A.PASTE,
            A.UNDO,
            A.REDO,
            A.ENTER_INSERT_MODE,
            A.ENTER_APPEND_MODE,
            A.ENTER_COMMAND_MODE,
        ):
            return self._invalid(action)
        return None

    def _handle_command_mode(self, resolved: ResolvedAction) -> Effect | None:
        action = resolved.action

        if action in (A.CANCEL, A.ENTER_NORMAL_MODE):
            return self.enter_normal_mode()
        if action is A.INSERT_CHAR:
            self._command_handler.add_char(resolved.text)
            return CHANGED
        if action is A.DELETE_CHAR_BEFORE:
            if not self._command_handler.backspace():
                return self.enter_normal_mode()
            return CHANGED
        if action is A.CONFIRM:
            result = self._command_handler.execute()
            self._state.enter_mode(VimMode.NORMAL)
            return self._command_effect(result)
        if action in MOTION_ACTIONS or action in (A.DELETE_CHAR, A.INSERT_NEWLINE, A.PASTE):
            return self._invalid(action)
        return None

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    def _command_effect(self, result: CommandResult) -> Effect:
        emit_debug_event(
            "vim.command",
            category="editor",
            action=result.action.value,
            error=result.error,
        )
        if result.action in (CommandAction.QUIT, CommandAction.QUIT_FORCE):
            return Effect(EffectKind.REQUEST_QUIT)
        if result.action is CommandAction.RUN:
            return Effect(EffectKind.REQUEST_QUERY, query=self.text)
        if result.action is CommandAction.GOTO_LINE and result.line is not None:
            self._buffer.move_to(self._buffer.get_line_n(result.line))
            return MOVED
        if result.message:
            return notify(result.message, error=result.error)
        return MODE_CHANGED

    def _current_line_span(self) -> tuple[int, int]:
        start = self._buffer.line_start()
        end = self._buffer.line_end()
        if end < len(self._buffer):
            end += 1  # include the newline
        elif start > 0:
            start -= 1  # last line: take the preceding newline instead
        return start, end

    def _yank_line(self) -> Effect:
        self._register.set(self._buffer.current_line + "\n", linewise=True)
        return NO_EFFECT

    def _delete_line(self) -> Effect:
        if not self.text:
            return NO_EFFECT
        line = self._buffer.current_line
        start, end = self._current_line_span()
        self._push_undo()
        self._buffer.delete_range(start, end)
        self._buffer.move_to(self._buffer.line_start(self._buffer.cursor))
        self._register.set(line + "\n", linewise=True)
        return CHANGED

    def _finish_operator(self, action: NavigationAction) -> Effect:
        operator = self._state.pending_operator
        self._state.pending_operator = None
        if action is A.DELETE_OPERATOR and operator == "delete":
            return self._delete_line()
        if action is A.YANK_OPERATOR and operator == "yank":
            return self._yank_line()
        if action in (A.CANCEL, A.ENTER_NORMAL_MODE):
            return MODE_CHANGED
        span = OPERATOR_SPANS.get(operator or "", {}).get(action)
        if span is None:
            return self._invalid(action)
        if operator == "yank":
            return self._yank_span(span)
        return self._delete_span(span)

    def _span(self, name: str) -> tuple[int, int]:
        buf = self._buffer
        if name == "word":
            return buf.word_bounds()
        if name == "line_end":
            return (buf.cursor, buf.line_end())
        if name == "line_start":
            return (buf.line_start(), buf.cursor)
        # word_forward stops at the end of the line like vim's dw
        return (buf.cursor, min(buf.get_word_start_forward(), buf.line_end()))

    def _yank_span(self, name: str) -> Effect:
        start, end = self._span(name)
        if start == end:
            return NO_EFFECT
        self._register.set(self.text[start:end])
        return NO_EFFECT

    def _delete_span(self, name: str) -> Effect:
        start, end = self._span(name)
        if start == end:
            return NO_EFFECT
        self._push_undo()
        self._register.set(self._buffer.delete_range(start, end))
        return CHANGED

    def _open_line(self, below: bool) -> Effect:
        self._push_undo()
        if below:
            self._buffer.move_to(self._buffer.line_end())
            self._buffer.insert("\n")
        else:
            self._buffer.move_to(self._buffer.line_start())
            self._buffer.insert("\n")
            self._buffer.move_to(self.cursor - 1)
        self._state.enter_mode(VimMode.INSERT)
        return CHANGED

    def _paste(self) -> Effect:
        register = self._register.get()
        if not register.content:
            return NO_EFFECT
        if register.linewise:
            # Linewise text goes below the current line.
            self._buffer.move_to(self._buffer.line_end())
            content = register.content.rstrip("\n")
            return self.insert_text("\n" + content)
        return self.insert_text(register.content)

    def _invalid(self, action: NavigationAction) -> Effect:
        emit_debug_event(
            "vim.invalid_transition",
            category="editor",
            mode=self._state.mode.value,
            action=action.value,
        )
        return NO_EFFECT
