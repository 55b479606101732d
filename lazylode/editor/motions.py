"""Cursor motions over a ``TextBuffer``, keyed by navigation action."""

from __future__ import annotations

from typing import Callable

from lazylode.core.actions import NavigationAction

from .buffer import TextBuffer

MotionFunc = Callable[[TextBuffer], int]

MOTIONS: dict[NavigationAction, MotionFunc] = {
    NavigationAction.CURSOR_LEFT: TextBuffer.get_left,
    NavigationAction.CURSOR_RIGHT: TextBuffer.get_right,
    NavigationAction.CURSOR_UP: TextBuffer.get_up,
    NavigationAction.CURSOR_DOWN: TextBuffer.get_down,
    NavigationAction.CURSOR_WORD_FORWARD: TextBuffer.get_word_start_forward,
    NavigationAction.CURSOR_WORD_BACK: TextBuffer.get_word_start_backward,
    NavigationAction.CURSOR_LINE_START: TextBuffer.get_line_start,
    NavigationAction.CURSOR_LINE_END: TextBuffer.get_line_end,
    NavigationAction.CURSOR_FIRST: TextBuffer.get_document_start,
    NavigationAction.CURSOR_LAST: TextBuffer.get_document_end,
}


def apply_motion(buffer: TextBuffer, action: NavigationAction) -> bool:
    """Move the buffer cursor for a motion action. Returns True if it moved."""
    motion = MOTIONS.get(action)
    if motion is None:
        return False
    return buffer.move_to(motion(buffer))
