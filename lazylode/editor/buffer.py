"""Flat text buffer with an offset cursor.

Provides vim-style navigation over a plain string, similar to a
prompt_toolkit ``Document``. Every motion returns a new offset and
leaves the cursor alone; ``move_to`` applies it. Offsets are always
clamped to ``[0, len(text)]``.
"""

from __future__ import annotations

import re

# Word characters for vim's definition of a "word"
WORD_CHARS = re.compile(r"[a-zA-Z0-9_]")


def _char_class(char: str) -> int:
    """Get character class: 0=whitespace, 1=word, 2=punctuation."""
    if char.isspace():
        return 0
    if WORD_CHARS.match(char):
        return 1
    return 2


class TextBuffer:
    """Mutable text plus a cursor offset."""

    def __init__(self, text: str = "", cursor: int = 0) -> None:
        self._text = text
        self._cursor = 0
        self.move_to(cursor)

    # ─────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._text)

    @property
    def lines(self) -> list[str]:
        return self._text.split("\n")

    @property
    def line_count(self) -> int:
        return self._text.count("\n") + 1

    @property
    def row(self) -> int:
        """Current cursor row (0-indexed)."""
        return self._text.count("\n", 0, self._cursor)

    @property
    def col(self) -> int:
        """Current cursor column (0-indexed)."""
        return self._cursor - self.line_start()

    @property
    def location(self) -> tuple[int, int]:
        return (self.row, self.col)

    @property
    def current_line(self) -> str:
        return self._text[self.line_start() : self.line_end()]

    @property
    def char_at_cursor(self) -> str:
        """Character at cursor position, or empty string at end of buffer."""
        if self._cursor < len(self._text):
            return self._text[self._cursor]
        return ""

    def clamp(self, offset: int) -> int:
        return max(0, min(offset, len(self._text)))

    def offset_of(self, row: int, col: int) -> int:
        """Offset of (row, col), with both clamped to the document."""
        lines = self.lines
        row = max(0, min(row, len(lines) - 1))
        start = sum(len(line) + 1 for line in lines[:row])
        return start + max(0, min(col, len(lines[row])))

    # ─────────────────────────────────────────────────────────────────
    # Mutation
    # ─────────────────────────────────────────────────────────────────

    def move_to(self, offset: int) -> bool:
        """Move the cursor; returns True if it moved."""
        new = self.clamp(offset)
        moved = new != self._cursor
        self._cursor = new
        return moved

    def set_text(self, text: str, cursor: int | None = None) -> None:
        self._text = text
        self.move_to(self._cursor if cursor is None else cursor)

    def insert(self, text: str) -> None:
        """Insert text at the cursor and leave the cursor after it."""
        pos = self._cursor
        self._text = self._text[:pos] + text + self._text[pos:]
        self._cursor = pos + len(text)

    def delete_range(self, start: int, end: int) -> str:
        """Delete ``text[start:end]`` and return it. The cursor lands on ``start``."""
        start, end = self.clamp(start), self.clamp(end)
        if end < start:
            start, end = end, start
        removed = self._text[start:end]
        self._text = self._text[:start] + self._text[end:]
        self._cursor = start
        return removed

    def replace_at_cursor(self, char: str) -> bool:
        """Replace the character under the cursor; False at end of line/buffer."""
        current = self.char_at_cursor
        if not current or current == "\n":
            return False
        pos = self._cursor
        self._text = self._text[:pos] + char + self._text[pos + 1 :]
        return True

    # ─────────────────────────────────────────────────────────────────
    # Line boundaries
    # ─────────────────────────────────────────────────────────────────

    def line_start(self, offset: int | None = None) -> int:
        pos = self._cursor if offset is None else offset
        return self._text.rfind("\n", 0, pos) + 1

    def line_end(self, offset: int | None = None) -> int:
        """Offset just after the last character of the line."""
        pos = self._cursor if offset is None else offset
        end = self._text.find("\n", pos)
        return len(self._text) if end == -1 else end

    # ─────────────────────────────────────────────────────────────────
    # Motions (return the new offset, never move the cursor)
    # ─────────────────────────────────────────────────────────────────

    def get_left(self) -> int:
        return max(self.line_start(), self._cursor - 1)

    def get_right(self) -> int:
        return min(self.line_end(), self._cursor + 1)

    def get_up(self) -> int:
        row, col = self.location
        if row == 0:
            return self._cursor
        return self.offset_of(row - 1, col)

    def get_down(self) -> int:
        row, col = self.location
        if row >= self.line_count - 1:
            return self._cursor
        return self.offset_of(row + 1, col)

    def get_line_start(self) -> int:
        return self.line_start()

    def get_line_end(self) -> int:
        return self.line_end()

    def get_document_start(self) -> int:
        return 0

    def get_document_end(self) -> int:
        return len(self._text)

    def get_line_n(self, n: int) -> int:
        """Offset of the first non-blank character of line n (1-indexed)."""
        start = self.offset_of(n - 1, 0)
        end = self.line_end(start)
        for pos in range(start, end):
            if not self._text[pos].isspace():
                return pos
        return start

    def get_word_start_forward(self) -> int:
        """Offset of the next word start (w motion)."""
        text = self._text
        pos = self._cursor
        if pos >= len(text):
            return pos
        start_class = _char_class(text[pos])
        if start_class != 0:
            while pos < len(text) and _char_class(text[pos]) == start_class:
                pos += 1
        while pos < len(text) and text[pos].isspace():
            pos += 1
        return pos

    def get_word_start_backward(self) -> int:
        """Offset of the previous word start (b motion)."""
        text = self._text
        pos = self._cursor
        if pos == 0:
            return 0
        pos -= 1
        while pos > 0 and text[pos].isspace():
            pos -= 1
        if text[pos].isspace():
            return pos
        word_class = _char_class(text[pos])
        while pos > 0 and _char_class(text[pos - 1]) == word_class:
            pos -= 1
        return pos

    def word_bounds(self) -> tuple[int, int]:
        """Span of the word under the cursor, limited to the current line."""
        text = self._text
        pos = self._cursor
        if pos >= self.line_end():
            return (pos, pos)
        char_class = _char_class(text[pos])
        start = pos
        end = pos + 1
        line_start, line_end = self.line_start(), self.line_end()
        while start > line_start and _char_class(text[start - 1]) == char_class:
            start -= 1
        while end < line_end and _char_class(text[end]) == char_class:
            end += 1
        return (start, end)
