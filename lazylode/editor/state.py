"""Per-editor vim state: mode, visual anchor, count prefix, pending commands."""

from __future__ import annotations

from dataclasses import dataclass

from lazylode.core.types import VimMode

MAX_COUNT = 9999


@dataclass
class VimState:
    """Tracks the modal state of one editor."""

    mode: VimMode = VimMode.NORMAL

    # Input accumulator for the numeric prefix
    input_buffer: str = ""

    # Visual mode anchor (buffer offset)
    visual_anchor: int | None = None

    # True after `r`, until the replacement character arrives
    pending_replace: bool = False

    # Operator waiting for its motion ("delete" or "yank"), as in dd or yw
    pending_operator: str | None = None

    def enter_mode(self, mode: VimMode) -> None:
        """Transition to a new mode with proper cleanup."""
        old_mode = self.mode
        self.mode = mode
        if old_mode is VimMode.VISUAL and mode is not VimMode.VISUAL:
            self.visual_anchor = None
        self.pending_replace = False
        self.pending_operator = None
        self.input_buffer = ""

    def start_visual(self, anchor: int) -> None:
        self.enter_mode(VimMode.VISUAL)
        self.visual_anchor = anchor

    @property
    def has_count(self) -> bool:
        return bool(self.input_buffer)

    def accumulate_digit(self, digit: str) -> bool:
        """Accumulate a digit for count prefix. Returns True if consumed."""
        if digit == "0" and not self.input_buffer:
            # 0 at start is a motion (go to line start), not a count
            return False
        if len(digit) == 1 and digit.isdigit():
            self.input_buffer += digit
            return True
        return False

    def consume_count(self) -> int:
        """Consume accumulated count from input buffer."""
        if not self.input_buffer:
            return 1
        count = int(self.input_buffer)
        self.input_buffer = ""
        return max(1, min(count, MAX_COUNT))

    def clear_count(self) -> None:
        self.input_buffer = ""
