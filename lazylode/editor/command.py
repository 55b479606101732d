"""Vim command mode handler.

Handles ex-style commands like :q, :w and :<line>.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CommandAction(Enum):
    """Actions that can result from command execution."""

    NONE = "none"
    QUIT = "quit"
    QUIT_FORCE = "quit_force"
    RUN = "run"  # Run the buffer as a query
    GOTO_LINE = "goto_line"


@dataclass
class CommandResult:
    """Result of executing a command."""

    action: CommandAction = CommandAction.NONE
    message: str = ""
    error: bool = False
    line: int | None = None


HELP_TEXT = "Commands: :q (quit), :q! (force quit), :w/:run (run query), :<n> (go to line)"


class VimCommandHandler:
    """Handles vim ex-style commands."""

    def __init__(self) -> None:
        self._command_buffer: str = ""

    @property
    def buffer(self) -> str:
        """Get the current command buffer."""
        return self._command_buffer

    def start(self) -> None:
        """Start command mode."""
        self._command_buffer = ""

    def add_char(self, char: str) -> None:
        """Add a character to the command buffer."""
        if len(char) == 1:
            self._command_buffer += char

    def backspace(self) -> bool:
        """Remove last character. Returns False if the buffer was already empty."""
        if self._command_buffer:
            self._command_buffer = self._command_buffer[:-1]
            return True
        return False

    def cancel(self) -> None:
        """Cancel command mode."""
        self._command_buffer = ""

    def execute(self) -> CommandResult:
        """Execute the current command."""
        cmd = self._command_buffer.strip()
        self._command_buffer = ""
        return self._parse_and_execute(cmd)

    def _parse_and_execute(self, cmd: str) -> CommandResult:
        """Parse and execute a command string."""
        if not cmd:
            return CommandResult()

        parts = cmd.split(None, 1)
        base_cmd = parts[0].lower()

        if base_cmd.isdigit():
            return CommandResult(action=CommandAction.GOTO_LINE, line=int(base_cmd))

        if base_cmd in ("q", "quit"):
            return CommandResult(action=CommandAction.QUIT)

        if base_cmd in ("q!", "quit!"):
            return CommandResult(action=CommandAction.QUIT_FORCE)

        if base_cmd in ("w", "write", "run", "r"):
            return CommandResult(action=CommandAction.RUN)

        if base_cmd in ("h", "help"):
            return CommandResult(message=HELP_TEXT)

        return CommandResult(
            error=True,
            message=f"Unknown command: {cmd}",
        )
