"""Vim-style modal editing for text boxes."""

from .buffer import TextBuffer
from .command import CommandAction, CommandResult, VimCommandHandler
from .editor import VimEditor
from .register import Register, YankRegister
from .state import VimState

__all__ = [
    "CommandAction",
    "CommandResult",
    "Register",
    "TextBuffer",
    "VimCommandHandler",
    "VimEditor",
    "VimState",
    "YankRegister",
]
