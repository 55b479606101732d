"""Core, UI-agnostic models and helpers for lazylode."""

from .actions import CountDigit, NavigationAction, ResolvedAction
from .effects import Effect, EffectKind
from .input_context import InputContext
from .keymap import (
    ActionKeyDef,
    KeyMapping,
    KeymapProvider,
    build_keymap,
    compose_pane_chords,
    default_keymap,
    merge_keymaps,
)
from .resolver import KeyEvent, KeyResolver
from .types import BoxKind, EditingMode, PaneKind, PaneModifier, VimMode

__all__ = [
    "ActionKeyDef",
    "BoxKind",
    "CountDigit",
    "EditingMode",
    "Effect",
    "EffectKind",
    "InputContext",
    "KeyEvent",
    "KeyMapping",
    "KeyResolver",
    "KeymapProvider",
    "NavigationAction",
    "PaneKind",
    "PaneModifier",
    "ResolvedAction",
    "VimMode",
    "build_keymap",
    "compose_pane_chords",
    "default_keymap",
    "merge_keymaps",
]
