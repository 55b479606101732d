"""Key resolution: raw key events to navigation actions."""

from __future__ import annotations

from dataclasses import dataclass

from lazylode.shared.debug_events import emit_debug_event

from .actions import CountDigit, NavigationAction, ResolvedAction
from .input_context import InputContext
from .keymap import (
    BOX_CONTEXTS,
    COMPOSED_CONTEXT,
    GLOBAL_CONTEXT,
    PANE_CONTEXTS,
    KeyMapping,
    canonical_chord,
)
from .types import VimMode


@dataclass(frozen=True)
class KeyEvent:
    """A key press as reported by the terminal layer.

    ``key`` is either a single character or a named key (``Esc``,
    ``enter``, ``f5``...). Modifier flags are separate.
    """

    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False

    @property
    def chord(self) -> str:
        return canonical_chord(self.key, ctrl=self.ctrl, alt=self.alt, shift=self.shift)

    @property
    def char(self) -> str | None:
        """The printable character this key types, or None."""
        if self.ctrl or self.alt:
            return None
        if self.key.lower() == "space" or self.key == " ":
            return " "
        if len(self.key) != 1 or not self.key.isprintable():
            return None
        if self.shift and self.key.isalpha():
            return self.key.upper()
        return self.key

    @classmethod
    def parse(cls, chord: str) -> KeyEvent:
        """Build an event from a chord string such as ``Ctrl+r`` or ``G``."""
        if chord == "+" or "+" not in chord:
            return cls(chord)
        if chord.endswith("++"):
            mods, key = chord[:-2].split("+"), "+"
        else:
            *mods, key = chord.split("+")
        lowered = {mod.lower() for mod in mods}
        return cls(key, ctrl="ctrl" in lowered, alt="alt" in lowered, shift="shift" in lowered)


Resolution = ResolvedAction | CountDigit | None


class KeyResolver:
    """Resolves key events against a layered ``KeyMapping``.

    Scopes are consulted most specific first: editing mode, box, pane,
    global, and finally the pane-modifier directional chords.
    """

    def __init__(self, keymap: KeyMapping) -> None:
        self._keymap = keymap

    @property
    def keymap(self) -> KeyMapping:
        return self._keymap

    def set_keymap(self, keymap: KeyMapping) -> None:
        self._keymap = keymap

    def resolve(self, event: KeyEvent, context: InputContext) -> Resolution:
        try:
            chord = event.chord
        except ValueError:
            emit_debug_event("key.unknown", category="input", key=event.key)
            return None

        char = event.char

        if context.awaiting_char and char is not None:
            return ResolvedAction(NavigationAction.INSERT_CHAR, char)

        if context.counts_enabled() and char is not None and char.isdigit():
            if char != "0" or context.pending_count:
                return CountDigit(char)

        scope = context.editing_scope()
        if scope is not None:
            action = self._keymap.lookup(scope, chord)
            if action is not None:
                return ResolvedAction(action)

        if char is not None:
            if context.literal_text():
                return ResolvedAction(NavigationAction.INSERT_CHAR, char)
            if char.isdigit() and context.is_text_box and context.vim_mode is VimMode.VISUAL:
                return ResolvedAction(NavigationAction.INSERT_CHAR, char)

        for scope in self._fallback_scopes(context):
            action = self._keymap.lookup(scope, chord)
            if action is not None:
                return ResolvedAction(action)

        emit_debug_event(
            "key.unmapped",
            category="input",
            chord=chord,
            pane=context.pane.value,
            box=context.box.value if context.box else None,
        )
        return None

    def _fallback_scopes(self, context: InputContext) -> list[str]:
        scopes = []
        if context.box is not None:
            scopes.append(BOX_CONTEXTS[context.box])
        scopes.append(PANE_CONTEXTS[context.pane])
        scopes.append(GLOBAL_CONTEXT)
        scopes.append(COMPOSED_CONTEXT)
        return scopes
