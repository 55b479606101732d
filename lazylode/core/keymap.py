"""Core keymap definitions (UI-agnostic).

A keymap is a set of ``ActionKeyDef`` bindings grouped by context. The
built-in defaults come from ``DefaultKeymapProvider``; a custom provider
(usually loaded from JSON by ``KeymapManager``) is overlaid on top with
``merge_keymaps``. The resulting ``KeyMapping`` is immutable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from lazylode.shared.debug_events import emit_debug_event

from .actions import NavigationAction, parse_action
from .types import BoxKind, PaneKind, PaneModifier, ViewMode, VimMode

GLOBAL_CONTEXT = "global"
COMPOSED_CONTEXT = "pane_modifier"

MODE_CONTEXTS: dict[VimMode, str] = {
    VimMode.NORMAL: "vim_normal",
    VimMode.INSERT: "vim_insert",
    VimMode.VISUAL: "vim_visual",
    VimMode.COMMAND: "vim_command",
}

CURSOR_CONTEXTS: dict[ViewMode, str] = {
    ViewMode.VIEW: "cursor_view",
    ViewMode.EDIT: "cursor_edit",
}

# A results cell open for editing
TABLE_EDIT_CONTEXT = "table_edit"

BOX_CONTEXTS: dict[BoxKind, str] = {kind: kind.value for kind in BoxKind}
PANE_CONTEXTS: dict[PaneKind, str] = {kind: kind.value for kind in PaneKind}

KEY_CONTEXTS = frozenset(
    {GLOBAL_CONTEXT, TABLE_EDIT_CONTEXT}
    | set(MODE_CONTEXTS.values())
    | set(CURSOR_CONTEXTS.values())
    | set(BOX_CONTEXTS.values())
    | set(PANE_CONTEXTS.values())
)

MODIFIER_ORDER = ("Ctrl", "Alt", "Shift")
MODIFIER_ALIASES = {
    "ctrl": "Ctrl",
    "control": "Ctrl",
    "alt": "Alt",
    "meta": "Alt",
    "option": "Alt",
    "shift": "Shift",
}

NAMED_KEYS: dict[str, str] = {
    "esc": "Esc",
    "escape": "Esc",
    "enter": "Enter",
    "return": "Enter",
    "backspace": "Backspace",
    "tab": "Tab",
    "backtab": "BackTab",
    "delete": "Delete",
    "del": "Delete",
    "insert": "Insert",
    "left": "Left",
    "right": "Right",
    "up": "Up",
    "down": "Down",
    "home": "Home",
    "end": "End",
    "pageup": "PageUp",
    "page_up": "PageUp",
    "pagedown": "PageDown",
    "page_down": "PageDown",
    "space": "Space",
    " ": "Space",
}
NAMED_KEYS.update({f"f{n}": f"F{n}" for n in range(1, 13)})


def _canonical_key(key: str) -> str:
    if len(key) == 1 and key != " ":
        return key
    named = NAMED_KEYS.get(key.lower())
    if named is None:
        raise ValueError(f"Unknown key name: {key!r}")
    return named


def canonical_chord(key: str, *, ctrl: bool = False, alt: bool = False, shift: bool = False) -> str:
    """Build the canonical chord string for a key plus modifiers.

    Modifiers are written in the order ``Ctrl+Alt+Shift+``. Shifted
    letters are written lowercase after ``Shift+``, Shift is dropped for
    other printable characters, and ``Shift+Tab`` becomes ``BackTab``.

    Raises:
        ValueError: If the key name is not recognised.
    """
    name = _canonical_key(key)
    if len(name) == 1:
        if name.isalpha() and name.isupper() and shift:
            name = name.lower()
        elif not name.isalpha():
            shift = False
    elif name == "Tab" and shift:
        name, shift = "BackTab", False
    elif name == "BackTab":
        shift = False

    mods = [mod for mod, on in zip(MODIFIER_ORDER, (ctrl, alt, shift)) if on]
    return "+".join([*mods, name])


def normalize_chord(chord: str) -> str:
    """Canonicalize a chord written by hand (``ctrl+shift+L``, ``shift+tab``).

    Raises:
        ValueError: If the chord is empty or uses an unknown modifier or key.
    """
    if not chord:
        raise ValueError("Empty key chord")
    if chord == "+":
        return "+"
    if chord.endswith("++"):
        key = "+"
        mod_parts = chord[:-2].split("+")
    else:
        parts = chord.split("+")
        key = parts[-1]
        mod_parts = parts[:-1]

    flags = {"Ctrl": False, "Alt": False, "Shift": False}
    for part in mod_parts:
        mod = MODIFIER_ALIASES.get(part.strip().lower())
        if mod is None:
            raise ValueError(f"Unknown modifier {part!r} in chord {chord!r}")
        flags[mod] = True
    if not key:
        raise ValueError(f"Missing key in chord {chord!r}")
    return canonical_chord(key, ctrl=flags["Ctrl"], alt=flags["Alt"], shift=flags["Shift"])


def chord_aliases(chord: str) -> list[str]:
    """Return the chord followed by its uppercase/Shift alias, if any.

    ``L`` and ``Shift+l`` name the same key press depending on how the
    terminal reports it.
    """
    prefix, _, key = chord.rpartition("+")
    if chord.endswith("++") or len(key) != 1 or not key.isalpha():
        return [chord]
    mods = prefix.split("+") if prefix else []
    if key.isupper():
        alias = canonical_chord(key.lower(), ctrl="Ctrl" in mods, alt="Alt" in mods, shift=True)
        return [chord, alias]
    if "Shift" in mods:
        rest = [mod for mod in mods if mod != "Shift"]
        return [chord, "+".join([*rest, key.upper()])]
    return [chord]


@dataclass(frozen=True)
class ActionKeyDef:
    """Definition of a regular action keybinding."""

    key: str  # The key chord as written in the keymap
    action: str  # The action name
    context: str | None = None  # Scope the binding applies in (None = global)


class KeymapProvider(ABC):
    """Abstract base class for keymap providers."""

    @property
    def name(self) -> str:
        return "default"

    @abstractmethod
    def get_action_keys(self) -> list[ActionKeyDef]:
        """Get all action key definitions."""
        raise NotImplementedError

    def keys_for_action(self, action_name: str) -> list[str]:
        """Get all keys for an action in declaration order."""
        seen: list[str] = []
        for ak in self.get_action_keys():
            if ak.action == action_name and ak.key not in seen:
                seen.append(ak.key)
        return seen

    def actions_for_key(self, key: str) -> list[str]:
        """Get all actions bound to a key."""
        return [ak.action for ak in self.get_action_keys() if ak.key == key]


class DefaultKeymapProvider(KeymapProvider):
    """Default keymap with hardcoded bindings."""

    def __init__(self) -> None:
        self._action_keys_cache: list[ActionKeyDef] | None = None

    def get_action_keys(self) -> list[ActionKeyDef]:
        if self._action_keys_cache is None:
            self._action_keys_cache = self._build_action_keys()
        return list(self._action_keys_cache)

    def _build_action_keys(self) -> list[ActionKeyDef]:
        return [
            # Pane focus
            ActionKeyDef("c", "focus_connections"),
            ActionKeyDef("q", "focus_query_input"),
            ActionKeyDef("r", "focus_results"),
            ActionKeyDef("s", "focus_schema_explorer"),
            ActionKeyDef(":", "focus_command_line"),
            ActionKeyDef("Tab", "next_pane"),
            ActionKeyDef("BackTab", "previous_pane"),
            # Box focus
            ActionKeyDef("Alt+t", "focus_text_input"),
            ActionKeyDef("Alt+d", "focus_data_table"),
            ActionKeyDef("Alt+e", "focus_tree_view"),
            ActionKeyDef("Alt+i", "focus_list_view"),
            ActionKeyDef("Alt+m", "focus_modal"),
            ActionKeyDef("Ctrl+n", "next_box"),
            ActionKeyDef("Ctrl+p", "previous_box"),
            # Motions
            ActionKeyDef("h", "cursor_left"),
            ActionKeyDef("j", "cursor_down"),
            ActionKeyDef("k", "cursor_up"),
            ActionKeyDef("l", "cursor_right"),
            ActionKeyDef("Left", "cursor_left"),
            ActionKeyDef("Down", "cursor_down"),
            ActionKeyDef("Up", "cursor_up"),
            ActionKeyDef("Right", "cursor_right"),
            ActionKeyDef("w", "cursor_word_forward"),
            ActionKeyDef("b", "cursor_word_back"),
            ActionKeyDef("0", "cursor_line_start"),
            ActionKeyDef("$", "cursor_line_end"),
            ActionKeyDef("Home", "cursor_first"),
            ActionKeyDef("End", "cursor_last"),
            # Clipboard and modes
            ActionKeyDef("Ctrl+c", "copy"),
            ActionKeyDef("Ctrl+v", "paste"),
            ActionKeyDef("Ctrl+x", "cut"),
            ActionKeyDef("Ctrl+e", "toggle_view_edit"),
            ActionKeyDef("F2", "toggle_editing_mode"),
            # Special
            ActionKeyDef("/", "search"),
            ActionKeyDef("Enter", "confirm"),
            ActionKeyDef("Esc", "cancel"),
            ActionKeyDef("Ctrl+q", "quit"),
            # Vim normal
            ActionKeyDef("i", "enter_insert_mode", "vim_normal"),
            ActionKeyDef("a", "enter_append_mode", "vim_normal"),
            ActionKeyDef("o", "open_line_below", "vim_normal"),
            ActionKeyDef("O", "open_line_above", "vim_normal"),
            ActionKeyDef("v", "enter_visual_mode", "vim_normal"),
            ActionKeyDef(":", "enter_command_mode", "vim_normal"),
            ActionKeyDef("x", "delete_char", "vim_normal"),
            ActionKeyDef("X", "delete_char_before", "vim_normal"),
            ActionKeyDef("r", "replace_char", "vim_normal"),
            ActionKeyDef("p", "paste", "vim_normal"),
            ActionKeyDef("Y", "copy", "vim_normal"),
            ActionKeyDef("D", "delete_line", "vim_normal"),
            ActionKeyDef("d", "delete_operator", "vim_normal"),
            ActionKeyDef("y", "yank_operator", "vim_normal"),
            ActionKeyDef("u", "undo", "vim_normal"),
            ActionKeyDef("Ctrl+r", "redo", "vim_normal"),
            # Vim insert
            ActionKeyDef("Esc", "enter_normal_mode", "vim_insert"),
            ActionKeyDef("Backspace", "delete_char_before", "vim_insert"),
            ActionKeyDef("Delete", "delete_char", "vim_insert"),
            ActionKeyDef("Enter", "insert_newline", "vim_insert"),
            # Vim visual
            ActionKeyDef("Esc", "enter_normal_mode", "vim_visual"),
            ActionKeyDef("y", "copy", "vim_visual"),
            ActionKeyDef("d", "cut", "vim_visual"),
            ActionKeyDef("x", "cut", "vim_visual"),
            # Vim command line
            ActionKeyDef("Esc", "cancel", "vim_command"),
            ActionKeyDef("Enter", "confirm", "vim_command"),
            ActionKeyDef("Backspace", "delete_char_before", "vim_command"),
            # Cursor editing
            ActionKeyDef("e", "toggle_view_edit", "cursor_view"),
            ActionKeyDef("i", "toggle_view_edit", "cursor_view"),
            ActionKeyDef("Esc", "toggle_view_edit", "cursor_edit"),
            ActionKeyDef("Backspace", "delete_char_before", "cursor_edit"),
            ActionKeyDef("Delete", "delete_char", "cursor_edit"),
            ActionKeyDef("Enter", "insert_newline", "cursor_edit"),
            # Results table
            ActionKeyDef("g", "first_page", "data_table"),
            ActionKeyDef("G", "last_page", "data_table"),
            ActionKeyDef(",", "next_page", "data_table"),
            ActionKeyDef(".", "previous_page", "data_table"),
            ActionKeyDef("o", "sort", "data_table"),
            ActionKeyDef("y", "copy_cell", "data_table"),
            ActionKeyDef("Y", "copy_row", "data_table"),
            ActionKeyDef("F", "follow_foreign_key", "data_table"),
            ActionKeyDef("e", "toggle_view_edit", "data_table"),
            # Cell editor
            ActionKeyDef("Esc", "cancel", "table_edit"),
            ActionKeyDef("Enter", "confirm", "table_edit"),
            ActionKeyDef("Backspace", "delete_char_before", "table_edit"),
            ActionKeyDef("Delete", "delete_char", "table_edit"),
        ]


def compose_pane_chords(pane_modifier: PaneModifier) -> dict[str, NavigationAction]:
    """Build the directional focus chords for the configured pane modifier."""
    flag = pane_modifier.value
    moves = {
        "h": NavigationAction.MOVE_LEFT,
        "j": NavigationAction.MOVE_DOWN,
        "k": NavigationAction.MOVE_UP,
        "l": NavigationAction.MOVE_RIGHT,
        "Left": NavigationAction.MOVE_LEFT,
        "Down": NavigationAction.MOVE_DOWN,
        "Up": NavigationAction.MOVE_UP,
        "Right": NavigationAction.MOVE_RIGHT,
    }
    return {
        canonical_chord(key, **{flag: True}): action
        for key, action in moves.items()
    }


@dataclass(frozen=True)
class KeyMapping:
    """Immutable chord -> action tables, one per context.

    ``composed`` holds the pane-modifier directional chords, consulted
    after every explicit table. ``conflicts`` lists composed chords that
    an explicit binding shadows.
    """

    tables: Mapping[str, Mapping[str, NavigationAction]]
    pane_modifier: PaneModifier = PaneModifier.SHIFT
    composed: Mapping[str, NavigationAction] = field(default_factory=dict)
    conflicts: tuple[str, ...] = ()

    def lookup(self, context: str, chord: str) -> NavigationAction | None:
        table = self.composed if context == COMPOSED_CONTEXT else self.tables.get(context)
        if not table:
            return None
        for candidate in chord_aliases(chord):
            action = table.get(candidate)
            if action is not None:
                return action
        return None

    def bindings(self) -> list[ActionKeyDef]:
        """Flatten the explicit tables back into binding definitions."""
        result = []
        for context, table in self.tables.items():
            for chord, action in table.items():
                ctx = None if context == GLOBAL_CONTEXT else context
                result.append(ActionKeyDef(chord, action.value, ctx))
        return result

    def chords_for(self, action: NavigationAction, context: str = GLOBAL_CONTEXT) -> list[str]:
        table = self.tables.get(context, {})
        return [chord for chord, bound in table.items() if bound is action]


def _freeze(tables: Mapping[str, Mapping[str, NavigationAction]]) -> Mapping[str, Mapping[str, NavigationAction]]:
    return MappingProxyType({ctx: MappingProxyType(dict(table)) for ctx, table in tables.items()})


def _find_conflicts(
    tables: Mapping[str, Mapping[str, NavigationAction]],
    composed: Mapping[str, NavigationAction],
) -> tuple[str, ...]:
    conflicts = []
    for context, table in tables.items():
        for chord, action in table.items():
            for alias in chord_aliases(chord):
                if alias in composed:
                    conflicts.append(f"{context}:{alias} {action.value} shadows {composed[alias].value}")
                    break
    return tuple(sorted(conflicts))


def _finish(tables: dict[str, dict[str, NavigationAction]], pane_modifier: PaneModifier) -> KeyMapping:
    composed = compose_pane_chords(pane_modifier)
    conflicts = _find_conflicts(tables, composed)
    for conflict in conflicts:
        emit_debug_event(
            "keymap.conflict",
            category="keybinding",
            pane_modifier=pane_modifier.value,
            detail=conflict,
        )
    return KeyMapping(
        tables=_freeze(tables),
        pane_modifier=pane_modifier,
        composed=MappingProxyType(composed),
        conflicts=conflicts,
    )


def build_keymap(
    bindings: Iterable[ActionKeyDef],
    pane_modifier: PaneModifier = PaneModifier.SHIFT,
) -> KeyMapping:
    """Build a ``KeyMapping`` from binding definitions.

    Later bindings for the same chord and context win.

    Raises:
        ValueError: On an unknown context, action or key.
    """
    tables: dict[str, dict[str, NavigationAction]] = {}
    for binding in bindings:
        context = binding.context or GLOBAL_CONTEXT
        if context not in KEY_CONTEXTS:
            raise ValueError(f"Unknown key context: {context}")
        chord = normalize_chord(binding.key)
        tables.setdefault(context, {})[chord] = parse_action(binding.action)
    return _finish(tables, pane_modifier)


def merge_keymaps(base: KeyMapping, overlay: KeyMapping) -> KeyMapping:
    """Overlay one mapping onto another; overlay entries win.

    The overlay's pane modifier is used. Neither input is modified, and
    merging the same overlay twice gives the same result as merging once.
    """
    tables: dict[str, dict[str, NavigationAction]] = {
        ctx: dict(table) for ctx, table in base.tables.items()
    }
    for ctx, table in overlay.tables.items():
        merged = tables.setdefault(ctx, {})
        for chord, action in table.items():
            # Drop the other spelling of the same key so the overlay really wins.
            for alias in chord_aliases(chord)[1:]:
                merged.pop(alias, None)
            merged[chord] = action
    return _finish(tables, overlay.pane_modifier)


def default_keymap(pane_modifier: PaneModifier = PaneModifier.SHIFT) -> KeyMapping:
    return build_keymap(DefaultKeymapProvider().get_action_keys(), pane_modifier)


def with_pane_modifier(mapping: KeyMapping, pane_modifier: PaneModifier) -> KeyMapping:
    tables = {ctx: dict(table) for ctx, table in mapping.tables.items()}
    return _finish(tables, pane_modifier)
