"""Translate Textual key events into core ``KeyEvent`` values."""

from __future__ import annotations

from lazylode.core.resolver import KeyEvent

TEXTUAL_KEY_NAMES: dict[str, str] = {
    "escape": "Esc",
    "enter": "Enter",
    "backspace": "Backspace",
    "tab": "Tab",
    "delete": "Delete",
    "insert": "Insert",
    "left": "Left",
    "right": "Right",
    "up": "Up",
    "down": "Down",
    "home": "Home",
    "end": "End",
    "pageup": "PageUp",
    "pagedown": "PageDown",
    "space": "Space",
}
TEXTUAL_KEY_NAMES.update({f"f{n}": f"F{n}" for n in range(1, 13)})


def key_event_from_textual(key: str, character: str | None = None) -> KeyEvent | None:
    """Build a ``KeyEvent`` from Textual's ``event.key`` and ``event.character``.

    Returns None for keys the core has no name for.
    """
    if key == "shift+tab":
        return KeyEvent("BackTab")

    parts = key.split("+")
    name = parts[-1] if key != "+" else "+"
    mods = {part.lower() for part in parts[:-1]}
    ctrl = "ctrl" in mods
    alt = "alt" in mods or "meta" in mods
    shift = "shift" in mods

    if not ctrl and not alt and character is not None and len(character) == 1:
        if character == " ":
            return KeyEvent("Space")
        if character.isprintable():
            return KeyEvent(character)

    named = TEXTUAL_KEY_NAMES.get(name.lower())
    if named is not None:
        return KeyEvent(named, ctrl=ctrl, alt=alt, shift=shift)
    if name.startswith("upper_") and len(name) == 7:
        return KeyEvent(name[-1].upper(), ctrl=ctrl, alt=alt)
    if len(name) == 1:
        return KeyEvent(name, ctrl=ctrl, alt=alt, shift=shift)
    return None
