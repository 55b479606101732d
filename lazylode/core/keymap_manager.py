"""Keymap management utilities for lazylode."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from lazylode.shared.debug_events import emit_debug_event
from lazylode.stores.base import get_config_dir
from lazylode.stores.settings import SettingsStoreProtocol

from .actions import parse_action
from .keymap import (
    GLOBAL_CONTEXT,
    KEY_CONTEXTS,
    ActionKeyDef,
    DefaultKeymapProvider,
    KeyMapping,
    KeymapProvider,
    build_keymap,
    chord_aliases,
    merge_keymaps,
    normalize_chord,
)
from .types import EditingMode, PaneModifier

CUSTOM_KEYMAP_SETTINGS_KEY = "custom_keymap"
PANE_MODIFIER_SETTINGS_KEY = "pane_modifier"
EDITING_MODE_SETTINGS_KEY = "default_editing_mode"
ACTION_KEY_FIELDS = {"key", "action", "context"}


def custom_keymap_dir() -> Path:
    return get_config_dir() / "keymaps"


class FileBasedKeymapProvider(KeymapProvider):
    """Keymap provider that loads from JSON file."""

    def __init__(self, name: str, action_keys: list[ActionKeyDef]):
        self._name = name
        self._action_keys = action_keys

    @property
    def name(self) -> str:
        """Get the keymap name."""
        return self._name

    def get_action_keys(self) -> list[ActionKeyDef]:
        """Get all action key definitions."""
        return list(self._action_keys)


class KeymapManager:
    """Loads keymap settings and builds the merged ``KeyMapping``.

    Configuration problems are reported on stderr and the defaults are
    kept; the navigation core only ever sees a validated table.
    """

    def __init__(
        self,
        settings_store: SettingsStoreProtocol | None = None,
    ) -> None:
        if settings_store is None:
            from lazylode.stores.settings import SettingsStore

            settings_store = SettingsStore.get_instance()
        self._settings_store = settings_store
        self._default_provider = DefaultKeymapProvider()
        self._custom_provider: FileBasedKeymapProvider | None = None
        self._custom_keymap_name: str | None = None
        self._custom_keymap_path: Path | None = None
        self._pane_modifier = PaneModifier.SHIFT
        # Modifier from settings, restored when a keymap file is dropped
        self._settings_pane_modifier = PaneModifier.SHIFT
        self._editing_mode = EditingMode.VIM

    def initialize(self) -> dict:
        """Initialize keymap from settings.

        Returns:
            The loaded settings dictionary.
        """
        settings = self._settings_store.load_all()
        self._load_modes(settings)
        self.load_custom_keymap(settings)
        return settings

    @property
    def pane_modifier(self) -> PaneModifier:
        return self._pane_modifier

    @property
    def default_editing_mode(self) -> EditingMode:
        return self._editing_mode

    def set_pane_modifier(self, value: str | PaneModifier) -> None:
        self._pane_modifier = value if isinstance(value, PaneModifier) else PaneModifier(value.lower())

    def set_default_editing_mode(self, value: str | EditingMode) -> None:
        self._editing_mode = value if isinstance(value, EditingMode) else EditingMode(value.lower())

    def _load_modes(self, settings: dict) -> None:
        modifier = settings.get(PANE_MODIFIER_SETTINGS_KEY)
        if modifier is not None:
            try:
                self.set_pane_modifier(str(modifier))
            except ValueError:
                print(
                    f"[lazylode] Invalid {PANE_MODIFIER_SETTINGS_KEY} '{modifier}', using shift",
                    file=sys.stderr,
                )
        self._settings_pane_modifier = self._pane_modifier
        mode = settings.get(EDITING_MODE_SETTINGS_KEY)
        if mode is not None:
            try:
                self.set_default_editing_mode(str(mode))
            except ValueError:
                print(
                    f"[lazylode] Invalid {EDITING_MODE_SETTINGS_KEY} '{mode}', using vim",
                    file=sys.stderr,
                )

    def load_custom_keymap(self, settings: dict) -> None:
        """Load custom keymap from settings if specified.

        Args:
            settings: Settings dictionary containing custom_keymap key.
        """
        keymap_name = settings.get(CUSTOM_KEYMAP_SETTINGS_KEY)
        if not keymap_name or not isinstance(keymap_name, str):
            return
        self.load_named_keymap(keymap_name)

    def load_named_keymap(self, keymap_name: str) -> bool:
        """Load a keymap by name or path. Returns False (after reporting) on failure."""
        if keymap_name.strip() in ("", "default"):
            return False
        try:
            path = self._resolve_keymap_path(keymap_name.strip())
            self._register_custom_keymap(path, keymap_name.strip())
        except ValueError as exc:
            print(
                f"[lazylode] Failed to load custom keymap '{keymap_name}': {exc}",
                file=sys.stderr,
            )
            return False
        return True

    def _resolve_keymap_path(self, keymap_name: str) -> Path:
        """Resolve keymap name to file path.

        Args:
            keymap_name: Name of the keymap (without .json extension).

        Returns:
            Path to the keymap JSON file.
        """
        if keymap_name.startswith(("~", "/")) or Path(keymap_name).is_absolute():
            return Path(keymap_name).expanduser()

        name = Path(keymap_name).stem
        return custom_keymap_dir() / f"{name}.json"

    def _register_custom_keymap(self, path: Path, keymap_name: str) -> None:
        """Load and register a custom keymap from file.

        Raises:
            ValueError: If the keymap file is invalid.
        """
        path = path.expanduser()
        if not path.exists():
            raise ValueError(f"Keymap file not found: {path}")

        provider = self._load_keymap_from_file(path, keymap_name)
        self._custom_provider = provider
        self._custom_keymap_name = keymap_name
        self._custom_keymap_path = path.resolve()
        emit_debug_event(
            "keymap.loaded",
            category="keybinding",
            name=keymap_name,
            path=str(self._custom_keymap_path),
            bindings=len(provider.get_action_keys()),
        )

    def _load_keymap_from_file(self, path: Path, keymap_name: str) -> FileBasedKeymapProvider:
        """Load keymap data from JSON file.

        Raises:
            ValueError: If the JSON is invalid or missing required fields.
        """
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ValueError(f"Failed to read keymap JSON: {exc}") from exc

        if not isinstance(payload, dict):
            raise ValueError("Keymap file must contain a JSON object.")

        keymap_data = payload.get("keymap", payload)
        if not isinstance(keymap_data, dict):
            raise ValueError('Keymap file "keymap" must be a JSON object.')

        action_keys_data = keymap_data.get("action_keys", [])
        if not isinstance(action_keys_data, list):
            raise ValueError('"action_keys" must be a list.')

        action_keys = self._parse_action_keys(action_keys_data)

        if "pane_modifier" in keymap_data:
            try:
                self.set_pane_modifier(str(keymap_data["pane_modifier"]))
            except ValueError as exc:
                raise ValueError(f'Invalid "pane_modifier": {keymap_data["pane_modifier"]}') from exc

        return FileBasedKeymapProvider(keymap_name, action_keys)

    def _parse_action_keys(self, data: list[Any]) -> list[ActionKeyDef]:
        """Parse action keys from JSON data.

        Raises:
            ValueError: If any action key is invalid, or one chord is bound
                to two different actions in the same context.
        """
        action_keys = []
        seen: dict[tuple[str, str], tuple[str, int]] = {}
        for i, item in enumerate(data):
            if not isinstance(item, dict):
                raise ValueError(f"Action key at index {i} must be an object.")

            unknown = set(item) - ACTION_KEY_FIELDS
            if unknown:
                raise ValueError(f"Action key at index {i} has unknown field(s): {', '.join(sorted(unknown))}.")

            key = item.get("key")
            action = item.get("action")

            if not isinstance(key, str) or not key:
                raise ValueError(f'Action key at index {i} missing required "key".')
            if not isinstance(action, str) or not action:
                raise ValueError(f'Action key at index {i} missing required "action".')

            context = item.get("context")
            if context is not None and not isinstance(context, str):
                raise ValueError(f'Action key at index {i} "context" must be a string.')
            if context is not None and context not in KEY_CONTEXTS:
                raise ValueError(f'Action key at index {i} has unknown context "{context}".')

            try:
                parse_action(action)
                chord = normalize_chord(key)
            except ValueError as exc:
                raise ValueError(f"Action key at index {i}: {exc}") from exc

            scope = context or GLOBAL_CONTEXT
            for alias in chord_aliases(chord):
                previous = seen.get((scope, alias))
                if previous is not None and previous[0] != action:
                    raise ValueError(
                        f'Action key at index {i} binds "{key}" in {scope} to "{action}", '
                        f'but index {previous[1]} already binds it to "{previous[0]}".'
                    )
            seen[(scope, chord)] = (action, i)

            action_keys.append(ActionKeyDef(key=key, action=action, context=context))

        return action_keys

    def build_mapping(self) -> KeyMapping:
        """Merge the custom keymap (if any) over the defaults."""
        base = build_keymap(self._default_provider.get_action_keys(), self._pane_modifier)
        if self._custom_provider is None:
            return base
        overlay = build_keymap(self._custom_provider.get_action_keys(), self._pane_modifier)
        return merge_keymaps(base, overlay)

    def get_custom_keymap_name(self) -> str | None:
        """Get the name of the currently loaded custom keymap."""
        return self._custom_keymap_name

    def get_custom_keymap_path(self) -> Path | None:
        """Get the path to the currently loaded custom keymap file."""
        return self._custom_keymap_path

    def reset_to_default(self) -> None:
        """Reset to the default keymap and the pane modifier from settings."""
        self._custom_provider = None
        self._pane_modifier = self._settings_pane_modifier
        self._custom_keymap_name = None
        self._custom_keymap_path = None
