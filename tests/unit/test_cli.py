"""Tests for command-line keymap overrides."""

from __future__ import annotations

import json
from pathlib import Path

from lazylode.cli import build_parser, load_keymap
from lazylode.core.actions import NavigationAction
from lazylode.core.keymap import COMPOSED_CONTEXT, GLOBAL_CONTEXT
from lazylode.core.types import EditingMode, PaneModifier


class MockSettingsStore:
    def __init__(self, settings: dict | None = None):
        self.settings = settings or {}

    def load_all(self) -> dict:
        return self.settings

    def save_all(self, settings: dict) -> None:
        self.settings = settings

    def get(self, key: str, default=None):
        return self.settings.get(key, default)


def write_keymap(path: Path, data: dict) -> str:
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestLoadKeymap:
    def test_keymap_flag_replaces_settings_keymap(self, tmp_path: Path):
        settings_file = write_keymap(
            tmp_path / "from-settings.json",
            {"pane_modifier": "ctrl", "action_keys": [{"key": "F6", "action": "quit"}]},
        )
        flag_file = write_keymap(tmp_path / "from-flag.json", {"action_keys": [{"key": "F7", "action": "quit"}]})
        args = build_parser().parse_args(["--keymap", flag_file])

        manager, mapping = load_keymap(args, MockSettingsStore({"custom_keymap": settings_file}))

        assert manager.get_custom_keymap_name() == flag_file
        assert mapping.lookup(GLOBAL_CONTEXT, "F7") is NavigationAction.QUIT
        assert mapping.lookup(GLOBAL_CONTEXT, "F6") is None
        # The settings keymap's modifier goes away with its bindings
        assert mapping.pane_modifier is PaneModifier.SHIFT
        assert mapping.lookup(COMPOSED_CONTEXT, "Ctrl+h") is None

    def test_keymap_flag_keeps_settings_pane_modifier(self, tmp_path: Path):
        settings_file = write_keymap(tmp_path / "from-settings.json", {"pane_modifier": "ctrl", "action_keys": []})
        flag_file = write_keymap(tmp_path / "from-flag.json", {"action_keys": []})
        args = build_parser().parse_args(["--keymap", flag_file])

        _, mapping = load_keymap(
            args, MockSettingsStore({"custom_keymap": settings_file, "pane_modifier": "alt"})
        )

        assert mapping.pane_modifier is PaneModifier.ALT

    def test_flags_override_settings(self):
        args = build_parser().parse_args(["--pane-modifier", "ctrl", "--editing-mode", "cursor"])

        manager, mapping = load_keymap(args, MockSettingsStore({"pane_modifier": "alt"}))

        assert mapping.pane_modifier is PaneModifier.CTRL
        assert manager.default_editing_mode is EditingMode.CURSOR
