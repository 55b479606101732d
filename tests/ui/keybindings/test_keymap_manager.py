"""Tests for the KeymapManager."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from lazylode.core.actions import NavigationAction
from lazylode.core.keymap import COMPOSED_CONTEXT, GLOBAL_CONTEXT
from lazylode.core.keymap_manager import KeymapManager, custom_keymap_dir
from lazylode.core.types import EditingMode, PaneModifier


class MockSettingsStore:
    """Mock settings store for testing."""

    def __init__(self, settings: dict | None = None):
        self.settings = settings or {}

    def load_all(self) -> dict:
        return self.settings

    def save_all(self, settings: dict) -> None:
        self.settings = settings

    def get(self, key: str, default=None):
        return self.settings.get(key, default)


def write_keymap(path: Path, data: dict) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def manager_for():
    """Build an initialized manager for the given settings."""

    def build(settings: dict) -> KeymapManager:
        manager = KeymapManager(settings_store=MockSettingsStore(settings))
        manager.initialize()
        return manager

    return build


class TestKeymapManager:
    """Test the KeymapManager class."""

    def test_initialize_with_no_custom_keymap(self):
        """Should use default keymap when no custom keymap is specified."""
        settings_store = MockSettingsStore({})
        manager = KeymapManager(settings_store=settings_store)

        settings = manager.initialize()

        assert settings == {}
        assert manager.get_custom_keymap_name() is None
        assert manager.get_custom_keymap_path() is None
        assert manager.pane_modifier is PaneModifier.SHIFT
        assert manager.default_editing_mode is EditingMode.VIM

    def test_initialize_with_default_keymap_setting(self, manager_for):
        """Should use default keymap when custom_keymap is set to 'default'."""
        manager = manager_for({"custom_keymap": "default"})

        assert manager.get_custom_keymap_name() is None

    def test_load_custom_keymap_from_file(self, tmp_path: Path, manager_for):
        """Should load custom keymap from JSON file and merge it over the defaults."""
        keymap_file = write_keymap(
            tmp_path / "my-custom.json",
            {
                "keymap": {
                    "action_keys": [
                        {"key": "ctrl+x", "action": "quit", "context": "global"},
                        {"key": "o", "action": "follow_foreign_key", "context": "data_table"},
                    ]
                }
            },
        )

        manager = manager_for({"custom_keymap": str(keymap_file)})

        assert manager.get_custom_keymap_name() == str(keymap_file)
        assert manager.get_custom_keymap_path() == keymap_file.resolve()

        mapping = manager.build_mapping()
        assert mapping.lookup(GLOBAL_CONTEXT, "Ctrl+x") is NavigationAction.QUIT
        assert mapping.lookup("data_table", "o") is NavigationAction.FOLLOW_FOREIGN_KEY
        # Untouched defaults survive the merge
        assert mapping.lookup(GLOBAL_CONTEXT, "Ctrl+q") is NavigationAction.QUIT

    def test_load_keymap_by_name_from_config_dir(self, manager_for):
        """Should resolve a bare name to <config>/keymaps/<name>.json."""
        keymap_dir = custom_keymap_dir()
        keymap_dir.mkdir(parents=True, exist_ok=True)
        write_keymap(keymap_dir / "named.json", {"action_keys": [{"key": "F5", "action": "confirm"}]})

        manager = manager_for({"custom_keymap": "named"})

        assert manager.get_custom_keymap_name() == "named"
        assert manager.build_mapping().lookup(GLOBAL_CONTEXT, "F5") is NavigationAction.CONFIRM

    def test_load_custom_keymap_with_invalid_json(self, tmp_path: Path, capsys, manager_for):
        """Should handle invalid JSON gracefully."""
        keymap_file = tmp_path / "invalid.json"
        keymap_file.write_text("not valid json", encoding="utf-8")

        manager = manager_for({"custom_keymap": str(keymap_file)})

        captured = capsys.readouterr()
        assert "Failed to load custom keymap" in captured.err
        assert manager.get_custom_keymap_name() is None

    def test_load_custom_keymap_with_missing_file(self, tmp_path: Path, capsys, manager_for):
        """Should handle missing file gracefully."""
        manager_for({"custom_keymap": str(tmp_path / "nonexistent.json")})

        captured = capsys.readouterr()
        assert "Failed to load custom keymap" in captured.err
        assert "not found" in captured.err

    @pytest.mark.parametrize(
        ("entry", "message"),
        [
            ({"key": "x", "action": "explode"}, "Unknown action"),
            ({"key": "x", "action": "quit", "context": "query_normal"}, "unknown context"),
            ({"key": "hyper+x", "action": "quit"}, "Unknown modifier"),
            ({"action": "quit"}, 'missing required "key"'),
            ({"key": "x", "action": "quit", "label": "Quit"}, "unknown field"),
        ],
    )
    def test_invalid_action_keys_are_rejected(self, tmp_path: Path, capsys, manager_for, entry, message):
        """Should report the offending entry and keep the defaults."""
        keymap_file = write_keymap(tmp_path / "bad.json", {"action_keys": [entry]})

        manager = manager_for({"custom_keymap": str(keymap_file)})

        captured = capsys.readouterr()
        assert message in captured.err
        assert manager.get_custom_keymap_name() is None
        assert manager.build_mapping().lookup(GLOBAL_CONTEXT, "c") is NavigationAction.FOCUS_CONNECTIONS

    def test_duplicate_chord_in_same_context_is_rejected(self, tmp_path: Path, capsys, manager_for):
        """Should refuse one chord bound to two actions, including alias spellings."""
        keymap_file = write_keymap(
            tmp_path / "dupes.json",
            {
                "action_keys": [
                    {"key": "G", "action": "last_page", "context": "data_table"},
                    {"key": "shift+g", "action": "first_page", "context": "data_table"},
                ]
            },
        )

        manager = manager_for({"custom_keymap": str(keymap_file)})

        captured = capsys.readouterr()
        assert "already binds it" in captured.err
        assert manager.get_custom_keymap_name() is None

    def test_same_chord_in_different_contexts_is_allowed(self, tmp_path: Path, manager_for):
        """Should accept a chord reused across contexts."""
        keymap_file = write_keymap(
            tmp_path / "contexts.json",
            {
                "action_keys": [
                    {"key": "z", "action": "undo", "context": "vim_normal"},
                    {"key": "z", "action": "sort", "context": "data_table"},
                ]
            },
        )

        manager = manager_for({"custom_keymap": str(keymap_file)})

        mapping = manager.build_mapping()
        assert mapping.lookup("vim_normal", "z") is NavigationAction.UNDO
        assert mapping.lookup("data_table", "z") is NavigationAction.SORT

    def test_pane_modifier_from_settings(self, manager_for):
        """Should compose directional chords with the configured modifier."""
        manager = manager_for({"pane_modifier": "alt"})

        mapping = manager.build_mapping()
        assert mapping.pane_modifier is PaneModifier.ALT
        assert mapping.lookup(COMPOSED_CONTEXT, "Alt+k") is NavigationAction.MOVE_UP

    def test_pane_modifier_from_keymap_file(self, tmp_path: Path, manager_for):
        """Should let a keymap file pick the pane modifier."""
        keymap_file = write_keymap(tmp_path / "ctrl.json", {"pane_modifier": "ctrl", "action_keys": []})

        manager = manager_for({"custom_keymap": str(keymap_file)})

        assert manager.pane_modifier is PaneModifier.CTRL

    def test_invalid_modes_fall_back(self, capsys, manager_for):
        """Should warn and keep defaults for unknown mode values."""
        manager = manager_for({"pane_modifier": "super", "default_editing_mode": "emacs"})

        captured = capsys.readouterr()
        assert "Invalid pane_modifier" in captured.err
        assert "Invalid default_editing_mode" in captured.err
        assert manager.pane_modifier is PaneModifier.SHIFT
        assert manager.default_editing_mode is EditingMode.VIM

    def test_editing_mode_from_settings(self, manager_for):
        manager = manager_for({"default_editing_mode": "cursor"})

        assert manager.default_editing_mode is EditingMode.CURSOR

    def test_conflicting_custom_binding_is_recorded(self, tmp_path: Path, manager_for):
        """Should record a custom chord that shadows a pane move."""
        keymap_file = write_keymap(
            tmp_path / "shadow.json",
            {"pane_modifier": "ctrl", "action_keys": [{"key": "ctrl+h", "action": "undo", "context": "vim_normal"}]},
        )

        manager = manager_for({"custom_keymap": str(keymap_file)})

        assert manager.build_mapping().conflicts == ("vim_normal:Ctrl+h undo shadows move_left",)

    def test_reset_to_default(self, tmp_path: Path, manager_for):
        """Should reset to default keymap."""
        keymap_file = write_keymap(tmp_path / "test.json", {"keymap": {"action_keys": []}})

        manager = manager_for({"custom_keymap": str(keymap_file)})
        assert manager.get_custom_keymap_name() is not None

        manager.reset_to_default()

        assert manager.get_custom_keymap_name() is None
        assert manager.get_custom_keymap_path() is None

    def test_reset_restores_settings_pane_modifier(self, tmp_path: Path, manager_for):
        """Should drop a modifier that only the keymap file set."""
        keymap_file = write_keymap(tmp_path / "ctrl.json", {"pane_modifier": "ctrl", "action_keys": []})

        manager = manager_for({"custom_keymap": str(keymap_file), "pane_modifier": "alt"})
        assert manager.pane_modifier is PaneModifier.CTRL

        manager.reset_to_default()

        assert manager.pane_modifier is PaneModifier.ALT
        assert manager.build_mapping().lookup(COMPOSED_CONTEXT, "Alt+h") is NavigationAction.MOVE_LEFT
