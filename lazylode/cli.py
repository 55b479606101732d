#!/usr/bin/env python3
"""lazylode - keyboard-driven terminal database explorer."""

from __future__ import annotations

import argparse
import sys

from .core.keymap import GLOBAL_CONTEXT, KeyMapping
from .core.keymap_manager import KeymapManager
from .core.types import EditingMode, PaneModifier
from .shared.debug_events import get_recorder
from .stores.base import get_config_dir
from .stores.settings import SettingsStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazylode",
        description="Keyboard-driven terminal database explorer",
    )
    parser.add_argument(
        "--mock",
        metavar="PROFILE",
        help="Run against in-memory mock data (profiles: shop, empty)",
    )
    parser.add_argument(
        "--keymap",
        metavar="NAME",
        help="Custom keymap name (from <config>/keymaps) or path to a keymap JSON file",
    )
    parser.add_argument(
        "--editing-mode",
        choices=[mode.value for mode in EditingMode],
        help="Default editing mode for text boxes (overrides settings)",
    )
    parser.add_argument(
        "--pane-modifier",
        choices=[mod.value for mod in PaneModifier],
        help="Modifier combined with h/j/k/l to move between panes (overrides settings)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.add_parser("keys", help="Print the effective key bindings")
    return parser


def load_keymap(args: argparse.Namespace, settings_store: SettingsStore) -> tuple[KeymapManager, KeyMapping]:
    """Apply settings and command-line overrides, and build the key mapping."""
    manager = KeymapManager(settings_store=settings_store)
    settings = manager.initialize()

    if settings.get("debug_events_enabled"):
        get_recorder().set_enabled(True, get_config_dir() / "debug-events.jsonl")

    if args.keymap:
        manager.reset_to_default()
        manager.load_named_keymap(args.keymap)
    if args.pane_modifier:
        manager.set_pane_modifier(args.pane_modifier)
    if args.editing_mode:
        manager.set_default_editing_mode(args.editing_mode)

    mapping = manager.build_mapping()
    for conflict in mapping.conflicts:
        print(f"[lazylode] Key conflict: {conflict}", file=sys.stderr)
    return manager, mapping


def cmd_keys(mapping: KeyMapping) -> int:
    from rich.console import Console
    from rich.table import Table

    table = Table(title=f"Key bindings (pane modifier: {mapping.pane_modifier.value})")
    table.add_column("Context")
    table.add_column("Key")
    table.add_column("Action")
    for binding in sorted(mapping.bindings(), key=lambda b: (b.context or "", b.action, b.key)):
        table.add_row(binding.context or GLOBAL_CONTEXT, binding.key, binding.action)
    for chord, action in mapping.composed.items():
        table.add_row("pane_modifier", chord, action.value)
    Console().print(table)
    return 0


def main() -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args()

    manager, mapping = load_keymap(args, SettingsStore.get_instance())

    if args.command == "keys":
        return cmd_keys(mapping)

    backend = None
    if args.mock:
        from .backends.mock import MockBackend

        try:
            backend = MockBackend(args.mock)
        except ValueError as exc:
            print(f"[lazylode] {exc}", file=sys.stderr)
            return 1

    from .ui.app import LazyLodeApp

    app = LazyLodeApp(mapping, backend=backend, editing_mode=manager.default_editing_mode)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
