"""Main Textual application for lazylode."""

from __future__ import annotations

from typing import Any, Callable

import pyperclip
from rich.console import Group
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Static

from lazylode.backends.base import QueryBackend
from lazylode.core.dispatch import InputDispatcher
from lazylode.core.effects import Effect, EffectKind
from lazylode.core.keymap import KeyMapping
from lazylode.core.types import PANE_LABELS, EditingMode, PaneKind
from lazylode.shared.debug_events import emit_debug_event

from .keys import key_event_from_textual
from .render import render_box

PANE_WIDGET_IDS: dict[PaneKind, str] = {
    PaneKind.CONNECTIONS: "connections-pane",
    PaneKind.QUERY_INPUT: "query-pane",
    PaneKind.RESULTS: "results-pane",
    PaneKind.SCHEMA_EXPLORER: "schema-pane",
    PaneKind.COMMAND_LINE: "command-pane",
}


class LazyLodeApp(App):
    """Terminal shell around the navigation core.

    Every key goes to ``InputDispatcher.handle_key``; the returned effect
    decides what the shell does. Backend calls run in thread workers and
    their completions are drained back on the app thread.
    """

    TITLE = "lazylode"

    CSS = """
    Screen {
        background: $surface;
    }

    #sidebar {
        width: 30%;
    }

    #main-panel {
        width: 1fr;
    }

    .pane {
        border: round $primary-darken-2;
        padding: 0 1;
        height: 1fr;
    }

    .pane.focused {
        border: round $accent;
    }

    .pane.hidden {
        display: none;
    }

    #connections-pane {
        height: 30%;
    }

    #query-pane {
        height: 30%;
    }

    #command-pane {
        height: 3;
    }

    #status-bar {
        height: 1;
        background: $surface-darken-1;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        keymap: KeyMapping | None = None,
        *,
        backend: QueryBackend | None = None,
        editing_mode: EditingMode = EditingMode.VIM,
    ) -> None:
        super().__init__()
        self.dispatcher = InputDispatcher(keymap, editing_mode=editing_mode)
        self._backend = backend
        self._register_version = self.dispatcher.register.version
        self._last_message = ""

    def compose(self) -> ComposeResult:
        with Horizontal(id="content"):
            with Vertical(id="sidebar"):
                yield self._pane_widget(PaneKind.CONNECTIONS)
                yield self._pane_widget(PaneKind.SCHEMA_EXPLORER)
            with Vertical(id="main-panel"):
                yield self._pane_widget(PaneKind.QUERY_INPUT)
                yield self._pane_widget(PaneKind.RESULTS)
        yield self._pane_widget(PaneKind.COMMAND_LINE)
        yield Static(id="status-bar")

    def _pane_widget(self, kind: PaneKind) -> Static:
        widget = Static(id=PANE_WIDGET_IDS[kind], classes="pane")
        widget.border_title = PANE_LABELS[kind]
        return widget

    def on_mount(self) -> None:
        if self._backend is not None:
            self.dispatcher.attach_backend(self._backend, submit=self._submit)
        self.refresh_panes()

    # ─────────────────────────────────────────────────────────────────
    # Backend work
    # ─────────────────────────────────────────────────────────────────

    def _submit(self, job: Callable[[], None]) -> None:
        def work() -> None:
            job()
            self.call_from_thread(self._drain_completions)

        self.run_worker(work, name="backend-request", thread=True, group="backend")

    def _drain_completions(self) -> None:
        for effect in self.dispatcher.process_completions():
            self.apply_effect(effect)
        self.refresh_panes()

    # ─────────────────────────────────────────────────────────────────
    # Input
    # ─────────────────────────────────────────────────────────────────

    def on_key(self, event: events.Key) -> None:
        key_event = key_event_from_textual(event.key, event.character)
        event.stop()
        event.prevent_default()
        if key_event is None:
            emit_debug_event("ui.key_unknown", category="input", key=event.key)
            return
        effect = self.dispatcher.handle_key(key_event)
        self.apply_effect(effect)
        self.refresh_panes()

    def apply_effect(self, effect: Effect) -> None:
        kind = effect.kind
        if kind is EffectKind.REQUEST_QUIT:
            self.exit()
            return
        if kind is EffectKind.NOTIFY:
            self._show_message(effect.message, error=effect.error)
        elif kind is EffectKind.REQUEST_SEARCH:
            self._show_message("Search: type in the command line (not available in this view)")
        elif kind is EffectKind.REQUEST_CONFIRM and effect.target is not None:
            self._show_message(f"Selected: {effect.target}")
        elif kind is EffectKind.REQUEST_QUERY and self._backend is None:
            self._show_message("No backend attached; start with --mock", error=True)
        elif kind is EffectKind.FOCUS_CHANGED and effect.message:
            self._show_message(effect.message)

        version = self.dispatcher.register.version
        if version != self._register_version:
            self._register_version = version
            content = self.dispatcher.register.content
            if content:
                self._copy_text(content)

    def _copy_text(self, text: str) -> bool:
        """Copy text to the system clipboard. Returns False if no route worked."""
        # Prefer Textual's clipboard support (OSC52 where available).
        try:
            self.copy_to_clipboard(text)
            return True
        except Exception as exc:
            emit_debug_event("clipboard.osc52_failed", category="ui", error=repr(exc))

        # Fallback to the system clipboard via pyperclip.
        try:
            pyperclip.copy(text)
            return True
        except pyperclip.PyperclipException as exc:
            emit_debug_event("clipboard.unavailable", category="ui", error=repr(exc))
            return False

    def _show_message(self, message: str, *, error: bool = False) -> None:
        self._last_message = message
        self.notify(message, severity="error" if error else "information")

    # ─────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────

    def refresh_panes(self) -> None:
        nav = self.dispatcher.navigation
        focused = nav.focused_pane.kind
        active = nav.active_box
        for pane in nav.panes:
            widget = self.query_one(f"#{PANE_WIDGET_IDS[pane.kind]}", Static)
            widget.set_class(pane.kind is focused, "focused")
            widget.set_class(not pane.visible, "hidden")
            renderables: list[Any] = [render_box(box, box is active) for box in pane.boxes.boxes]
            if pane.kind is focused and nav.modal is not None:
                modal = nav.modal
                renderables.append(Text(f"[{modal.title}]", style="bold"))
                renderables.append(render_box(modal, True))
            widget.update(Group(*renderables) if renderables else Text(""))

        status = self.query_one("#status-bar", Static)
        count = active.editor.count_text if active is not None else ""
        status.update(
            Text.assemble(
                (f" {nav.mode_indicator()} ", "reverse"),
                f"  {nav.navigation_info()}",
                f"  {count}" if count else "",
                f"  {self._last_message}" if self._last_message else "",
            )
        )
