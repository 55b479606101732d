"""The input dispatch loop: the single entry point for key events.

Each key is resolved and dispatched to completion before the next one is
read. Work with real latency (queries, foreign-key lookups, schema
fetches) is handed to a ``RequestRunner``; its results come back through
a ``CompletionQueue`` that is drained on the same thread that handles
keys, so completions and key events never interleave mid-update.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any

from lazylode.backends.base import QueryResult, QuerySpec, SchemaResult, TargetLocation
from lazylode.editor.register import YankRegister
from lazylode.navigation.layout import DEFAULT_LAYOUT, PaneSpec
from lazylode.navigation.manager import FocusState, NavigationManager
from lazylode.shared.debug_events import emit_debug_event

from .actions import CountDigit, ResolvedAction
from .completions import Completion, CompletionKind, CompletionQueue
from .effects import NO_EFFECT, Effect, EffectKind, notify
from .input_context import InputContext
from .keymap import KeyMapping, default_keymap
from .resolver import KeyEvent, KeyResolver
from .types import BoxKind, EditingMode, PageDirection, PaneKind, ViewMode

if TYPE_CHECKING:
    from lazylode.backends.base import QueryBackend
    from lazylode.backends.runner import RequestRunner, Submit
    from lazylode.navigation.boxes import Box


class InputDispatcher:
    """Top-level coordinator for the navigation core.

    Owns the shared yank register, the navigation manager (and through it
    every pane, box and editor) and the key resolver.
    """

    def __init__(
        self,
        keymap: KeyMapping | None = None,
        *,
        editing_mode: EditingMode = EditingMode.VIM,
        layout: tuple[PaneSpec, ...] = DEFAULT_LAYOUT,
    ) -> None:
        self.register = YankRegister()
        self.navigation = NavigationManager(self.register, layout, editing_mode=editing_mode)
        self.resolver = KeyResolver(keymap or default_keymap())
        self.completions = CompletionQueue()
        self._runner: RequestRunner | None = None
        self._connection: str | None = None
        self._latest: dict[CompletionKind, int] = {}
        self._last_query: QuerySpec | None = None
        self._last_result: QueryResult | None = None

    # ─────────────────────────────────────────────────────────────────
    # Setup
    # ─────────────────────────────────────────────────────────────────

    @property
    def keymap(self) -> KeyMapping:
        return self.resolver.keymap

    def set_keymap(self, keymap: KeyMapping) -> None:
        self.resolver.set_keymap(keymap)

    @property
    def connection(self) -> str | None:
        return self._connection

    @property
    def runner(self) -> RequestRunner | None:
        return self._runner

    def attach_backend(self, backend: QueryBackend, submit: Submit | None = None) -> None:
        """Route requests to ``backend`` and list its connections."""
        from lazylode.backends.runner import RequestRunner

        self._runner = RequestRunner(backend, self.completions, submit)
        connections = backend.list_connections()
        box = self._box(PaneKind.CONNECTIONS, BoxKind.LIST_VIEW)
        if box is not None and box.items is not None:
            box.items.load(connections)
        if connections and self._connection is None:
            self._connection = connections[0]

    # ─────────────────────────────────────────────────────────────────
    # Read-only state
    # ─────────────────────────────────────────────────────────────────

    def current_focus(self) -> FocusState:
        return self.navigation.current_focus()

    def context(self) -> InputContext:
        nav = self.navigation
        box = nav.active_box
        return InputContext(
            pane=nav.focused_pane.kind,
            box=box.kind if box else None,
            editing_mode=box.editing_mode if box else EditingMode.VIM,
            vim_mode=box.vim_mode if box else None,
            view_mode=box.view_mode if box else ViewMode.VIEW,
            supports_editing=box.supports_editing if box else False,
            pending_count=box.editor.has_count if box else False,
            awaiting_char=box.editor.pending_replace if box else False,
            editing_cell=box.editing_cell if box else False,
            modal_open=nav.modal_open,
        )

    # ─────────────────────────────────────────────────────────────────
    # Key handling
    # ─────────────────────────────────────────────────────────────────

    def handle_key(self, event: KeyEvent | str) -> Effect:
        """Resolve and dispatch one key event."""
        if isinstance(event, str):
            event = KeyEvent.parse(event)
        context = self.context()
        resolved = self.resolver.resolve(event, context)
        box = self.navigation.active_box

        if resolved is None:
            if box is not None:
                box.editor.clear_count()
            return NO_EFFECT
        if isinstance(resolved, CountDigit):
            if box is not None:
                box.editor.accumulate_digit(resolved.digit)
            return NO_EFFECT
        return self.dispatch(resolved)

    def dispatch(self, resolved: ResolvedAction) -> Effect:
        """Route a resolved action to the active box, then to navigation."""
        nav = self.navigation
        box = nav.active_box
        count = box.editor.consume_count() if box is not None else 1

        effect = nav.active_box_manager.dispatch(resolved, count)
        if effect is None:
            effect = nav.dispatch(resolved)
        effect = self._issue_requests(effect)

        emit_debug_event(
            "key.dispatch",
            category="input",
            action=resolved.action.value,
            count=count,
            effect=effect.kind.value,
            pane=nav.focused_pane.kind.value,
        )
        return effect

    # ─────────────────────────────────────────────────────────────────
    # External requests
    # ─────────────────────────────────────────────────────────────────

    def note_request_started(self, kind: CompletionKind, request_id: int) -> None:
        """Record the newest request for a target; older ones become stale."""
        self._latest[kind] = request_id

    def _issue_requests(self, effect: Effect) -> Effect:
        runner = self._runner
        if runner is None:
            return effect
        kind = effect.kind

        if kind is EffectKind.REQUEST_QUERY and effect.query is not None:
            return self._run_query(effect, QuerySpec(effect.query))
        if kind is EffectKind.REQUEST_PAGE_CHANGE and self._last_query is not None and effect.page is not None:
            return self._run_query(effect, replace(self._last_query, page=self._target_page(effect.page)))
        if kind is EffectKind.REQUEST_SORT and self._last_query is not None and effect.column:
            return self._run_query(effect, replace(self._last_query, sort_column=effect.column, page=0))
        if kind is EffectKind.REQUEST_FOREIGN_KEY_FOLLOW and effect.cell is not None:
            request_id = runner.follow_foreign_key(effect.cell)
            self.note_request_started(CompletionKind.LOOKUP, request_id)
            return replace(effect, request_id=request_id)
        if (
            kind is EffectKind.REQUEST_CONFIRM
            and effect.message == PaneKind.CONNECTIONS.value
            and isinstance(effect.target, str)
        ):
            self._connection = effect.target
            request_id = runner.fetch_schema(effect.target)
            self.note_request_started(CompletionKind.SCHEMA, request_id)
            return replace(effect, request_id=request_id)
        return effect

    def _run_query(self, effect: Effect, spec: QuerySpec) -> Effect:
        runner = self._runner
        if runner is None:
            return effect
        if self._connection is None:
            return notify("No connection selected", error=True)
        self._last_query = spec
        request_id = runner.execute_query(self._connection, spec)
        self.note_request_started(CompletionKind.QUERY, request_id)
        return replace(effect, request_id=request_id)

    def _target_page(self, direction: PageDirection) -> int:
        if self._last_query is None:
            return 0
        page = self._last_query.page
        if direction is PageDirection.FIRST:
            return 0
        if direction is PageDirection.PREVIOUS:
            return max(0, page - 1)
        last = self._last_page()
        if direction is PageDirection.NEXT:
            return page + 1 if last is None else min(page + 1, last)
        return page if last is None else last

    def _last_page(self) -> int | None:
        result = self._last_result
        spec = self._last_query
        if result is None or spec is None or result.row_count is None:
            return None
        return max(0, (result.row_count - 1) // spec.page_size)

    # ─────────────────────────────────────────────────────────────────
    # Completions
    # ─────────────────────────────────────────────────────────────────

    def process_completions(self) -> list[Effect]:
        """Drain the completion queue and apply each message in order."""
        effects = []
        for completion in self.completions.drain():
            effects.append(self.apply_completion(completion))
        return effects

    def apply_completion(self, completion: Completion) -> Effect:
        outcome: Any = completion.value if completion.ok else completion.error
        if completion.kind is CompletionKind.QUERY:
            return self.on_query_complete(completion.request_id, outcome)
        if completion.kind is CompletionKind.LOOKUP:
            return self.on_lookup_complete(completion.request_id, outcome)
        return self.on_schema_fetched(completion.request_id, outcome)

    def _is_stale(self, kind: CompletionKind, request_id: int) -> bool:
        latest = self._latest.get(kind)
        if latest is None or latest == request_id:
            return False
        emit_debug_event(
            "completion.stale",
            category="backend",
            kind=kind.value,
            request_id=request_id,
            latest=latest,
        )
        return True

    def on_query_complete(self, request_id: int, outcome: QueryResult | Exception) -> Effect:
        if self._is_stale(CompletionKind.QUERY, request_id):
            return NO_EFFECT
        if isinstance(outcome, Exception):
            return notify(f"Query failed: {outcome}", error=True)
        self._last_result = outcome
        self._load_results(outcome)
        self.navigation.focus_location(PaneKind.RESULTS, BoxKind.DATA_TABLE)
        total = outcome.row_count if outcome.row_count is not None else len(outcome.rows)
        return Effect(
            EffectKind.FOCUS_CHANGED,
            target=PaneKind.RESULTS,
            message=f"{total} row(s)",
            request_id=request_id,
        )

    def on_lookup_complete(self, request_id: int, outcome: TargetLocation | Exception) -> Effect:
        if self._is_stale(CompletionKind.LOOKUP, request_id):
            return NO_EFFECT
        if isinstance(outcome, Exception):
            return notify(f"Lookup failed: {outcome}", error=True)
        if outcome.result is not None:
            self._last_query = QuerySpec(f"SELECT * FROM {outcome.result.table}")
            self._last_result = outcome.result
            self._load_results(outcome.result)
        self.navigation.focus_location(outcome.pane, outcome.box)
        box = self.navigation.active_box
        if box is not None and box.grid is not None:
            box.grid.move_to(outcome.row)
        return Effect(EffectKind.FOCUS_CHANGED, target=outcome, request_id=request_id)

    def on_schema_fetched(self, request_id: int, outcome: SchemaResult | Exception) -> Effect:
        if self._is_stale(CompletionKind.SCHEMA, request_id):
            return NO_EFFECT
        if isinstance(outcome, Exception):
            return notify(f"Schema load failed: {outcome}", error=True)
        box = self._box(PaneKind.SCHEMA_EXPLORER, BoxKind.TREE_VIEW)
        if box is not None and box.items is not None:
            box.items.load(outcome.items)
        return Effect(EffectKind.BUFFER_CHANGED, target=PaneKind.SCHEMA_EXPLORER, request_id=request_id)

    def _load_results(self, result: QueryResult) -> None:
        box = self._box(PaneKind.RESULTS, BoxKind.DATA_TABLE)
        if box is not None and box.grid is not None:
            box.grid.load(result.table, result.columns, result.rows, result.page)

    def _box(self, pane: PaneKind, kind: BoxKind) -> Box | None:
        return self.navigation.pane(pane).boxes.box(kind)
