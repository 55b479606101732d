"""End-to-end tests: key strings in, focus state and effects out."""

from __future__ import annotations

import pytest

from lazylode.backends.base import QueryError
from lazylode.backends.mock import MockBackend
from lazylode.core.completions import Completion, CompletionKind
from lazylode.core.dispatch import InputDispatcher
from lazylode.core.effects import NO_EFFECT, EffectKind
from lazylode.core.keymap import default_keymap
from lazylode.core.types import BoxKind, PaneKind, PaneModifier, VimMode
from lazylode.shared.debug_events import get_recorder


def press(dispatcher: InputDispatcher, *keys: str):
    effect = None
    for key in keys:
        effect = dispatcher.handle_key(key)
    return effect


def query_box(dispatcher: InputDispatcher):
    return dispatcher.navigation.pane(PaneKind.QUERY_INPUT).boxes.box(BoxKind.TEXT_INPUT)


def results_grid(dispatcher: InputDispatcher):
    return dispatcher.navigation.pane(PaneKind.RESULTS).boxes.box(BoxKind.DATA_TABLE).grid


def run_query(dispatcher: InputDispatcher, sql: str):
    query_box(dispatcher).editor.set_text(sql)
    dispatcher.navigation.focus_location(PaneKind.QUERY_INPUT)
    effect = press(dispatcher, "Enter")
    return effect, dispatcher.process_completions()


class TestFocusFlow:
    def test_focus_connections_then_move_right(self, dispatcher):
        press(dispatcher, "c")
        assert dispatcher.current_focus().pane is PaneKind.CONNECTIONS
        effect = press(dispatcher, "Shift+l")
        assert effect.kind is EffectKind.FOCUS_CHANGED
        assert dispatcher.current_focus().pane is PaneKind.QUERY_INPUT

    def test_move_at_edge_is_noop(self, dispatcher):
        before = dispatcher.navigation.snapshot()
        assert press(dispatcher, "L") is NO_EFFECT
        assert dispatcher.navigation.snapshot() == before

    def test_ctrl_pane_modifier(self):
        dispatcher = InputDispatcher(default_keymap(PaneModifier.CTRL))
        press(dispatcher, "Ctrl+j")
        assert dispatcher.current_focus().pane is PaneKind.RESULTS
        # Shift+k is no longer a pane move
        press(dispatcher, "Shift+k")
        assert dispatcher.current_focus().pane is PaneKind.RESULTS

    def test_pane_focus_keys_are_text_in_insert(self, dispatcher):
        press(dispatcher, "i", "c", "q")
        assert dispatcher.current_focus().pane is PaneKind.QUERY_INPUT
        assert query_box(dispatcher).editor.text == "cq"


class TestEditing:
    def test_yank_paste_round_trip(self, dispatcher):
        press(dispatcher, "i", "a", "b", "c", "Esc", "v", "h", "h", "h", "y", "$", "p")
        editor = query_box(dispatcher).editor
        assert editor.text == "abcabc"
        assert dispatcher.current_focus().vim_mode is VimMode.NORMAL

    def test_count_prefix(self, dispatcher):
        query_box(dispatcher).editor.set_text("abcdef")
        press(dispatcher, "3", "x")
        assert query_box(dispatcher).editor.text == "def"

    def test_count_matches_repeated_keys(self):
        counted = InputDispatcher()
        repeated = InputDispatcher()
        for d in (counted, repeated):
            query_box(d).editor.set_text("one two three four five")
        press(counted, "3", "w")
        press(repeated, "w", "w", "w")
        assert query_box(counted).editor.cursor == query_box(repeated).editor.cursor

    def test_unmapped_key_clears_count(self, dispatcher):
        query_box(dispatcher).editor.set_text("abcdef")
        press(dispatcher, "3", "z", "x")
        assert query_box(dispatcher).editor.text == "bcdef"

    def test_replace_accepts_digit(self, dispatcher):
        query_box(dispatcher).editor.set_text("abc")
        press(dispatcher, "r", "9")
        assert query_box(dispatcher).editor.text == "9bc"

    def test_operator_and_open_line_keys(self, dispatcher):
        query_box(dispatcher).editor.set_text("one\ntwo")
        press(dispatcher, "d", "d")
        assert query_box(dispatcher).editor.text == "two"
        press(dispatcher, "y", "w", "o", "x")
        editor = query_box(dispatcher).editor
        assert editor.text == "two\nx"
        assert editor.register.content == "two"
        assert dispatcher.current_focus().vim_mode is VimMode.INSERT

    def test_command_mode_quit(self, dispatcher):
        effect = press(dispatcher, ":", "q", "Enter")
        assert effect.kind is EffectKind.REQUEST_QUIT


COUNT_TEXT = "\n".join(f"row {i} alpha, beta_gamma (delta) epsilon" for i in range(80))


def text_state(keys: list[str]) -> tuple[str, int]:
    dispatcher = InputDispatcher()
    editor = query_box(dispatcher).editor
    editor.set_text(COUNT_TEXT)
    editor.buffer.move_to(len(COUNT_TEXT) // 2)
    press(dispatcher, *keys)
    return editor.text, editor.cursor


def table_row(keys: list[str]) -> int:
    dispatcher = InputDispatcher()
    grid = results_grid(dispatcher)
    grid.load("numbers", ["n", "square"], [(i, i * i) for i in range(120)])
    dispatcher.navigation.focus_location(PaneKind.RESULTS, BoxKind.DATA_TABLE)
    grid.move_to(60)
    press(dispatcher, *keys)
    return grid.row


class TestCountEquivalence:
    """A numeric prefix N before a motion equals pressing the motion N times."""

    @pytest.mark.parametrize("key", ["h", "j", "k", "l", "w", "b", "x"])
    @pytest.mark.parametrize("n", range(1, 51))
    def test_text_motion(self, n, key):
        assert text_state([*str(n), key]) == text_state([key] * n)

    @pytest.mark.parametrize("key", ["j", "k"])
    @pytest.mark.parametrize("n", range(1, 51))
    def test_table_row_motion(self, n, key):
        assert table_row([*str(n), key]) == table_row([key] * n)


class TestRequests:
    def test_query_without_backend_is_returned(self, dispatcher):
        query_box(dispatcher).editor.set_text("SELECT * FROM orders")
        effect = press(dispatcher, "Enter")
        assert effect.kind is EffectKind.REQUEST_QUERY
        assert effect.request_id is None

    def test_query_loads_results_and_focuses_table(self, connected):
        effect, effects = run_query(connected, "SELECT * FROM orders")
        assert effect.kind is EffectKind.REQUEST_QUERY
        assert effect.request_id is not None
        assert [e.kind for e in effects] == [EffectKind.FOCUS_CHANGED]
        assert effects[0].message == "4 row(s)"
        focus = connected.current_focus()
        assert (focus.pane, focus.box) == (PaneKind.RESULTS, BoxKind.DATA_TABLE)
        assert results_grid(connected).table == "orders"

    def test_query_error_notifies(self, connected):
        _, effects = run_query(connected, "DROP TABLE orders")
        assert effects[0].kind is EffectKind.NOTIFY
        assert effects[0].error
        assert "Unsupported query" in effects[0].message

    def test_unexpected_backend_exception_notifies(self):
        class CrashingBackend(MockBackend):
            def run_query(self, connection, spec):
                raise RuntimeError("driver crashed")

        dispatcher = InputDispatcher()
        dispatcher.attach_backend(CrashingBackend("shop"))
        _, effects = run_query(dispatcher, "SELECT * FROM orders")
        assert [e.kind for e in effects] == [EffectKind.NOTIFY]
        assert effects[0].error
        assert effects[0].message == "Query failed: driver crashed"
        assert dispatcher.current_focus().pane is PaneKind.QUERY_INPUT

    def test_count_moves_table_cursor(self, connected):
        run_query(connected, "SELECT * FROM orders")
        press(connected, "3", "j")
        assert results_grid(connected).row == 3

    def test_edit_result_cell(self, connected, mock_backend):
        run_query(connected, "SELECT * FROM orders")
        press(connected, "l", "e")
        assert connected.navigation.mode_indicator() == "EDIT"
        effect = press(connected, "Backspace", "5", "Enter")
        assert effect.kind is EffectKind.BUFFER_CHANGED
        assert results_grid(connected).row_values() == (10, 5, 25.5)
        assert connected.navigation.mode_indicator() == "NAV"
        assert len(mock_backend.queries) == 1

    def test_follow_foreign_key(self, connected):
        run_query(connected, "SELECT * FROM orders")
        press(connected, "l")
        effect = press(connected, "F")
        assert effect.kind is EffectKind.REQUEST_FOREIGN_KEY_FOLLOW
        assert effect.cell.value == 2
        effects = connected.process_completions()
        assert effects[0].kind is EffectKind.FOCUS_CHANGED
        grid = results_grid(connected)
        assert grid.table == "customers"
        assert grid.row_values() == (2, "Grace", "grace@example.com")

    def test_follow_non_key_column_notifies(self, connected):
        run_query(connected, "SELECT * FROM orders")
        press(connected, "F")
        effects = connected.process_completions()
        assert effects[0].kind is EffectKind.NOTIFY
        assert effects[0].error

    def test_sort_reruns_query(self, connected, mock_backend):
        run_query(connected, "SELECT * FROM orders")
        press(connected, "l", "o")
        connected.process_completions()
        assert [row[1] for row in results_grid(connected).rows] == [1, 2, 2, 3]
        assert len(mock_backend.queries) == 2

    def test_confirm_connection_loads_schema(self, connected):
        press(connected, "c", "Enter")
        effects = connected.process_completions()
        assert effects[0].kind is EffectKind.BUFFER_CHANGED
        schema = connected.navigation.pane(PaneKind.SCHEMA_EXPLORER).boxes.box(BoxKind.TREE_VIEW)
        assert schema.items.items[0] == "customers"
        assert "  customer_id -> customers.id" in schema.items.items
        assert connected.connection == "mock:shop"


class TestCompletions:
    def test_stale_completion_is_ignored(self, connected):
        recorder = get_recorder()
        recorder.set_enabled(True)
        connected.note_request_started(CompletionKind.QUERY, 7)
        effect = connected.apply_completion(Completion(CompletionKind.QUERY, 3, error=QueryError("late")))
        assert effect is NO_EFFECT
        assert "completion.stale" in [e.name for e in recorder.history()]

    def test_latest_completion_is_applied(self, connected):
        connected.note_request_started(CompletionKind.QUERY, 7)
        effect = connected.apply_completion(Completion(CompletionKind.QUERY, 7, error=QueryError("boom")))
        assert effect.kind is EffectKind.NOTIFY
        assert effect.message == "Query failed: boom"

    def test_only_newest_of_two_queries_lands(self, mock_backend):
        jobs = []
        dispatcher = InputDispatcher()
        dispatcher.attach_backend(mock_backend, submit=jobs.append)
        query_box(dispatcher).editor.set_text("SELECT * FROM orders")
        press(dispatcher, "Enter")
        query_box(dispatcher).editor.set_text("SELECT * FROM customers")
        press(dispatcher, "Enter")
        # Run the jobs newest first so the older result arrives last.
        for job in reversed(jobs):
            job()
        effects = dispatcher.process_completions()
        assert [e.kind for e in effects] == [EffectKind.FOCUS_CHANGED, EffectKind.NONE]
        assert results_grid(dispatcher).table == "customers"
