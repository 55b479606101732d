"""Integration tests for the Textual shell using Pilot."""

from __future__ import annotations

import pyperclip
import pytest

from lazylode.backends.mock import MockBackend
from lazylode.core.types import BoxKind, PaneKind, VimMode
from lazylode.ui.app import LazyLodeApp

PAUSE = 0.1


def query_editor(app: LazyLodeApp):
    return app.dispatcher.navigation.pane(PaneKind.QUERY_INPUT).boxes.box(BoxKind.TEXT_INPUT).editor


@pytest.mark.asyncio
async def test_app_starts_on_query_pane():
    app = LazyLodeApp()
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause(PAUSE)
        assert app.dispatcher.current_focus().pane is PaneKind.QUERY_INPUT
        assert app.query_one("#query-pane").has_class("focused")


@pytest.mark.asyncio
async def test_keys_move_focus():
    app = LazyLodeApp()
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.press("c")
        await pilot.pause(PAUSE)
        assert app.dispatcher.current_focus().pane is PaneKind.CONNECTIONS
        assert app.query_one("#connections-pane").has_class("focused")
        await pilot.press("L")
        await pilot.pause(PAUSE)
        assert app.dispatcher.current_focus().pane is PaneKind.QUERY_INPUT


@pytest.mark.asyncio
async def test_typing_in_insert_mode():
    app = LazyLodeApp()
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.press("i", "s", "e", "l", "escape")
        await pilot.pause(PAUSE)
        assert query_editor(app).text == "sel"
        assert app.dispatcher.current_focus().vim_mode is VimMode.NORMAL


@pytest.mark.asyncio
async def test_query_runs_in_worker_and_fills_results():
    app = LazyLodeApp(backend=MockBackend("shop"))
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause(PAUSE)
        query_editor(app).set_text("SELECT * FROM customers")
        await pilot.press("enter")
        await app.workers.wait_for_complete()
        await pilot.pause(PAUSE)
        focus = app.dispatcher.current_focus()
        assert (focus.pane, focus.box) == (PaneKind.RESULTS, BoxKind.DATA_TABLE)
        grid = app.dispatcher.navigation.active_box.grid
        assert grid.table == "customers"
        assert len(grid.rows) == 3


@pytest.mark.asyncio
async def test_command_quit_exits():
    app = LazyLodeApp()
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.press(":", "q", "enter")
        await pilot.pause(PAUSE)
    assert app.return_code == 0


class TestClipboard:
    def test_falls_back_to_pyperclip(self, monkeypatch):
        app = LazyLodeApp()
        copied = []

        def no_osc52(text):
            raise RuntimeError("no terminal")

        monkeypatch.setattr(app, "copy_to_clipboard", no_osc52)
        monkeypatch.setattr(pyperclip, "copy", copied.append)

        assert app._copy_text("SELECT 1")
        assert copied == ["SELECT 1"]

    def test_reports_when_no_clipboard(self, monkeypatch):
        app = LazyLodeApp()

        def no_osc52(text):
            raise RuntimeError("no terminal")

        def no_system_clipboard(text):
            raise pyperclip.PyperclipException("no copy mechanism")

        monkeypatch.setattr(app, "copy_to_clipboard", no_osc52)
        monkeypatch.setattr(pyperclip, "copy", no_system_clipboard)

        assert not app._copy_text("SELECT 1")

    def test_osc52_is_preferred(self, monkeypatch):
        app = LazyLodeApp()
        sent = []
        monkeypatch.setattr(app, "copy_to_clipboard", sent.append)
        monkeypatch.setattr(pyperclip, "copy", lambda text: pytest.fail("pyperclip should not run"))

        assert app._copy_text("x")
        assert sent == ["x"]
