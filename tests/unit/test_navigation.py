"""Tests for pane focus, spatial moves and modals."""

from __future__ import annotations

import pytest

from lazylode.core.actions import NavigationAction, ResolvedAction
from lazylode.core.effects import NO_EFFECT, EffectKind
from lazylode.core.types import BoxKind, Direction, EditingMode, PaneKind, VimMode
from lazylode.editor.register import YankRegister
from lazylode.navigation.layout import Rect, nearest
from lazylode.navigation.manager import NavigationManager

A = NavigationAction


@pytest.fixture
def nav() -> NavigationManager:
    return NavigationManager(YankRegister())


class TestRect:
    def test_distance_only_in_direction(self):
        left = Rect(0, 0, 10, 10)
        right = Rect(10, 0, 10, 10)
        assert left.distance_towards(right, Direction.RIGHT) == 0
        assert left.distance_towards(right, Direction.LEFT) is None
        assert left.distance_towards(right, Direction.DOWN) is None

    def test_nearest_prefers_aligned_and_first(self):
        origin = Rect(0, 0, 10, 10)
        aligned = Rect(10, 0, 10, 10)
        diagonal = Rect(10, 20, 10, 10)
        assert nearest(origin, [(diagonal, "d"), (aligned, "a")], Direction.RIGHT) == "a"
        assert nearest(origin, [(aligned, "x"), (aligned, "y")], Direction.RIGHT) == "x"
        assert nearest(origin, [], Direction.UP) is None


class TestFocus:
    def test_default_focus(self, nav):
        focus = nav.current_focus()
        assert focus.pane is PaneKind.QUERY_INPUT
        assert focus.box is BoxKind.TEXT_INPUT
        assert focus.vim_mode is VimMode.NORMAL

    def test_focus_pane(self, nav):
        effect = nav.dispatch(ResolvedAction(A.FOCUS_RESULTS))
        assert effect.kind is EffectKind.FOCUS_CHANGED
        assert nav.current_focus().box is BoxKind.DATA_TABLE

    def test_focus_same_pane_is_noop(self, nav):
        assert nav.dispatch(ResolvedAction(A.FOCUS_QUERY_INPUT)) is NO_EFFECT

    def test_focus_box_only_in_current_pane(self, nav):
        assert nav.dispatch(ResolvedAction(A.FOCUS_DATA_TABLE)) is NO_EFFECT
        nav.focus_pane(PaneKind.RESULTS)
        nav.focus_box(BoxKind.LIST_VIEW)
        assert nav.current_focus().box is BoxKind.LIST_VIEW

    def test_cycle_pane_wraps(self, nav):
        nav.focus_pane(PaneKind.CONNECTIONS)
        nav.dispatch(ResolvedAction(A.PREVIOUS_PANE))
        assert nav.focused_pane.kind is PaneKind.COMMAND_LINE
        nav.dispatch(ResolvedAction(A.NEXT_PANE))
        assert nav.focused_pane.kind is PaneKind.CONNECTIONS

    def test_cycle_box_wraps(self, nav):
        nav.focus_pane(PaneKind.RESULTS)
        nav.cycle_box(1)
        assert nav.active_box.kind is BoxKind.LIST_VIEW
        nav.cycle_box(1)
        assert nav.active_box.kind is BoxKind.DATA_TABLE

    def test_pane_without_boxes(self, nav):
        nav.focus_pane(PaneKind.COMMAND_LINE)
        assert nav.active_box is None
        assert nav.current_focus().box is None
        assert nav.mode_indicator() == "NAV"


class TestSpatialMoves:
    def test_move_left_from_query(self, nav):
        assert nav.move(Direction.LEFT)
        assert nav.focused_pane.kind is PaneKind.CONNECTIONS

    def test_move_with_no_target_changes_nothing(self, nav):
        before = nav.snapshot()
        assert nav.dispatch(ResolvedAction(A.MOVE_RIGHT)) is NO_EFFECT
        assert nav.dispatch(ResolvedAction(A.MOVE_UP)) is NO_EFFECT
        assert nav.snapshot() == before

    def test_move_visits_boxes_before_panes(self, nav):
        nav.move(Direction.DOWN)
        assert nav.focused_pane.kind is PaneKind.RESULTS
        assert nav.active_box.kind is BoxKind.DATA_TABLE
        nav.move(Direction.DOWN)
        assert nav.focused_pane.kind is PaneKind.RESULTS
        assert nav.active_box.kind is BoxKind.LIST_VIEW
        nav.move(Direction.DOWN)
        assert nav.focused_pane.kind is PaneKind.COMMAND_LINE

    def test_move_up_from_empty_pane(self, nav):
        nav.focus_pane(PaneKind.COMMAND_LINE)
        nav.move(Direction.UP)
        assert nav.focused_pane.kind is PaneKind.RESULTS

    def test_hidden_panes_are_skipped(self, nav):
        nav.set_pane_visible(PaneKind.CONNECTIONS, False)
        assert nav.move(Direction.LEFT)
        assert nav.focused_pane.kind is PaneKind.SCHEMA_EXPLORER
        assert not nav.focus_pane(PaneKind.CONNECTIONS)


class TestVisibility:
    def test_hiding_focused_pane_refocuses_default(self, nav):
        nav.focus_pane(PaneKind.RESULTS)
        nav.set_pane_visible(PaneKind.RESULTS, False)
        assert nav.focused_pane.kind is PaneKind.QUERY_INPUT

    def test_last_visible_pane_stays(self):
        nav = NavigationManager(YankRegister())
        for pane in nav.panes[1:]:
            nav.set_pane_visible(pane.kind, False)
        assert not nav.set_pane_visible(nav.panes[0].kind, False)
        assert nav.focused_pane.visible

    def test_focus_location_reveals_pane(self, nav):
        nav.set_pane_visible(PaneKind.RESULTS, False)
        nav.focus_location(PaneKind.RESULTS, BoxKind.DATA_TABLE)
        assert nav.focused_pane.kind is PaneKind.RESULTS
        assert nav.focused_pane.visible


class TestModal:
    def test_modal_takes_input(self, nav):
        nav.open_modal("Pick", ["first", "second"])
        assert nav.modal_open
        assert nav.active_box.kind is BoxKind.MODAL
        nav.active_box_manager.dispatch(ResolvedAction(A.CURSOR_DOWN))
        effect = nav.dispatch(ResolvedAction(A.CONFIRM))
        assert effect.kind is EffectKind.REQUEST_CONFIRM
        assert effect.target == "second"
        assert effect.message == "Pick"
        assert not nav.modal_open

    def test_modal_blocks_focus_changes(self, nav):
        nav.open_modal("Pick", ["only"])
        assert nav.dispatch(ResolvedAction(A.FOCUS_RESULTS)) is NO_EFFECT
        assert nav.focused_pane.kind is PaneKind.QUERY_INPUT

    def test_modals_stack(self, nav):
        nav.open_modal("Outer", ["a"])
        nav.open_modal("Inner", ["b"])
        nav.dispatch(ResolvedAction(A.CANCEL))
        assert nav.modal.title == "Outer"

    def test_confirm_on_modal_without_items(self, nav):
        nav.open_modal("Pick", ["a"])
        nav.modal.items = None
        assert nav.dispatch(ResolvedAction(A.CONFIRM)) is NO_EFFECT
        assert not nav.modal_open

    def test_navigation_info(self, nav):
        assert nav.navigation_info() == "Query (Text)"
        nav.open_modal("Pick", ["a"])
        assert "Pick" in nav.navigation_info()


class TestEditingModeDefault:
    def test_cursor_mode_layout(self):
        nav = NavigationManager(YankRegister(), editing_mode=EditingMode.CURSOR)
        assert nav.current_focus().vim_mode is None
        assert nav.mode_indicator() == "VIEW"
