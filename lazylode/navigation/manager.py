"""Pane focus, spatial moves, cycling and the modal stack."""

from __future__ import annotations

from dataclasses import dataclass

from lazylode.core.actions import (
    BOX_FOCUS_ACTIONS,
    DIRECTIONAL_ACTIONS,
    PAGE_ACTIONS,
    PANE_FOCUS_ACTIONS,
    NavigationAction,
    ResolvedAction,
)
from lazylode.core.effects import NO_EFFECT, Effect, EffectKind
from lazylode.core.types import (
    BOX_LABELS,
    PANE_LABELS,
    BoxKind,
    Direction,
    EditingMode,
    PaneKind,
    VimMode,
)
from lazylode.editor.register import YankRegister
from lazylode.shared.debug_events import emit_debug_event

from .box_manager import BoxManager
from .boxes import Box
from .layout import DEFAULT_LAYOUT, DEFAULT_PANE, PaneSpec, Rect, nearest

A = NavigationAction

FOCUS_CHANGED = Effect(EffectKind.FOCUS_CHANGED)


@dataclass(frozen=True)
class FocusState:
    """Read-only focus snapshot for drawing focus indicators."""

    pane: PaneKind
    box: BoxKind | None
    editing_mode: EditingMode
    vim_mode: VimMode | None


class Pane:
    """A top-level container. Passive data: focus lives in the manager."""

    def __init__(self, kind: PaneKind, rect: Rect, boxes: BoxManager) -> None:
        self.kind = kind
        self.rect = rect
        self.boxes = boxes
        self.visible = True

    @property
    def label(self) -> str:
        return PANE_LABELS[self.kind]

    def __repr__(self) -> str:
        return f"Pane({self.kind.value})"


class NavigationManager:
    """Owns every pane and the current pane focus."""

    def __init__(
        self,
        register: YankRegister,
        layout: tuple[PaneSpec, ...] = DEFAULT_LAYOUT,
        *,
        editing_mode: EditingMode = EditingMode.VIM,
        default_pane: PaneKind = DEFAULT_PANE,
    ) -> None:
        self._register = register
        self._editing_mode = editing_mode
        self._panes: dict[PaneKind, Pane] = {}
        for spec in layout:
            boxes = [Box.from_spec(box_spec, register, editing_mode) for box_spec in spec.boxes]
            self._panes[spec.kind] = Pane(spec.kind, spec.rect, BoxManager(boxes, register))
        if default_pane not in self._panes:
            default_pane = next(iter(self._panes))
        self._default_pane = default_pane
        self._focused = default_pane
        self._modals: list[Box] = []

    # ─────────────────────────────────────────────────────────────────
    # State access
    # ─────────────────────────────────────────────────────────────────

    @property
    def panes(self) -> list[Pane]:
        """Panes in declaration order."""
        return list(self._panes.values())

    def pane(self, kind: PaneKind) -> Pane:
        return self._panes[kind]

    @property
    def focused_pane(self) -> Pane:
        return self._panes[self._focused]

    @property
    def modal(self) -> Box | None:
        return self._modals[-1] if self._modals else None

    @property
    def modal_open(self) -> bool:
        return bool(self._modals)

    @property
    def active_box(self) -> Box | None:
        """The box receiving input: the top modal, else the focused pane's active box."""
        if self._modals:
            return self._modals[-1]
        return self.focused_pane.boxes.active_box

    @property
    def active_box_manager(self) -> BoxManager:
        if self._modals:
            return self._modal_manager
        return self.focused_pane.boxes

    @property
    def _modal_manager(self) -> BoxManager:
        return BoxManager([self._modals[-1]], self._register)

    def current_focus(self) -> FocusState:
        box = self.active_box
        return FocusState(
            pane=self._focused,
            box=box.kind if box else None,
            editing_mode=box.editing_mode if box else self._editing_mode,
            vim_mode=box.vim_mode if box else None,
        )

    def snapshot(self) -> tuple:
        """Hashable summary of all focus state, for change detection."""
        return (
            self._focused,
            tuple((kind, pane.boxes.active_index, pane.visible) for kind, pane in self._panes.items()),
            tuple(id(box) for box in self._modals),
        )

    def visible_panes(self) -> list[Pane]:
        return [pane for pane in self._panes.values() if pane.visible]

    # ─────────────────────────────────────────────────────────────────
    # Focus changes
    # ─────────────────────────────────────────────────────────────────

    def focus_pane(self, kind: PaneKind) -> bool:
        pane = self._panes.get(kind)
        if pane is None or not pane.visible or kind is self._focused:
            return False
        self._focused = kind
        return True

    def focus_box(self, kind: BoxKind) -> bool:
        """Activate a box by kind within the focused pane only."""
        return self.focused_pane.boxes.focus_kind(kind)

    def focus_location(self, pane: PaneKind, box: BoxKind | None = None) -> bool:
        """Jump to a pane (and optionally a box in it), closing any modals."""
        if pane not in self._panes:
            return False
        self._modals.clear()
        target = self._panes[pane]
        target.visible = True
        changed = pane is not self._focused
        self._focused = pane
        if box is not None:
            changed = target.boxes.focus_kind(box) or changed
        return changed

    def set_pane_visible(self, kind: PaneKind, visible: bool) -> bool:
        pane = self._panes.get(kind)
        if pane is None or pane.visible == visible:
            return False
        if not visible and len(self.visible_panes()) == 1:
            return False
        pane.visible = visible
        if not visible and kind is self._focused:
            fallback = self._panes.get(self._default_pane)
            if fallback is None or not fallback.visible:
                fallback = self.visible_panes()[0]
            self._focused = fallback.kind
        return True

    def move(self, direction: Direction) -> bool:
        """Move focus to the nearest box, then pane, in ``direction``.

        Never wraps: with no candidate the state is left untouched.
        """
        pane = self.focused_pane
        current = pane.boxes.active_box
        origin = current.rect if current is not None else pane.rect

        if current is not None:
            siblings = [(box.rect, box) for box in pane.boxes.boxes if box is not current]
            target_box = nearest(origin, siblings, direction)
            if isinstance(target_box, Box):
                return pane.boxes.activate(target_box)

        others = [(p.rect, p) for p in self.visible_panes() if p is not pane]
        target_pane = nearest(origin, others, direction)
        if isinstance(target_pane, Pane):
            self._focused = target_pane.kind
            return True
        return False

    def cycle_pane(self, step: int) -> bool:
        order = [pane.kind for pane in self.visible_panes()]
        if len(order) < 2 or self._focused not in order:
            return False
        index = order.index(self._focused)
        self._focused = order[(index + step) % len(order)]
        return True

    def cycle_box(self, step: int) -> bool:
        return self.focused_pane.boxes.cycle(step)

    # ─────────────────────────────────────────────────────────────────
    # Modals
    # ─────────────────────────────────────────────────────────────────

    def open_modal(self, title: str, items: list[str]) -> Effect:
        modal = Box(BoxKind.MODAL, self._register, name="modal", editing_mode=self._editing_mode)
        modal.title = title
        if modal.items is not None:
            modal.items.load(items)
        self._modals.append(modal)
        return FOCUS_CHANGED

    def close_modal(self) -> Box | None:
        if not self._modals:
            return None
        return self._modals.pop()

    # ─────────────────────────────────────────────────────────────────
    # Dispatch
    # ─────────────────────────────────────────────────────────────────

    def dispatch(self, resolved: ResolvedAction) -> Effect:
        """Handle non-editing actions. Every (action, state) pair is total."""
        action = resolved.action

        if self._modals:
            return self._dispatch_modal(action)

        if action in PANE_FOCUS_ACTIONS:
            return self._focus_result(self.focus_pane(PANE_FOCUS_ACTIONS[action]), action)
        if action in BOX_FOCUS_ACTIONS:
            return self._focus_result(self.focus_box(BOX_FOCUS_ACTIONS[action]), action)
        if action in DIRECTIONAL_ACTIONS:
            return self._focus_result(self.move(DIRECTIONAL_ACTIONS[action]), action)
        if action is A.NEXT_PANE:
            return self._focus_result(self.cycle_pane(1), action)
        if action is A.PREVIOUS_PANE:
            return self._focus_result(self.cycle_pane(-1), action)
        if action is A.NEXT_BOX:
            return self._focus_result(self.cycle_box(1), action)
        if action is A.PREVIOUS_BOX:
            return self._focus_result(self.cycle_box(-1), action)

        if action is A.QUIT:
            return Effect(EffectKind.REQUEST_QUIT)
        if action is A.SEARCH:
            return Effect(EffectKind.REQUEST_SEARCH, target=self._focused)
        if action is A.CONFIRM:
            return self._confirm()
        if action in PAGE_ACTIONS:
            return Effect(EffectKind.REQUEST_PAGE_CHANGE, page=PAGE_ACTIONS[action])
        if action is A.SORT:
            return Effect(EffectKind.REQUEST_SORT)
        if action is A.FOLLOW_FOREIGN_KEY:
            return Effect(EffectKind.REQUEST_FOREIGN_KEY_FOLLOW)

        emit_debug_event(
            "navigation.ignored",
            category="navigation",
            action=action.value,
            pane=self._focused.value,
        )
        return NO_EFFECT

    def _dispatch_modal(self, action: NavigationAction) -> Effect:
        if action is A.CONFIRM:
            modal = self.close_modal()
            if modal is None or modal.items is None:
                return NO_EFFECT
            return Effect(EffectKind.REQUEST_CONFIRM, target=modal.items.selected, message=modal.title)
        if action is A.CANCEL:
            self.close_modal()
            return FOCUS_CHANGED
        if action is A.QUIT:
            return Effect(EffectKind.REQUEST_QUIT)
        emit_debug_event("navigation.modal_blocked", category="navigation", action=action.value)
        return NO_EFFECT

    def _confirm(self) -> Effect:
        box = self.active_box
        if (
            box is not None
            and box.is_text
            and self._focused is PaneKind.QUERY_INPUT
            and box.vim_mode is not VimMode.INSERT
        ):
            return Effect(EffectKind.REQUEST_QUERY, query=box.editor.text)
        target = box.selection_value() if box is not None else None
        return Effect(EffectKind.REQUEST_CONFIRM, target=target, message=self._focused.value)

    def _focus_result(self, changed: bool, action: NavigationAction) -> Effect:
        if changed:
            emit_debug_event(
                "navigation.focus",
                category="navigation",
                action=action.value,
                pane=self._focused.value,
            )
            return FOCUS_CHANGED
        return NO_EFFECT

    # ─────────────────────────────────────────────────────────────────
    # Status line helpers
    # ─────────────────────────────────────────────────────────────────

    def mode_indicator(self) -> str:
        box = self.active_box
        if box is not None and box.editing_cell:
            return "EDIT"
        if box is None or not (box.is_text and box.supports_editing):
            return "NAV"
        if box.editing_mode is EditingMode.VIM:
            return box.editor.mode.value
        return box.view_mode.value.upper()

    def navigation_info(self) -> str:
        pane = self.focused_pane
        box = self.active_box
        if box is None:
            return pane.label
        if box.kind is BoxKind.MODAL:
            return f"{pane.label} ({BOX_LABELS[box.kind]}: {box.title})"
        return f"{pane.label} ({BOX_LABELS[box.kind]})"
