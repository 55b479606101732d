"""Panes, boxes and focus movement."""

from .box_manager import BoxManager
from .boxes import Box, ItemList, TableGrid
from .layout import DEFAULT_LAYOUT, BoxSpec, PaneSpec, Rect
from .manager import FocusState, NavigationManager, Pane

__all__ = [
    "DEFAULT_LAYOUT",
    "Box",
    "BoxManager",
    "BoxSpec",
    "FocusState",
    "ItemList",
    "NavigationManager",
    "Pane",
    "PaneSpec",
    "Rect",
    "TableGrid",
]
