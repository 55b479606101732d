"""Effects emitted by the navigation core for the application loop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .types import PageDirection


class EffectKind(Enum):
    """The closed set of instructions the core can emit."""

    NONE = "none"
    FOCUS_CHANGED = "focus_changed"
    BUFFER_CHANGED = "buffer_changed"
    CURSOR_MOVED = "cursor_moved"
    MODE_CHANGED = "mode_changed"
    REQUEST_QUERY = "request_query"
    REQUEST_FOREIGN_KEY_FOLLOW = "request_foreign_key_follow"
    REQUEST_PAGE_CHANGE = "request_page_change"
    REQUEST_SORT = "request_sort"
    REQUEST_QUIT = "request_quit"
    REQUEST_CONFIRM = "request_confirm"
    REQUEST_SEARCH = "request_search"
    NOTIFY = "notify"


@dataclass(frozen=True)
class Effect:
    """An instruction for the surrounding application.

    Only the payload fields relevant to ``kind`` are set.
    """

    kind: EffectKind = EffectKind.NONE
    query: str | None = None
    cell: Any = None
    page: PageDirection | None = None
    column: str | None = None
    target: Any = None
    message: str = ""
    error: bool = False
    request_id: int | None = None

    @property
    def is_none(self) -> bool:
        return self.kind is EffectKind.NONE

    @property
    def is_request(self) -> bool:
        """True when the effect asks the application to do external work."""
        return self.kind.value.startswith("request_")


NO_EFFECT = Effect()


def notify(message: str, *, error: bool = False) -> Effect:
    """Build a user-facing notification effect."""
    return Effect(EffectKind.NOTIFY, message=message, error=error)
