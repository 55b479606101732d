"""Static screen layout: pane and box rectangles used for spatial moves."""

from __future__ import annotations

from dataclasses import dataclass, field

from lazylode.core.types import BoxKind, Direction, PaneKind


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in abstract layout units."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def distance_towards(self, other: Rect, direction: Direction) -> float | None:
        """Distance to ``other`` if it lies strictly in ``direction``, else None.

        The distance is the gap along the direction plus the offset of the
        centres across it, so aligned neighbours win over diagonal ones.
        """
        cx, cy = self.center
        ox, oy = other.center
        if direction is Direction.RIGHT:
            if other.x < self.right:
                return None
            return (other.x - self.right) + abs(oy - cy)
        if direction is Direction.LEFT:
            if other.right > self.x:
                return None
            return (self.x - other.right) + abs(oy - cy)
        if direction is Direction.DOWN:
            if other.y < self.bottom:
                return None
            return (other.y - self.bottom) + abs(ox - cx)
        if other.bottom > self.y:
            return None
        return (self.y - other.bottom) + abs(ox - cx)


@dataclass(frozen=True)
class BoxSpec:
    kind: BoxKind
    rect: Rect
    name: str = ""
    supports_editing: bool = False


@dataclass(frozen=True)
class PaneSpec:
    kind: PaneKind
    rect: Rect
    boxes: tuple[BoxSpec, ...] = field(default_factory=tuple)


def nearest(origin: Rect, candidates: list[tuple[Rect, object]], direction: Direction) -> object | None:
    """Pick the candidate closest to ``origin`` in ``direction``.

    Ties go to the candidate listed first.
    """
    best = None
    best_distance: float | None = None
    for rect, value in candidates:
        distance = origin.distance_towards(rect, direction)
        if distance is None:
            continue
        if best_distance is None or distance < best_distance:
            best, best_distance = value, distance
    return best


#   +-------------+---------------------------+
#   | Connections | Query                     |
#   +-------------+---------------------------+
#   | Schema      | Results (table, messages) |
#   +-------------+---------------------------+
#   | Command                                 |
#   +-----------------------------------------+
DEFAULT_LAYOUT: tuple[PaneSpec, ...] = (
    PaneSpec(
        PaneKind.CONNECTIONS,
        Rect(0, 0, 30, 30),
        (BoxSpec(BoxKind.LIST_VIEW, Rect(0, 0, 30, 30), "connections"),),
    ),
    PaneSpec(
        PaneKind.QUERY_INPUT,
        Rect(30, 0, 70, 30),
        (BoxSpec(BoxKind.TEXT_INPUT, Rect(30, 0, 70, 30), "query", supports_editing=True),),
    ),
    PaneSpec(
        PaneKind.RESULTS,
        Rect(30, 30, 70, 65),
        (
            BoxSpec(BoxKind.DATA_TABLE, Rect(30, 30, 70, 50), "results", supports_editing=True),
            BoxSpec(BoxKind.LIST_VIEW, Rect(30, 80, 70, 15), "messages"),
        ),
    ),
    PaneSpec(
        PaneKind.SCHEMA_EXPLORER,
        Rect(0, 30, 30, 65),
        (BoxSpec(BoxKind.TREE_VIEW, Rect(0, 30, 30, 65), "schema"),),
    ),
    PaneSpec(PaneKind.COMMAND_LINE, Rect(0, 95, 100, 5)),
)

DEFAULT_PANE = PaneKind.QUERY_INPUT
