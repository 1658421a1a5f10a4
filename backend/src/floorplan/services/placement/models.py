"""Placement errors, collision policies and footprint configuration."""

from __future__ import annotations

from enum import Enum

from floorplan.models.room import TableShape


class CollisionPolicy(str, Enum):
    """How two tables are considered to collide.

    ``anchor`` only compares anchor cells. ``footprint`` compares the full
    rectangles the tables cover.
    """

    ANCHOR = "anchor"
    FOOTPRINT = "footprint"


class PlacementError(Exception):
    """Raised when a table cannot be placed on the grid."""

    def __init__(self, x: int, y: int, reason: str) -> None:
        self.x = x
        self.y = y
        self.reason = reason
        super().__init__(f"Cannot place table at ({x}, {y}): {reason}")


class OutOfBoundsError(PlacementError):
    """The anchor cell lies outside the grid."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        super().__init__(x, y, f"outside the {width}x{height} grid")


class OccupiedCellError(PlacementError):
    """The anchor cell is already taken by another table."""

    def __init__(self, x: int, y: int, occupant_id: str | None = None) -> None:
        self.occupant_id = occupant_id
        reason = "cell is occupied"
        if occupant_id is not None:
            reason = f"cell is occupied by table '{occupant_id}'"
        super().__init__(x, y, reason)


class TableNotFoundError(LookupError):
    """Raised by hosts when a table id is unknown.

    The placement engine itself treats unknown ids as a no-op.
    """

    def __init__(self, table_id: str) -> None:
        self.table_id = table_id
        super().__init__(f"Table '{table_id}' not found")


# ── Footprint configuration ────────────────────────────────────────

# (max capacity, square/round footprint, rectangle footprint), in cells.
# Both axes are non-decreasing down the list for every shape.
FOOTPRINT_TIERS: tuple[tuple[int, tuple[int, int], tuple[int, int]], ...] = (
    (2, (1, 1), (1, 1)),
    (4, (2, 2), (2, 1)),
    (6, (2, 2), (3, 1)),
    (8, (3, 3), (3, 2)),
)
LARGEST_FOOTPRINT = {
    TableShape.SQUARE: (3, 3),
    TableShape.ROUND: (3, 3),
    TableShape.RECTANGLE: (4, 2),
}

DEFAULT_TABLE_CAPACITY = 2
DEFAULT_TABLE_SHAPE = TableShape.SQUARE
