"""Grid placement engine.

Pure functions that decide whether a table may be placed or moved on a
room's grid and return the resulting table collection.  Nothing here
touches storage: callers persist the result and assign table ids.

A "grid" is anything with ``grid_width`` and ``grid_height`` attributes
(normally a :class:`~floorplan.models.room.Room`).
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from floorplan.models.room import Table, TableShape

from .models import (
    FOOTPRINT_TIERS,
    LARGEST_FOOTPRINT,
    CollisionPolicy,
    OccupiedCellError,
    OutOfBoundsError,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"table_number", "capacity", "shape"})


class Grid(Protocol):
    grid_width: int
    grid_height: int


# ── Geometry helpers ───────────────────────────────────────────────


def footprint_for(capacity: int, shape: TableShape | str) -> tuple[int, int]:
    """Return the ``(width, height)`` in cells a table covers.

    Larger tables never get a smaller footprint; rectangles grow along
    the x axis.
    """
    shape = TableShape(shape)
    for max_capacity, square, rectangle in FOOTPRINT_TIERS:
        if capacity <= max_capacity:
            return rectangle if shape is TableShape.RECTANGLE else square
    return LARGEST_FOOTPRINT[shape]


def in_bounds(grid: Grid, x: int, y: int) -> bool:
    return 0 <= x < grid.grid_width and 0 <= y < grid.grid_height


def clamp(grid: Grid, x: int, y: int) -> tuple[int, int]:
    """Clamp a cell coordinate into ``[0, width) x [0, height)``."""
    return (
        max(0, min(x, grid.grid_width - 1)),
        max(0, min(y, grid.grid_height - 1)),
    )


def _covers(table: Table, x: int, y: int) -> bool:
    return (
        table.position_x <= x < table.position_x + table.width
        and table.position_y <= y < table.position_y + table.height
    )


def _rects_overlap(
    ax: int, ay: int, aw: int, ah: int, bx: int, by: int, bw: int, bh: int
) -> bool:
    return ax < bx + bw and bx < ax + aw and ay < by + bh and by < ay + ah


def occupant_at(
    tables: Iterable[Table],
    x: int,
    y: int,
    policy: CollisionPolicy = CollisionPolicy.ANCHOR,
) -> Optional[Table]:
    """Return the table occupying cell ``(x, y)``, if any."""
    for table in tables:
        if policy is CollisionPolicy.FOOTPRINT:
            if _covers(table, x, y):
                return table
        elif table.anchor == (x, y):
            return table
    return None


def _blocker(
    tables: Iterable[Table],
    x: int,
    y: int,
    footprint: tuple[int, int],
    policy: CollisionPolicy,
    ignore_id: Optional[str],
) -> Optional[Table]:
    width, height = footprint
    for table in tables:
        if ignore_id is not None and table.id == ignore_id:
            continue
        if policy is CollisionPolicy.FOOTPRINT:
            if _rects_overlap(
                x, y, width, height,
                table.position_x, table.position_y, table.width, table.height,
            ):
                return table
        elif table.anchor == (x, y):
            return table
    return None


def can_place(
    grid: Grid,
    tables: Iterable[Table],
    x: int,
    y: int,
    footprint: tuple[int, int] = (1, 1),
    policy: CollisionPolicy = CollisionPolicy.ANCHOR,
    ignore_id: Optional[str] = None,
) -> bool:
    """Check whether a table may be anchored at ``(x, y)``.

    Under the anchor policy this is true iff the cell is inside the grid
    and no other table is anchored there.  Under the footprint policy the
    ``footprint`` rectangle must not overlap any other table's footprint.
    ``ignore_id`` excludes the table being moved from the check.
    """
    if not in_bounds(grid, x, y):
        return False
    return _blocker(tables, x, y, footprint, policy, ignore_id) is None


def tables_outside(grid: Grid, tables: Iterable[Table]) -> list[Table]:
    """Return the tables whose anchor does not fit in ``grid``."""
    return [t for t in tables if not in_bounds(grid, t.position_x, t.position_y)]


def find(tables: Iterable[Table], table_id: str) -> Optional[Table]:
    return next((t for t in tables if t.id == table_id), None)


def check_placement(
    grid: Grid,
    tables: Iterable[Table],
    x: int,
    y: int,
    footprint: tuple[int, int] = (1, 1),
    policy: CollisionPolicy = CollisionPolicy.ANCHOR,
) -> None:
    """Like :func:`can_place`, but raise the reason a placement is illegal.

    Raises:
        OutOfBoundsError: If the anchor lies outside the grid.
        OccupiedCellError: If the anchor collides with another table.
    """
    if not in_bounds(grid, x, y):
        raise OutOfBoundsError(x, y, grid.grid_width, grid.grid_height)
    blocker = _blocker(tables, x, y, footprint, policy, None)
    if blocker is not None:
        raise OccupiedCellError(x, y, blocker.id)


# ── Mutations ──────────────────────────────────────────────────────


def place(
    grid: Grid,
    tables: Sequence[Table],
    table: Table,
    policy: CollisionPolicy = CollisionPolicy.ANCHOR,
) -> tuple[list[Table], str]:
    """Add ``table`` to the collection.

    The footprint is recomputed from capacity and shape.

    Returns:
        The new collection and the id of the placed table.

    Raises:
        OutOfBoundsError: If the anchor lies outside the grid.
        OccupiedCellError: If the anchor collides with another table.
    """
    width, height = footprint_for(table.capacity, table.shape)
    check_placement(
        grid, tables, table.position_x, table.position_y, (width, height), policy
    )

    placed = table.model_copy(update={"width": width, "height": height})
    return [*tables, placed], placed.id


def move(
    grid: Grid,
    tables: Sequence[Table],
    table_id: str,
    x: int,
    y: int,
    policy: CollisionPolicy = CollisionPolicy.ANCHOR,
) -> list[Table]:
    """Move a table's anchor to ``(x, y)``, clamped into the grid.

    If the clamped cell is taken by a different table, or the id is
    unknown, the collection is returned unchanged.
    """
    table = find(tables, table_id)
    if table is None:
        logger.info(f"Ignoring move of unknown table {table_id}")
        return list(tables)

    x, y = clamp(grid, x, y)
    if (x, y) == table.anchor:
        return list(tables)

    blocker = _blocker(tables, x, y, (table.width, table.height), policy, table_id)
    if blocker is not None:
        logger.info(
            f"Rejected move of table {table_id} to ({x}, {y}): occupied by {blocker.id}"
        )
        return list(tables)

    moved = table.model_copy(update={"position_x": x, "position_y": y})
    return [moved if t.id == table_id else t for t in tables]


def remove(tables: Sequence[Table], table_id: str) -> list[Table]:
    """Drop a table from the collection. Unknown ids are ignored."""
    return [t for t in tables if t.id != table_id]


def update(
    tables: Sequence[Table],
    table_id: str,
    changes: Mapping[str, Any],
    policy: CollisionPolicy = CollisionPolicy.ANCHOR,
) -> list[Table]:
    """Apply field edits (number, capacity, shape) to a table.

    The footprint is recomputed.  Positions change only through
    :func:`move`.  Unknown ids are ignored.

    Raises:
        ValueError: If ``changes`` names a field that cannot be edited.
        pydantic.ValidationError: If a new value is invalid.
        OccupiedCellError: If the new footprint would overlap another table.
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be edited directly: {sorted(unknown)}")

    table = find(tables, table_id)
    if table is None:
        logger.info(f"Ignoring update of unknown table {table_id}")
        return list(tables)

    edited = Table.model_validate({**table.model_dump(), **changes})
    width, height = footprint_for(edited.capacity, edited.shape)
    blocker = _blocker(
        tables, edited.position_x, edited.position_y, (width, height), policy, table_id
    )
    if blocker is not None:
        raise OccupiedCellError(edited.position_x, edited.position_y, blocker.id)

    edited = edited.model_copy(update={"width": width, "height": height})
    return [edited if t.id == table_id else t for t in tables]
