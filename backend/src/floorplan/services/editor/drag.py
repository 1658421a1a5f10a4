"""Turns a continuous pointer drag into discrete grid moves."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from floorplan.models.room import Room, Table
from floorplan.services.placement import engine
from floorplan.services.placement.models import CollisionPolicy

logger = logging.getLogger(__name__)


def _snap(value: float) -> int:
    # half-up, so a pointer exactly between two cells goes to the later one
    return math.floor(value + 0.5)


@dataclass
class ActiveDrag:
    """The table under the pointer and where on it the pointer grabbed it."""

    table_id: str
    offset_x: float
    offset_y: float


class DragController:
    """Snaps a dragged table to grid cells as the pointer moves.

    The controller does not own the tables; it reads them through
    ``get_tables`` and commits each move through ``commit_move``, which
    receives the table id and the new anchor cell.  Every cell change is
    committed immediately.
    """

    def __init__(
        self,
        room: Room,
        get_tables: Callable[[], Sequence[Table]],
        commit_move: Callable[[str, int, int], object],
        cell_pixel_size: int = 60,
        policy: CollisionPolicy = CollisionPolicy.ANCHOR,
    ) -> None:
        self.room = room
        self.get_tables = get_tables
        self.commit_move = commit_move
        self.cell_pixel_size = cell_pixel_size
        self.policy = policy
        self.active: Optional[ActiveDrag] = None

    @property
    def is_dragging(self) -> bool:
        return self.active is not None

    def start(self, table_id: str, pointer_x: float, pointer_y: float) -> bool:
        """Grab a table. Returns False if the id is unknown."""
        table = engine.find(self.get_tables(), table_id)
        if table is None:
            return False
        self.active = ActiveDrag(
            table_id=table_id,
            offset_x=pointer_x - table.position_x * self.cell_pixel_size,
            offset_y=pointer_y - table.position_y * self.cell_pixel_size,
        )
        return True

    def candidate_cell(self, pointer_x: float, pointer_y: float) -> tuple[int, int]:
        """Cell the active table would snap to for this pointer position."""
        if self.active is None:
            raise RuntimeError("No drag in progress")
        x = _snap((pointer_x - self.active.offset_x) / self.cell_pixel_size)
        y = _snap((pointer_y - self.active.offset_y) / self.cell_pixel_size)
        return engine.clamp(self.room, x, y)

    def drag(self, pointer_x: float, pointer_y: float) -> Optional[tuple[int, int]]:
        """Follow the pointer.

        Returns the new anchor cell if the table moved, None otherwise.
        """
        if self.active is None:
            return None

        tables = self.get_tables()
        table = engine.find(tables, self.active.table_id)
        if table is None:
            # deleted mid-drag
            self.active = None
            return None

        x, y = self.candidate_cell(pointer_x, pointer_y)
        if (x, y) == table.anchor:
            return None
        if not engine.can_place(
            self.room, tables, x, y,
            footprint=(table.width, table.height),
            policy=self.policy,
            ignore_id=table.id,
        ):
            return None

        logger.debug(f"Dragged table {table.id} to ({x}, {y})")
        self.commit_move(table.id, x, y)
        return (x, y)

    def end(self) -> None:
        self.active = None
