"""In-memory grid editor for one room.

The editor keeps the authoritative copy of a room's tables for the length
of an editing session.  Every accepted change is first handed to the host
through :class:`EditorHost` (which persists it) and only then applied
locally, so a host failure leaves the editor unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence

from floorplan.models.room import Room, Table, TableDraft
from floorplan.schemas.editor_api import CellView, LayoutView, TableView
from floorplan.services.editor.drag import DragController
from floorplan.services.placement import engine
from floorplan.services.placement.models import (
    DEFAULT_TABLE_CAPACITY,
    DEFAULT_TABLE_SHAPE,
    CollisionPolicy,
)

logger = logging.getLogger(__name__)


def _ignore_selection(table_id: Optional[str]) -> None:
    return None


@dataclass
class EditorHost:
    """Callbacks the editor uses to hand mutations to its owner.

    ``on_add`` must return the id the store assigned to the new table.
    """

    on_add: Callable[[TableDraft], str]
    on_update: Callable[[str, Dict[str, Any]], None]
    on_delete: Callable[[str], None]
    on_select: Callable[[Optional[str]], None] = field(default=_ignore_selection)


class LayoutEditor:
    """Grid editor for a single room."""

    def __init__(
        self,
        room: Room,
        tables: Sequence[Table],
        host: EditorHost,
        cell_pixel_size: int = 60,
        cell_inset_px: int = 4,
        policy: CollisionPolicy = CollisionPolicy.ANCHOR,
    ) -> None:
        self.room = room
        self.tables: list[Table] = list(tables)
        self.host = host
        self.cell_pixel_size = cell_pixel_size
        self.cell_inset_px = cell_inset_px
        self.policy = policy
        self.placement_mode = False
        self.selected_table_id: Optional[str] = None
        self.drag = DragController(
            room,
            get_tables=lambda: self.tables,
            commit_move=self.move_table,
            cell_pixel_size=cell_pixel_size,
            policy=policy,
        )

    # ── State ──────────────────────────────────────────────────────

    def reload(self, room: Room, tables: Sequence[Table]) -> None:
        """Replace the in-memory copy with a fresh one from the host."""
        self.room = room
        self.drag.room = room
        self.tables = list(tables)
        active = self.drag.active
        if active is not None and engine.find(self.tables, active.table_id) is None:
            self.drag.end()
        if engine.find(self.tables, self.selected_table_id or "") is None:
            self.selected_table_id = None

    def get_table(self, table_id: str) -> Optional[Table]:
        return engine.find(self.tables, table_id)

    def select(self, table_id: Optional[str]) -> None:
        self.selected_table_id = table_id
        self.host.on_select(table_id)

    def toggle_placement_mode(self) -> bool:
        self.placement_mode = not self.placement_mode
        return self.placement_mode

    # ── Clicks ─────────────────────────────────────────────────────

    def click_cell(self, x: int, y: int) -> Optional[str]:
        """Handle a click on an empty grid cell.

        In placement mode a free cell gets a new default table and placement
        mode ends; an occupied cell is ignored.  Outside placement mode the
        click clears the selection.

        Returns:
            The id of the created table, if any.
        """
        if not self.placement_mode:
            self.select(None)
            return None

        footprint = engine.footprint_for(DEFAULT_TABLE_CAPACITY, DEFAULT_TABLE_SHAPE)
        if not engine.can_place(self.room, self.tables, x, y, footprint, self.policy):
            logger.info(f"Cell ({x}, {y}) in room {self.room.id} is not free")
            return None

        table = self.add_table(
            TableDraft(
                room_id=self.room.id,
                table_number=f"T{len(self.tables) + 1}",
                capacity=DEFAULT_TABLE_CAPACITY,
                shape=DEFAULT_TABLE_SHAPE,
                position_x=x,
                position_y=y,
            )
        )
        self.placement_mode = False
        self.select(table.id)
        return table.id

    def click_table(self, table_id: str) -> bool:
        """Select a table without moving it."""
        if self.get_table(table_id) is None:
            return False
        self.select(table_id)
        return True

    # ── Pointer drag ───────────────────────────────────────────────

    def pointer_down(self, table_id: str, pointer_x: float, pointer_y: float) -> bool:
        return self.drag.start(table_id, pointer_x, pointer_y)

    def pointer_move(self, pointer_x: float, pointer_y: float) -> Optional[tuple[int, int]]:
        return self.drag.drag(pointer_x, pointer_y)

    def pointer_up(self) -> None:
        self.drag.end()

    # ── Table edits ────────────────────────────────────────────────

    def add_table(self, draft: TableDraft) -> Table:
        """Place a new table described by ``draft``.

        Raises:
            OutOfBoundsError: If the anchor lies outside the grid.
            OccupiedCellError: If the anchor is taken.
        """
        footprint = engine.footprint_for(draft.capacity, draft.shape)
        engine.check_placement(
            self.room, self.tables, draft.position_x, draft.position_y,
            footprint, self.policy,
        )
        table_id = self.host.on_add(draft)
        table = Table(
            **draft.model_dump(), id=table_id, restaurant_id=self.room.restaurant_id
        )
        self.tables, table_id = engine.place(self.room, self.tables, table, self.policy)
        return self.get_table(table_id)

    def move_table(self, table_id: str, x: int, y: int) -> Optional[Table]:
        """Move a table, clamping into the grid.

        Returns the table as it is after the call; its position is unchanged
        if the destination was taken.  Returns None for unknown ids.
        """
        tables = engine.move(self.room, self.tables, table_id, x, y, self.policy)
        before = self.get_table(table_id)
        after = engine.find(tables, table_id)
        if before is None or after is None:
            return None
        if after.anchor != before.anchor:
            self.host.on_update(
                table_id, {"position_x": after.position_x, "position_y": after.position_y}
            )
            self.tables = tables
        return after

    def edit_table(self, table_id: str, **changes: Any) -> Optional[Table]:
        """Change a table's number, capacity or shape.

        The footprint is recomputed and sent to the host with the edit.

        Raises:
            OccupiedCellError: If the new footprint would overlap another table.
        """
        if self.get_table(table_id) is None:
            return None
        tables = engine.update(self.tables, table_id, changes, self.policy)
        edited = engine.find(tables, table_id)
        fields = {name: getattr(edited, name) for name in changes}
        self.host.on_update(
            table_id, {**fields, "width": edited.width, "height": edited.height}
        )
        self.tables = tables
        return edited

    def delete_table(self, table_id: str) -> bool:
        if self.get_table(table_id) is None:
            return False
        self.host.on_delete(table_id)
        self.tables = engine.remove(self.tables, table_id)
        if self.drag.active is not None and self.drag.active.table_id == table_id:
            self.drag.end()
        if self.selected_table_id == table_id:
            self.select(None)
        return True

    def delete_selected(self) -> bool:
        if self.selected_table_id is None:
            return False
        return self.delete_table(self.selected_table_id)

    # ── Rendering ──────────────────────────────────────────────────

    def render(self) -> LayoutView:
        """Lay out cells and tables in pixels."""
        size = self.cell_pixel_size
        inset = self.cell_inset_px
        active_id = self.drag.active.table_id if self.drag.active else None

        cells = []
        for y in range(self.room.grid_height):
            for x in range(self.room.grid_width):
                occupied = engine.occupant_at(self.tables, x, y, self.policy) is not None
                cells.append(
                    CellView(
                        x=x,
                        y=y,
                        left=x * size,
                        top=y * size,
                        size=size,
                        occupied=occupied,
                        placeable=self.placement_mode and not occupied,
                    )
                )

        tables = [
            TableView(
                id=t.id,
                table_number=t.table_number,
                capacity=t.capacity,
                shape=t.shape,
                x=t.position_x,
                y=t.position_y,
                width=t.width,
                height=t.height,
                left=t.position_x * size + inset,
                top=t.position_y * size + inset,
                pixel_width=t.width * size - 2 * inset,
                pixel_height=t.height * size - 2 * inset,
                selected=t.id == self.selected_table_id,
                dragging=t.id == active_id,
            )
            for t in self.tables
        ]

        return LayoutView(
            room_id=self.room.id,
            name=self.room.name,
            grid_width=self.room.grid_width,
            grid_height=self.room.grid_height,
            cell_pixel_size=size,
            pixel_width=self.room.grid_width * size,
            pixel_height=self.room.grid_height * size,
            placement_mode=self.placement_mode,
            selected_table_id=self.selected_table_id,
            table_count=len(self.tables),
            tables=tables,
            cells=cells,
        )
