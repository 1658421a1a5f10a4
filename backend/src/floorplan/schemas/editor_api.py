"""Schemas for the rendered layout and for editor UI events."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from floorplan.models.room import TableShape


class CellView(BaseModel):
    """A grid cell at its pixel position."""

    x: int
    y: int
    left: int
    top: int
    size: int
    occupied: bool
    placeable: bool


class TableView(BaseModel):
    """A table at its pixel position."""

    id: str
    table_number: str
    capacity: int
    shape: TableShape
    x: int
    y: int
    width: int
    height: int
    left: int
    top: int
    pixel_width: int
    pixel_height: int
    selected: bool = False
    dragging: bool = False


class LayoutView(BaseModel):
    """Everything needed to draw a room's grid editor."""

    room_id: str
    name: str
    grid_width: int
    grid_height: int
    cell_pixel_size: int
    pixel_width: int
    pixel_height: int
    placement_mode: bool
    selected_table_id: Optional[str] = None
    table_count: int
    tables: List[TableView]
    cells: List[CellView]


class EditorEvent(BaseModel):
    """A UI event sent to an open editor.

    Which fields are read depends on ``type``:

    - ``click_cell``: ``x``, ``y`` (cell coordinates)
    - ``click_table``: ``table_id``
    - ``pointer_down``: ``table_id``, ``pointer_x``, ``pointer_y`` (pixels)
    - ``pointer_move``: ``pointer_x``, ``pointer_y``
    - ``edit_table``: ``table_id``, ``changes``
    """

    type: Literal[
        "toggle_placement",
        "click_cell",
        "click_table",
        "pointer_down",
        "pointer_move",
        "pointer_up",
        "edit_table",
        "delete_selected",
    ]
    x: Optional[int] = None
    y: Optional[int] = None
    table_id: Optional[str] = None
    pointer_x: Optional[float] = None
    pointer_y: Optional[float] = None
    changes: Dict[str, Any] = Field(default_factory=dict)
