"""Room and table records for storing and retrieving floor layouts."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TableShape(str, Enum):
    """Shapes a table can be drawn with."""

    SQUARE = "square"
    ROUND = "round"
    RECTANGLE = "rectangle"


class Room(BaseModel):
    """A dining room: a rectangular grid of cells that tables are placed on."""

    id: str
    restaurant_id: str
    name: str
    grid_width: int = Field(ge=1)
    grid_height: int = Field(ge=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        """Configuration for the Room model."""

        from_attributes = True


class TableDraft(BaseModel):
    """A table that has not been assigned an id by the store yet."""

    room_id: str
    table_number: str = Field(min_length=1, max_length=20)
    capacity: int = Field(ge=1, le=20)
    shape: TableShape = TableShape.SQUARE
    position_x: int
    position_y: int


class Table(TableDraft):
    """A table placed in a room.

    ``position_x``/``position_y`` is the anchor cell. ``width``/``height`` is
    the footprint in cells, derived from capacity and shape.
    """

    id: str
    restaurant_id: Optional[str] = None
    width: int = 1
    height: int = 1
    is_active: bool = True

    class Config:
        """Configuration for the Table model."""

        from_attributes = True

    @property
    def anchor(self) -> tuple[int, int]:
        return (self.position_x, self.position_y)
