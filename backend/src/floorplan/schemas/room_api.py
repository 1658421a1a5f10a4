"""API schemas for room and table operations."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from floorplan.models.room import TableShape


class RoomCreate(BaseModel):
    """Schema for creating a new room. Grid size defaults come from settings."""

    name: str = Field(min_length=1, max_length=100)
    grid_width: Optional[int] = None
    grid_height: Optional[int] = None


class RoomUpdate(BaseModel):
    """Schema for updating an existing room."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    grid_width: Optional[int] = None
    grid_height: Optional[int] = None


class RoomResponse(BaseModel):
    """Schema for room response."""

    id: str
    restaurant_id: str
    name: str
    grid_width: int
    grid_height: int
    created_at: datetime
    updated_at: datetime


class RoomListResponse(BaseModel):
    """Schema for listing rooms."""

    items: List[RoomResponse]


class TableCreate(BaseModel):
    """Schema for placing a new table. The number defaults to ``T<n+1>``."""

    table_number: Optional[str] = Field(default=None, min_length=1, max_length=20)
    capacity: int = Field(default=2, ge=1, le=20)
    shape: TableShape = TableShape.SQUARE
    position_x: int
    position_y: int


class TableUpdate(BaseModel):
    """Schema for editing a table. A position moves the table, clamped to the grid."""

    table_number: Optional[str] = Field(default=None, min_length=1, max_length=20)
    capacity: Optional[int] = Field(default=None, ge=1, le=20)
    shape: Optional[TableShape] = None
    position_x: Optional[int] = None
    position_y: Optional[int] = None


class TableResponse(BaseModel):
    """Schema for table response."""

    id: str
    room_id: str
    restaurant_id: Optional[str] = None
    table_number: str
    capacity: int
    shape: TableShape
    position_x: int
    position_y: int
    width: int
    height: int
    is_active: bool


class TableListResponse(BaseModel):
    """Schema for listing tables."""

    items: List[TableResponse]
