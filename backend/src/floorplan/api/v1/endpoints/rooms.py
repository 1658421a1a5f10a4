"""API endpoints for room operations."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from floorplan.core.config import Settings
from floorplan.core.dependencies import (
    get_app_settings,
    get_owned_room,
    get_room_store,
    get_session_registry,
    require_permission,
)
from floorplan.models.room import Room
from floorplan.schemas.editor_api import LayoutView
from floorplan.schemas.room_api import (
    RoomCreate,
    RoomListResponse,
    RoomResponse,
    RoomUpdate,
)
from floorplan.services.placement import engine
from floorplan.services.room_store import RoomStore
from floorplan.services.session_service import EditingSession, SessionRegistry, build_editor

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


def _check_grid_size(settings: Settings, width: int, height: int) -> None:
    low, high = settings.grid_min_size, settings.grid_max_size
    for axis, value in (("grid_width", width), ("grid_height", height)):
        if not low <= value <= high:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"{axis} must be between {low} and {high}, got {value}",
            )


def _to_response(room: Room) -> RoomResponse:
    return RoomResponse(**room.model_dump())


@router.post(
    "/",
    response_model=RoomResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new room",
    description="Create a new room with an empty grid.",
)
async def create_room(
    room_create: RoomCreate,
    session: EditingSession = Depends(require_permission("rooms", "create")),
    store: RoomStore = Depends(get_room_store),
    settings: Settings = Depends(get_app_settings),
) -> RoomResponse:
    """Create a new room."""
    width = room_create.grid_width
    if width is None:
        width = settings.default_grid_width
    height = room_create.grid_height
    if height is None:
        height = settings.default_grid_height
    _check_grid_size(settings, width, height)

    room = store.create_room(session.restaurant_id, room_create.name, width, height)
    return _to_response(room)


@router.get(
    "/",
    response_model=RoomListResponse,
    status_code=status.HTTP_200_OK,
    summary="List rooms",
    description="List the rooms of the caller's restaurant.",
)
async def list_rooms(
    session: EditingSession = Depends(require_permission("rooms", "view")),
    store: RoomStore = Depends(get_room_store),
) -> RoomListResponse:
    """List all rooms of the restaurant."""
    rooms = store.list_rooms(session.restaurant_id)
    return RoomListResponse(items=[_to_response(room) for room in rooms])


@router.get(
    "/{room_id}",
    response_model=RoomResponse,
    status_code=status.HTTP_200_OK,
    summary="Get a room by ID",
)
async def get_room(
    room: Room = Depends(get_owned_room),
    _: EditingSession = Depends(require_permission("rooms", "view")),
) -> RoomResponse:
    """Get a room by ID."""
    return _to_response(room)


@router.put(
    "/{room_id}",
    response_model=RoomResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a room by ID",
    description="Rename or resize a room. Shrinking past a table is refused.",
)
async def update_room(
    room_update: RoomUpdate,
    room: Room = Depends(get_owned_room),
    _: EditingSession = Depends(require_permission("rooms", "update")),
    store: RoomStore = Depends(get_room_store),
    sessions: SessionRegistry = Depends(get_session_registry),
    settings: Settings = Depends(get_app_settings),
) -> RoomResponse:
    """Update a room by ID."""
    changes = room_update.model_dump(exclude_none=True)
    resized = room.model_copy(update=changes)

    if "grid_width" in changes or "grid_height" in changes:
        _check_grid_size(settings, resized.grid_width, resized.grid_height)
        outside = engine.tables_outside(resized, store.list_tables(room.id))
        if outside:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=(
                    "Tables outside the new grid: "
                    + ", ".join(t.table_number for t in outside)
                ),
            )

    updated = store.update_room(room.id, changes)
    if updated is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Room with ID {room.id} not found",
        )

    sessions.sync_room(store, updated)
    return _to_response(updated)


@router.delete(
    "/{room_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a room by ID",
    description="Delete a room and every table in it.",
)
async def delete_room(
    room: Room = Depends(get_owned_room),
    _: EditingSession = Depends(require_permission("rooms", "delete")),
    store: RoomStore = Depends(get_room_store),
    sessions: SessionRegistry = Depends(get_session_registry),
) -> None:
    """Delete a room by ID."""
    if not store.delete_room(room.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Room with ID {room.id} not found",
        )
    sessions.close_room(room.id)


@router.get(
    "/{room_id}/layout",
    response_model=LayoutView,
    status_code=status.HTTP_200_OK,
    summary="Render a room's layout",
    description="Cells and tables of a room at their pixel positions.",
)
async def get_layout(
    room: Room = Depends(get_owned_room),
    session: EditingSession = Depends(require_permission("rooms", "view")),
    store: RoomStore = Depends(get_room_store),
    settings: Settings = Depends(get_app_settings),
) -> LayoutView:
    """Render the caller's open editor for the room, or a fresh one."""
    editor = session.get_editor(room.id) or build_editor(store, room, settings)
    return editor.render()
