"""API endpoints for placing, editing and removing tables in a room."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, status

from floorplan.core.config import Settings
from floorplan.core.dependencies import (
    get_app_settings,
    get_owned_room,
    get_room_store,
    get_session_registry,
    require_permission,
)
from floorplan.models.room import Room, Table, TableDraft
from floorplan.schemas.room_api import (
    TableCreate,
    TableListResponse,
    TableResponse,
    TableUpdate,
)
from floorplan.services.editor.surface import LayoutEditor
from floorplan.services.placement.models import (
    OccupiedCellError,
    OutOfBoundsError,
    PlacementError,
    TableNotFoundError,
)
from floorplan.services.room_store import RoomStore
from floorplan.services.session_service import EditingSession, SessionRegistry, build_editor

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


def placement_http_error(exc: PlacementError) -> HTTPException:
    """Map a rejected placement to an HTTP error."""
    if isinstance(exc, OccupiedCellError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, OutOfBoundsError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(exc))


def not_found(table_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Table with ID {table_id} not found",
    )


def _editor(
    session: EditingSession, store: RoomStore, room: Room, settings: Settings
) -> LayoutEditor:
    """The caller's open editor for the room, or a throwaway one."""
    return session.get_editor(room.id) or build_editor(store, room, settings)


def _to_response(table: Table) -> TableResponse:
    return TableResponse(**table.model_dump())


@router.get(
    "/",
    response_model=TableListResponse,
    status_code=status.HTTP_200_OK,
    summary="List the tables of a room",
)
async def list_tables(
    room: Room = Depends(get_owned_room),
    _: EditingSession = Depends(require_permission("tables", "view")),
    store: RoomStore = Depends(get_room_store),
) -> TableListResponse:
    """List the active tables of a room."""
    return TableListResponse(items=[_to_response(t) for t in store.list_tables(room.id)])


@router.post(
    "/",
    response_model=TableResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place a new table",
    description="Place a table on a free cell. Occupied cells give 409, cells outside the grid 422.",
)
async def create_table(
    table_create: TableCreate,
    room: Room = Depends(get_owned_room),
    session: EditingSession = Depends(require_permission("tables", "create")),
    store: RoomStore = Depends(get_room_store),
    sessions: SessionRegistry = Depends(get_session_registry),
    settings: Settings = Depends(get_app_settings),
) -> TableResponse:
    """Place a new table."""
    editor = _editor(session, store, room, settings)
    draft = TableDraft(
        room_id=room.id,
        table_number=table_create.table_number or f"T{len(editor.tables) + 1}",
        capacity=table_create.capacity,
        shape=table_create.shape,
        position_x=table_create.position_x,
        position_y=table_create.position_y,
    )

    try:
        table = editor.add_table(draft)
    except PlacementError as e:
        logger.info(f"Rejected table in room {room.id}: {e}")
        raise placement_http_error(e)

    sessions.sync_room(store, room, source=editor)
    return _to_response(table)


@router.patch(
    "/{table_id}",
    response_model=TableResponse,
    status_code=status.HTTP_200_OK,
    summary="Edit or move a table",
    description=(
        "Change a table's number, capacity or shape, and/or move it. "
        "Positions are clamped to the grid; a move onto a taken cell leaves "
        "the table where it was."
    ),
)
async def update_table(
    table_update: TableUpdate,
    table_id: str = Path(..., description="The ID of the table to update"),
    room: Room = Depends(get_owned_room),
    session: EditingSession = Depends(require_permission("tables", "update")),
    store: RoomStore = Depends(get_room_store),
    sessions: SessionRegistry = Depends(get_session_registry),
    settings: Settings = Depends(get_app_settings),
) -> TableResponse:
    """Edit or move a table."""
    editor = _editor(session, store, room, settings)
    table = editor.get_table(table_id)
    if table is None:
        raise not_found(table_id)

    changes = table_update.model_dump(exclude_none=True)
    x = changes.pop("position_x", None)
    y = changes.pop("position_y", None)

    try:
        if changes:
            table = editor.edit_table(table_id, **changes)
        if x is not None or y is not None:
            table = editor.move_table(
                table_id,
                table.position_x if x is None else x,
                table.position_y if y is None else y,
            )
    except TableNotFoundError:
        raise not_found(table_id)
    except PlacementError as e:
        logger.info(f"Rejected edit of table {table_id}: {e}")
        raise placement_http_error(e)

    sessions.sync_room(store, room, source=editor)
    return _to_response(table)


@router.delete(
    "/{table_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a table",
)
async def delete_table(
    table_id: str = Path(..., description="The ID of the table to delete"),
    room: Room = Depends(get_owned_room),
    session: EditingSession = Depends(require_permission("tables", "delete")),
    store: RoomStore = Depends(get_room_store),
    sessions: SessionRegistry = Depends(get_session_registry),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Remove a table from a room."""
    editor = _editor(session, store, room, settings)
    try:
        deleted = editor.delete_table(table_id)
    except TableNotFoundError:
        deleted = False
    if not deleted:
        raise not_found(table_id)

    sessions.sync_room(store, room, source=editor)
