"""API endpoints driving an open grid editor with UI events."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from floorplan.core.config import Settings
from floorplan.core.dependencies import (
    get_app_settings,
    get_current_session,
    get_owned_room,
    get_room_store,
    get_session_registry,
)
from floorplan.core.permissions import has_permission
from floorplan.models.room import Room
from floorplan.schemas.editor_api import EditorEvent, LayoutView
from floorplan.services.editor.surface import LayoutEditor
from floorplan.services.placement.models import OccupiedCellError, TableNotFoundError
from floorplan.services.room_store import RoomStore
from floorplan.services.session_service import EditingSession, SessionRegistry

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()

# Events that change tables, and the permission each needs.
MUTATING_EVENTS = {
    "click_cell": "create",
    "pointer_down": "update",
    "pointer_move": "update",
    "edit_table": "update",
    "delete_selected": "delete",
}


def _require(event: EditorEvent, *fields: str) -> None:
    missing = [name for name in fields if getattr(event, name) is None]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"'{event.type}' events need: {', '.join(missing)}",
        )


def apply_event(editor: LayoutEditor, event: EditorEvent) -> None:
    """Dispatch one UI event to the editor."""
    if event.type == "toggle_placement":
        editor.toggle_placement_mode()
    elif event.type == "click_cell":
        _require(event, "x", "y")
        editor.click_cell(event.x, event.y)
    elif event.type == "click_table":
        _require(event, "table_id")
        editor.click_table(event.table_id)
    elif event.type == "pointer_down":
        _require(event, "table_id", "pointer_x", "pointer_y")
        editor.pointer_down(event.table_id, event.pointer_x, event.pointer_y)
    elif event.type == "pointer_move":
        _require(event, "pointer_x", "pointer_y")
        editor.pointer_move(event.pointer_x, event.pointer_y)
    elif event.type == "pointer_up":
        editor.pointer_up()
    elif event.type == "edit_table":
        _require(event, "table_id")
        try:
            editor.edit_table(event.table_id, **event.changes)
        except OccupiedCellError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
            )
    elif event.type == "delete_selected":
        editor.delete_selected()


def _open_editor(session: EditingSession, room_id: str) -> LayoutEditor:
    editor = session.get_editor(room_id)
    if editor is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Room {room_id} is not open in this session",
        )
    return editor


@router.post(
    "/{room_id}",
    response_model=LayoutView,
    status_code=status.HTTP_200_OK,
    summary="Open a room in the editor",
    description="Load the room into the caller's session, or reload it if already open.",
)
async def open_room(
    room: Room = Depends(get_owned_room),
    session: EditingSession = Depends(get_current_session),
    store: RoomStore = Depends(get_room_store),
    settings: Settings = Depends(get_app_settings),
) -> LayoutView:
    """Open a room for editing."""
    if not has_permission(session.role, "rooms", "view"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed")
    return session.open_editor(store, room, settings).render()


@router.get(
    "/{room_id}",
    response_model=LayoutView,
    status_code=status.HTTP_200_OK,
    summary="Render the open editor",
)
async def get_editor(
    room_id: str,
    session: EditingSession = Depends(get_current_session),
) -> LayoutView:
    """Render the editor as it stands."""
    return _open_editor(session, room_id).render()


@router.post(
    "/{room_id}/events",
    response_model=LayoutView,
    status_code=status.HTTP_200_OK,
    summary="Send a UI event to the editor",
    description=(
        "Apply a click, pointer or edit event and return the re-rendered editor. "
        "Rejected placements and moves leave the layout unchanged."
    ),
)
async def send_event(
    event: EditorEvent,
    room_id: str,
    session: EditingSession = Depends(get_current_session),
    store: RoomStore = Depends(get_room_store),
    sessions: SessionRegistry = Depends(get_session_registry),
) -> LayoutView:
    """Apply one UI event."""
    editor = _open_editor(session, room_id)

    action = MUTATING_EVENTS.get(event.type)
    if event.type == "click_cell" and not editor.placement_mode:
        action = None
    if action is not None and not has_permission(session.role, "tables", action):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role '{session.role}' may not {action} tables.",
        )

    try:
        apply_event(editor, event)
    except TableNotFoundError as e:
        # removed by someone else since this editor loaded
        editor.reload(editor.room, store.list_tables(room_id))
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if action is not None:
        sessions.sync_room(store, editor.room, source=editor)
    return editor.render()


@router.delete(
    "/{room_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Close a room in the editor",
)
async def close_room(
    room_id: str,
    session: EditingSession = Depends(get_current_session),
) -> None:
    """Close the editor for a room."""
    if not session.close_editor(room_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Room {room_id} is not open in this session",
        )
