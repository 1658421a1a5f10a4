"""Dependencies for the application using FastAPI app state for singletons."""

import logging
from typing import Callable

from fastapi import Depends, HTTPException, Request, status

from floorplan.core.auth import TokenData, jwt_auth
from floorplan.core.config import Settings
from floorplan.core.permissions import has_permission
from floorplan.models.room import Room
from floorplan.services.room_store import RoomStore
from floorplan.services.session_service import EditingSession, SessionRegistry

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


def get_room_store(request: Request) -> RoomStore:
    """Get the room store from application state."""
    if not hasattr(request.app.state, "room_store"):
        raise ValueError("Room store not initialized in application state")

    return request.app.state.room_store


def get_session_registry(request: Request) -> SessionRegistry:
    """Get the session registry from application state."""
    if not hasattr(request.app.state, "sessions"):
        raise ValueError("Session registry not initialized in application state")

    return request.app.state.sessions


def get_current_session(
    token: TokenData = Depends(jwt_auth),
    sessions: SessionRegistry = Depends(get_session_registry),
) -> EditingSession:
    """Get the editing session the bearer token belongs to."""
    session = sessions.get(token.sid)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Session has ended, please log in again.",
        )
    return session


def require_permission(module: str, action: str) -> Callable[..., EditingSession]:
    """Build a dependency that rejects sessions whose role lacks a permission."""

    def checker(session: EditingSession = Depends(get_current_session)) -> EditingSession:
        if not has_permission(session.role, module, action):
            logger.warning(
                f"Session {session.session_id} ({session.role}) denied {action} on {module}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{session.role}' may not {action} {module}.",
            )
        return session

    return checker


def get_owned_room(
    room_id: str,
    session: EditingSession = Depends(get_current_session),
    store: RoomStore = Depends(get_room_store),
) -> Room:
    """Load a room, hiding rooms that belong to another restaurant."""
    room = store.get_room(room_id)
    if room is None or room.restaurant_id != session.restaurant_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Room with ID {room_id} not found",
        )
    return room
