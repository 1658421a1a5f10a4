"""API for the floorplan service."""

from fastapi import APIRouter

from floorplan.api.v1.endpoints import auth, editor, rooms, tables

api_router = APIRouter()
api_router.include_router(
    auth.router, prefix="/auth", tags=["auth"]
)
api_router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
api_router.include_router(
    tables.router, prefix="/rooms/{room_id}/tables", tags=["tables"]
)
api_router.include_router(editor.router, prefix="/editor", tags=["editor"])
