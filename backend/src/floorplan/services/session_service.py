"""Editing sessions: one per login, owning the editors that login has open."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from floorplan.core.config import Settings
from floorplan.models.room import Room, TableDraft
from floorplan.services.editor.surface import EditorHost, LayoutEditor
from floorplan.services.placement import engine
from floorplan.services.placement.models import CollisionPolicy, TableNotFoundError
from floorplan.services.room_store import RoomStore

logger = logging.getLogger(__name__)


def editor_host_for(store: RoomStore, room: Room) -> EditorHost:
    """Build editor callbacks that write every change through to ``store``."""

    def on_add(draft: TableDraft) -> str:
        width, height = engine.footprint_for(draft.capacity, draft.shape)
        return store.insert_table(draft, room.restaurant_id, width, height).id

    def on_update(table_id: str, changes: dict) -> None:
        if not store.update_table(table_id, changes):
            raise TableNotFoundError(table_id)

    def on_delete(table_id: str) -> None:
        if not store.delete_table(table_id):
            raise TableNotFoundError(table_id)

    return EditorHost(on_add=on_add, on_update=on_update, on_delete=on_delete)


def build_editor(store: RoomStore, room: Room, settings: Settings) -> LayoutEditor:
    """Load a room's tables from ``store`` into a new editor."""
    return LayoutEditor(
        room,
        store.list_tables(room.id),
        editor_host_for(store, room),
        cell_pixel_size=settings.cell_pixel_size,
        cell_inset_px=settings.cell_inset_px,
        policy=CollisionPolicy(settings.collision_policy),
    )


@dataclass
class EditingSession:
    """State belonging to one logged-in user of one restaurant."""

    session_id: str
    restaurant_id: str
    role: str
    created_at: datetime = field(default_factory=datetime.utcnow)
    editors: Dict[str, LayoutEditor] = field(default_factory=dict)

    def open_editor(self, store: RoomStore, room: Room, settings: Settings) -> LayoutEditor:
        """Open ``room``, or reload it from the store if it is already open."""
        editor = self.editors.get(room.id)
        if editor is None:
            editor = build_editor(store, room, settings)
            self.editors[room.id] = editor
            logger.info(f"Session {self.session_id} opened room {room.id}")
        else:
            editor.reload(room, store.list_tables(room.id))
        return editor

    def get_editor(self, room_id: str) -> Optional[LayoutEditor]:
        return self.editors.get(room_id)

    def close_editor(self, room_id: str) -> bool:
        return self.editors.pop(room_id, None) is not None


class SessionRegistry:
    """All live editing sessions of the application."""

    def __init__(self) -> None:
        self._sessions: Dict[str, EditingSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, restaurant_id: str, role: str) -> EditingSession:
        session = EditingSession(
            session_id=uuid.uuid4().hex, restaurant_id=restaurant_id, role=role
        )
        self._sessions[session.session_id] = session
        logger.info(f"Started session {session.session_id} for restaurant {restaurant_id} as {role}")
        return session

    def get(self, session_id: str) -> Optional[EditingSession]:
        return self._sessions.get(session_id)

    def discard(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.editors.clear()
        logger.info(f"Discarded session {session_id}")
        return True

    def editors_for_room(self, room_id: str) -> List[LayoutEditor]:
        return [
            s.editors[room_id] for s in self._sessions.values() if room_id in s.editors
        ]

    def sync_room(
        self, store: RoomStore, room: Room, source: Optional[LayoutEditor] = None
    ) -> int:
        """Reload every open editor of ``room`` except ``source`` from the store.

        The last write wins; other sessions see it on their next event.
        """
        stale = [e for e in self.editors_for_room(room.id) if e is not source]
        if stale:
            tables = store.list_tables(room.id)
            for editor in stale:
                editor.reload(room, tables)
        return len(stale)

    def close_room(self, room_id: str) -> int:
        """Close ``room_id`` in every session that has it open."""
        return sum(s.close_editor(room_id) for s in self._sessions.values())
