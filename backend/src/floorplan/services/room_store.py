"""Store for rooms and their tables using SQLite."""

import logging
import os
import sqlite3
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from floorplan.models.room import Room, Table, TableDraft

# Set up logging
logger = logging.getLogger(__name__)

ROOM_COLUMNS = "id, restaurant_id, name, grid_width, grid_height, created_at, updated_at"
TABLE_COLUMNS = (
    "id, room_id, restaurant_id, table_number, capacity, shape, "
    "position_x, position_y, width, height, is_active"
)
ROOM_FIELDS = frozenset({"name", "grid_width", "grid_height"})
TABLE_FIELDS = frozenset(
    {"table_number", "capacity", "shape", "position_x", "position_y", "width", "height", "is_active"}
)


def _new_id() -> str:
    return uuid.uuid4().hex


class RoomStore:
    """Persists rooms and tables in a SQLite database file."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the database file and its tables if they don't exist."""
        dir_path = os.path.dirname(self.db_path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)

        conn = self._connect()
        try:
            cursor = conn.cursor()
            cursor.execute('''
            CREATE TABLE IF NOT EXISTS rooms (
                id TEXT PRIMARY KEY,
                restaurant_id TEXT NOT NULL,
                name TEXT NOT NULL,
                grid_width INTEGER NOT NULL,
                grid_height INTEGER NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            ''')
            cursor.execute('''
            CREATE TABLE IF NOT EXISTS tables (
                id TEXT PRIMARY KEY,
                room_id TEXT NOT NULL,
                restaurant_id TEXT,
                table_number TEXT NOT NULL,
                capacity INTEGER NOT NULL,
                shape TEXT NOT NULL,
                position_x INTEGER NOT NULL,
                position_y INTEGER NOT NULL,
                width INTEGER NOT NULL,
                height INTEGER NOT NULL,
                is_active INTEGER NOT NULL DEFAULT 1
            )
            ''')
            conn.commit()
        finally:
            conn.close()

        logger.info(f"Initialized SQLite database at {self.db_path}")

    def _write(self, sql: str, params: tuple, action: str) -> int:
        """Run one write statement in a transaction and return the row count."""
        conn = self._connect()
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor.rowcount
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Error while trying to {action}: {e}")
            raise
        finally:
            conn.close()

    # ── Rooms ──────────────────────────────────────────────────────

    @staticmethod
    def _row_to_room(row: sqlite3.Row) -> Room:
        return Room(
            id=row["id"],
            restaurant_id=row["restaurant_id"],
            name=row["name"],
            grid_width=row["grid_width"],
            grid_height=row["grid_height"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def create_room(
        self, restaurant_id: str, name: str, grid_width: int, grid_height: int
    ) -> Room:
        room = Room(
            id=_new_id(),
            restaurant_id=restaurant_id,
            name=name,
            grid_width=grid_width,
            grid_height=grid_height,
        )
        self._write(
            f"INSERT INTO rooms ({ROOM_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                room.id,
                room.restaurant_id,
                room.name,
                room.grid_width,
                room.grid_height,
                room.created_at.isoformat(),
                room.updated_at.isoformat(),
            ),
            f"create room {room.name}",
        )
        logger.info(f"Inserted new room {room.id} for restaurant {restaurant_id}")
        return room

    def get_room(self, room_id: str) -> Optional[Room]:
        conn = self._connect()
        try:
            row = conn.execute(
                f"SELECT {ROOM_COLUMNS} FROM rooms WHERE id = ?", (room_id,)
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            logger.warning(f"Room {room_id} not found in database")
            return None
        return self._row_to_room(row)

    def list_rooms(self, restaurant_id: str) -> List[Room]:
        conn = self._connect()
        try:
            rows = conn.execute(
                f"SELECT {ROOM_COLUMNS} FROM rooms WHERE restaurant_id = ? ORDER BY created_at",
                (restaurant_id,),
            ).fetchall()
        finally:
            conn.close()
        return [self._row_to_room(row) for row in rows]

    def update_room(self, room_id: str, changes: Dict[str, Any]) -> Optional[Room]:
        """Update a room's name or grid size. Returns None if it doesn't exist."""
        unknown = set(changes) - ROOM_FIELDS
        if unknown:
            raise ValueError(f"Unknown room fields: {sorted(unknown)}")

        room = self.get_room(room_id)
        if room is None:
            return None
        if not changes:
            return room

        room = room.model_copy(update={**changes, "updated_at": datetime.utcnow()})
        self._write(
            "UPDATE rooms SET name = ?, grid_width = ?, grid_height = ?, updated_at = ? WHERE id = ?",
            (room.name, room.grid_width, room.grid_height, room.updated_at.isoformat(), room.id),
            f"update room {room_id}",
        )
        logger.info(f"Updated room {room_id} in database")
        return room

    def delete_room(self, room_id: str) -> bool:
        """Delete a room and all of its tables."""
        conn = self._connect()
        try:
            deleted = conn.execute("DELETE FROM rooms WHERE id = ?", (room_id,)).rowcount
            if deleted:
                conn.execute("DELETE FROM tables WHERE room_id = ?", (room_id,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Error deleting room {room_id}: {e}")
            raise
        finally:
            conn.close()

        if not deleted:
            logger.warning(f"Room {room_id} not found in database")
            return False
        logger.info(f"Deleted room {room_id} from database")
        return True

    # ── Tables ─────────────────────────────────────────────────────

    @staticmethod
    def _row_to_table(row: sqlite3.Row) -> Table:
        return Table.model_validate({**dict(row), "is_active": bool(row["is_active"])})

    def list_tables(self, room_id: str) -> List[Table]:
        """List the active tables of a room."""
        conn = self._connect()
        try:
            rows = conn.execute(
                f"SELECT {TABLE_COLUMNS} FROM tables WHERE room_id = ? AND is_active = 1 ORDER BY rowid",
                (room_id,),
            ).fetchall()
        finally:
            conn.close()
        return [self._row_to_table(row) for row in rows]

    def get_table(self, table_id: str) -> Optional[Table]:
        conn = self._connect()
        try:
            row = conn.execute(
                f"SELECT {TABLE_COLUMNS} FROM tables WHERE id = ?", (table_id,)
            ).fetchone()
        finally:
            conn.close()
        return self._row_to_table(row) if row is not None else None

    def insert_table(
        self,
        draft: TableDraft,
        restaurant_id: Optional[str],
        width: int = 1,
        height: int = 1,
    ) -> Table:
        """Insert a new table and return it with its assigned id."""
        table = Table(
            **draft.model_dump(),
            id=_new_id(),
            restaurant_id=restaurant_id,
            width=width,
            height=height,
        )
        self._write(
            f"INSERT INTO tables ({TABLE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                table.id,
                table.room_id,
                table.restaurant_id,
                table.table_number,
                table.capacity,
                table.shape.value,
                table.position_x,
                table.position_y,
                table.width,
                table.height,
                int(table.is_active),
            ),
            f"insert table {table.table_number}",
        )
        logger.info(f"Inserted new table {table.id} into room {table.room_id}")
        return table

    def update_table(self, table_id: str, changes: Dict[str, Any]) -> bool:
        unknown = set(changes) - TABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown table fields: {sorted(unknown)}")
        if not changes:
            return self.get_table(table_id) is not None

        columns = sorted(changes)
        values = []
        for column in columns:
            value = changes[column]
            if hasattr(value, "value"):
                value = value.value
            elif isinstance(value, bool):
                value = int(value)
            values.append(value)

        assignments = ", ".join(f"{column} = ?" for column in columns)
        updated = self._write(
            f"UPDATE tables SET {assignments} WHERE id = ?",
            (*values, table_id),
            f"update table {table_id}",
        )
        if not updated:
            logger.warning(f"Table {table_id} not found in database")
            return False
        logger.info(f"Updated table {table_id} in database")
        return True

    def delete_table(self, table_id: str) -> bool:
        deleted = self._write(
            "DELETE FROM tables WHERE id = ?", (table_id,), f"delete table {table_id}"
        )
        if not deleted:
            logger.warning(f"Table {table_id} not found in database")
            return False
        logger.info(f"Deleted table {table_id} from database")
        return True
