"""
Business logic for events.

An event is one session of a miqaat (e.g. a single day's vaaz).  Vaaz
centers, blocks and pass preferences all hang off an event.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from miqaat_api.app.core.db import get_connection
from miqaat_api.app.core.enums import AuditObjectType
from miqaat_api.app.core.exceptions import ConflictError
from miqaat_api.app.schemas.event import EventCreate, EventRead
from miqaat_api.app.services.audit_service import AuditService

logger = logging.getLogger(__name__)


def row_to_event(row: sqlite3.Row) -> EventRead:
    return EventRead(id=row["id"], name=row["name"], status=row["status"], miqaat_id=row["miqaat_id"])


class EventService:
    """CRUD for the ``events`` table."""

    @staticmethod
    def _check_references(cursor: sqlite3.Cursor, fields: Dict[str, Any], event_id: Optional[int] = None) -> None:
        if fields.get("miqaat_id") is not None and not cursor.execute(
            "SELECT 1 FROM miqaats WHERE id = ?", (fields["miqaat_id"],)
        ).fetchone():
            raise ValueError(f"Miqaat {fields['miqaat_id']} not found")
        if "name" in fields and cursor.execute(
            "SELECT 1 FROM events WHERE name = ? AND id IS NOT ?", (fields["name"], event_id)
        ).fetchone():
            raise ConflictError(f"An event named '{fields['name']}' already exists")

    @classmethod
    async def create_event(cls, data: EventCreate, current_user: dict) -> EventRead:
        logger.info("ITS %s is creating event '%s'", current_user.get("its_id"), data.name)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._check_references(cursor, data.model_dump())
            cursor.execute(
                "INSERT INTO events (name, status, miqaat_id) VALUES (?, ?, ?)",
                (data.name, data.status.value, data.miqaat_id),
            )
            event_id = cursor.lastrowid
            conn.commit()
        finally:
            conn.close()
        await AuditService.record(current_user.get("its_id"), "create", AuditObjectType.EVENT, event_id, {"name": data.name})
        return await cls.get_event(event_id)

    @classmethod
    async def list_events(cls, miqaat_id: Optional[int] = None) -> List[EventRead]:
        conn = get_connection()
        try:
            if miqaat_id is not None:
                rows = conn.execute(
                    "SELECT * FROM events WHERE miqaat_id = ? ORDER BY id", (miqaat_id,)
                ).fetchall()
            else:
                rows = conn.execute("SELECT * FROM events ORDER BY id").fetchall()
            return [row_to_event(r) for r in rows]
        finally:
            conn.close()

    @classmethod
    async def get_event(cls, event_id: int) -> EventRead:
        """Retrieve an event by ID.  Raises ``ValueError`` if it does not exist."""
        conn = get_connection()
        try:
            row = conn.execute("SELECT * FROM events WHERE id = ?", (event_id,)).fetchone()
            if not row:
                raise ValueError("Event not found")
            return row_to_event(row)
        finally:
            conn.close()

    @classmethod
    async def update_event(cls, event_id: int, updates: Dict[str, Any], current_user: dict) -> EventRead:
        """Apply a partial update.  Only keys present in ``updates`` change."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if not cursor.execute("SELECT 1 FROM events WHERE id = ?", (event_id,)).fetchone():
                raise ValueError("Event not found")
            cls._check_references(cursor, updates, event_id)
            if updates:
                assignments = ", ".join(f"{k} = ?" for k in updates)
                params = [getattr(v, "value", v) for v in updates.values()] + [event_id]
                cursor.execute(
                    f"UPDATE events SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    tuple(params),
                )
                conn.commit()
        finally:
            conn.close()
        await AuditService.record(current_user.get("its_id"), "update", AuditObjectType.EVENT, event_id, updates)
        return await cls.get_event(event_id)

    @classmethod
    async def delete_event(cls, event_id: int, current_user: dict) -> None:
        """Delete an event.  Its pass preferences go with it; vaaz centers are detached."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM events WHERE id = ?", (event_id,))
            if cursor.rowcount == 0:
                raise ValueError("Event not found")
            conn.commit()
        finally:
            conn.close()
        await AuditService.record(current_user.get("its_id"), "delete", AuditObjectType.EVENT, event_id)
