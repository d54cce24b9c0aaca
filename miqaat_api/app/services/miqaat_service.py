"""
Business logic for miqaats.

A miqaat is an occasion that groups several events.  Reads return the
miqaat together with its events.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from miqaat_api.app.core.db import get_connection
from miqaat_api.app.core.enums import AuditObjectType
from miqaat_api.app.core.exceptions import ConflictError
from miqaat_api.app.schemas.miqaat import MiqaatCreate, MiqaatRead
from miqaat_api.app.services.audit_service import AuditService
from miqaat_api.app.services.event_service import row_to_event

logger = logging.getLogger(__name__)


class MiqaatService:
    """CRUD for the ``miqaats`` table."""

    @staticmethod
    def _to_read(cursor: sqlite3.Cursor, row: sqlite3.Row) -> MiqaatRead:
        events = cursor.execute(
            "SELECT * FROM events WHERE miqaat_id = ? ORDER BY id", (row["id"],)
        ).fetchall()
        return MiqaatRead(
            id=row["id"],
            name=row["name"],
            status=row["status"],
            events=[row_to_event(e) for e in events],
        )

    @staticmethod
    def _ensure_unique_name(cursor: sqlite3.Cursor, name: str, miqaat_id: Optional[int] = None) -> None:
        if cursor.execute(
            "SELECT 1 FROM miqaats WHERE name = ? AND id IS NOT ?", (name, miqaat_id)
        ).fetchone():
            raise ConflictError(f"A miqaat named '{name}' already exists")

    @classmethod
    async def create_miqaat(cls, data: MiqaatCreate, current_user: dict) -> MiqaatRead:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._ensure_unique_name(cursor, data.name)
            cursor.execute(
                "INSERT INTO miqaats (name, status) VALUES (?, ?)",
                (data.name, data.status.value),
            )
            miqaat_id = cursor.lastrowid
            conn.commit()
            logger.info("Created miqaat %s '%s'", miqaat_id, data.name)
            created = cls._to_read(cursor, cursor.execute("SELECT * FROM miqaats WHERE id = ?", (miqaat_id,)).fetchone())
        finally:
            conn.close()
        await AuditService.record(current_user.get("its_id"), "create", AuditObjectType.MIQAAT, miqaat_id, {"name": data.name})
        return created

    @classmethod
    async def list_miqaats(cls) -> List[MiqaatRead]:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            rows = cursor.execute("SELECT * FROM miqaats ORDER BY id").fetchall()
            return [cls._to_read(cursor, r) for r in rows]
        finally:
            conn.close()

    @classmethod
    async def get_miqaat(cls, miqaat_id: int) -> MiqaatRead:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute("SELECT * FROM miqaats WHERE id = ?", (miqaat_id,)).fetchone()
            if not row:
                raise ValueError("Miqaat not found")
            return cls._to_read(cursor, row)
        finally:
            conn.close()

    @classmethod
    async def update_miqaat(cls, miqaat_id: int, updates: Dict[str, Any], current_user: dict) -> MiqaatRead:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if not cursor.execute("SELECT 1 FROM miqaats WHERE id = ?", (miqaat_id,)).fetchone():
                raise ValueError("Miqaat not found")
            if "name" in updates:
                cls._ensure_unique_name(cursor, updates["name"], miqaat_id)
            if updates:
                assignments = ", ".join(f"{k} = ?" for k in updates)
                params = [getattr(v, "value", v) for v in updates.values()] + [miqaat_id]
                cursor.execute(
                    f"UPDATE miqaats SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    tuple(params),
                )
                conn.commit()
        finally:
            conn.close()
        await AuditService.record(current_user.get("its_id"), "update", AuditObjectType.MIQAAT, miqaat_id, updates)
        return await cls.get_miqaat(miqaat_id)

    @classmethod
    async def delete_miqaat(cls, miqaat_id: int, current_user: dict) -> None:
        """Delete a miqaat and its accommodations.  Its events are kept but detached."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM miqaats WHERE id = ?", (miqaat_id,))
            if cursor.rowcount == 0:
                raise ValueError("Miqaat not found")
            conn.commit()
        finally:
            conn.close()
        await AuditService.record(current_user.get("its_id"), "delete", AuditObjectType.MIQAAT, miqaat_id)
