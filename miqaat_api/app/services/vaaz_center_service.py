"""Business logic for vaaz centers, the venues an event is held in."""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from miqaat_api.app.core.db import get_connection
from miqaat_api.app.core.enums import AuditObjectType
from miqaat_api.app.schemas.vaaz_center import VaazCenterCreate, VaazCenterRead
from miqaat_api.app.services.audit_service import AuditService

logger = logging.getLogger(__name__)

COLUMNS = "id, event_id, name, est_capacity, male_capacity, female_capacity, lat, long"


def _to_read(row: sqlite3.Row) -> VaazCenterRead:
    return VaazCenterRead(**{k: row[k] for k in row.keys()})


class VaazCenterService:
    @staticmethod
    def _check_event(cursor: sqlite3.Cursor, event_id: Optional[int]) -> None:
        if event_id is not None and not cursor.execute(
            "SELECT 1 FROM events WHERE id = ?", (event_id,)
        ).fetchone():
            raise ValueError(f"Event {event_id} not found")

    @classmethod
    async def create(cls, data: VaazCenterCreate, current_user: dict) -> VaazCenterRead:
        fields = data.model_dump()
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._check_event(cursor, data.event_id)
            cursor.execute(
                f"INSERT INTO vaaz_centers ({', '.join(fields)}) VALUES ({', '.join('?' for _ in fields)})",
                tuple(fields.values()),
            )
            center_id = cursor.lastrowid
            conn.commit()
        finally:
            conn.close()
        logger.info("Created vaaz center %s '%s'", center_id, data.name)
        await AuditService.record(current_user.get("its_id"), "create", AuditObjectType.VAAZ_CENTER, center_id, {"name": data.name})
        return await cls.get(center_id)

    @classmethod
    async def list_vaaz_centers(cls, event_id: Optional[int] = None) -> List[VaazCenterRead]:
        conn = get_connection()
        try:
            if event_id is not None:
                rows = conn.execute(
                    f"SELECT {COLUMNS} FROM vaaz_centers WHERE event_id = ? ORDER BY id", (event_id,)
                ).fetchall()
            else:
                rows = conn.execute(f"SELECT {COLUMNS} FROM vaaz_centers ORDER BY id").fetchall()
            return [_to_read(r) for r in rows]
        finally:
            conn.close()

    @classmethod
    async def get(cls, center_id: int) -> VaazCenterRead:
        conn = get_connection()
        try:
            row = conn.execute(f"SELECT {COLUMNS} FROM vaaz_centers WHERE id = ?", (center_id,)).fetchone()
            if not row:
                raise ValueError("Vaaz Center not found")
            return _to_read(row)
        finally:
            conn.close()

    @classmethod
    async def update(cls, center_id: int, updates: Dict[str, Any], current_user: dict) -> VaazCenterRead:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if not cursor.execute("SELECT 1 FROM vaaz_centers WHERE id = ?", (center_id,)).fetchone():
                raise ValueError("Vaaz Center not found")
            cls._check_event(cursor, updates.get("event_id"))
            if updates:
                assignments = ", ".join(f"{k} = ?" for k in updates)
                cursor.execute(
                    f"UPDATE vaaz_centers SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*updates.values(), center_id),
                )
                conn.commit()
        finally:
            conn.close()
        await AuditService.record(current_user.get("its_id"), "update", AuditObjectType.VAAZ_CENTER, center_id, updates)
        return await cls.get(center_id)

    @classmethod
    async def delete(cls, center_id: int, current_user: dict) -> None:
        """Delete a center with its blocks.  Pass preferences pointing at it are kept, unplaced."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM vaaz_centers WHERE id = ?", (center_id,))
            if cursor.rowcount == 0:
                raise ValueError("Vaaz Center not found")
            conn.commit()
        finally:
            conn.close()
        await AuditService.record(current_user.get("its_id"), "delete", AuditObjectType.VAAZ_CENTER, center_id)
