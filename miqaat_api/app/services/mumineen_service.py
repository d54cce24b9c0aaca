"""
Business logic for the attendee registry (``mumineens`` table).

Registry records are keyed by the ITS id the attendee logs in with.
Bulk maintenance goes through ``RosterService``; this module covers the
single-record operations and the household views used by the
attendee-facing endpoints.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from miqaat_api.app.core.config import settings
from miqaat_api.app.core.db import get_connection, transaction
from miqaat_api.app.core.enums import AuditObjectType
from miqaat_api.app.core.exceptions import ConflictError
from miqaat_api.app.schemas.mumineen import FamilyMemberRead, MumineenCreate, MumineenRead
from miqaat_api.app.services.audit_service import AuditService
from miqaat_api.app.services.family_service import FamilyService
from miqaat_api.app.services.pass_preference_service import PASS_PREFERENCE_SELECT, row_to_pass_preference

logger = logging.getLogger(__name__)

BOOLEAN_FIELDS = ("local_mehman", "whatsapp_link_clicked", "daily_trans")

# Members of this age or younger are left out of the family pass view.
FAMILY_MIN_AGE = 5


def _row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
    data = {k: row[k] for k in row.keys() if k not in ("created_at", "updated_at")}
    for field in BOOLEAN_FIELDS:
        data[field] = bool(data.get(field))
    return data


def _db_value(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    return getattr(value, "value", value)


class MumineenService:
    """CRUD and household queries for attendees."""

    @classmethod
    async def get(cls, its_id: int) -> MumineenRead:
        """Return one attendee.  Raises ``ValueError`` when absent."""
        conn = get_connection()
        try:
            row = conn.execute("SELECT * FROM mumineens WHERE its_id = ?", (its_id,)).fetchone()
            if not row:
                raise ValueError("Mumineen not found")
            return MumineenRead(**_row_to_dict(row))
        finally:
            conn.close()

    @classmethod
    async def get_own(cls, its_id: int) -> MumineenRead:
        """Return the caller's own record, limited to the configured jamaats.

        With ``ALLOWED_JAMAATS`` unset every registered attendee can
        read their record.
        """
        record = await cls.get(its_id)
        allowed = settings.jamaat_filter()
        if allowed and (record.jamaat or "").upper() not in allowed:
            raise ValueError("Mumineen not found")
        return record

    @classmethod
    async def create(cls, data: MumineenCreate, current_user: dict) -> MumineenRead:
        fields = {k: _db_value(v) for k, v in data.model_dump().items()}
        columns = ", ".join(fields)
        placeholders = ", ".join("?" for _ in fields)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if cursor.execute("SELECT 1 FROM mumineens WHERE its_id = ?", (data.its_id,)).fetchone():
                raise ConflictError(f"Mumineen with ITS {data.its_id} already exists")
            if data.hizbe_saifee_group_id is not None and not cursor.execute(
                "SELECT 1 FROM hizbe_saifee_groups WHERE id = ?", (data.hizbe_saifee_group_id,)
            ).fetchone():
                raise ValueError(f"Hizbe Saifee group {data.hizbe_saifee_group_id} not found")
            cursor.execute(
                f"INSERT INTO mumineens ({columns}) VALUES ({placeholders})",
                tuple(fields.values()),
            )
            conn.commit()
        finally:
            conn.close()
        logger.info("ITS %s registered mumineen %s", current_user.get("its_id"), data.its_id)
        await AuditService.record(current_user.get("its_id"), "create", AuditObjectType.MUMINEEN, data.its_id)
        return await cls.get(data.its_id)

    @classmethod
    async def update(cls, its_id: int, updates: Dict[str, Any], current_user: dict) -> MumineenRead:
        """Apply a partial update.  Raises ``ValueError`` when the attendee does not exist."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if not cursor.execute("SELECT 1 FROM mumineens WHERE its_id = ?", (its_id,)).fetchone():
                raise ValueError("Mumineen not found")
            group_id = updates.get("hizbe_saifee_group_id")
            if group_id is not None and not cursor.execute(
                "SELECT 1 FROM hizbe_saifee_groups WHERE id = ?", (group_id,)
            ).fetchone():
                raise ValueError(f"Hizbe Saifee group {group_id} not found")
            if updates:
                assignments = ", ".join(f"{k} = ?" for k in updates)
                params = [_db_value(v) for v in updates.values()] + [its_id]
                cursor.execute(
                    f"UPDATE mumineens SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE its_id = ?",
                    tuple(params),
                )
                conn.commit()
        finally:
            conn.close()
        await AuditService.record(current_user.get("its_id"), "update", AuditObjectType.MUMINEEN, its_id, updates)
        return await cls.get(its_id)

    @classmethod
    async def delete(cls, its_id: int, current_user: dict) -> None:
        """Delete an attendee and its pass preferences in one transaction."""
        with transaction() as conn:
            cursor = conn.cursor()
            if not cursor.execute("SELECT 1 FROM mumineens WHERE its_id = ?", (its_id,)).fetchone():
                raise ValueError("Mumineen not found")
            cursor.execute("DELETE FROM pass_preferences WHERE its_id = ?", (its_id,))
            cursor.execute("DELETE FROM mumineens WHERE its_id = ?", (its_id,))
        await AuditService.record(current_user.get("its_id"), "delete", AuditObjectType.MUMINEEN, its_id)

    @classmethod
    async def family_with_passes(cls, its_id: int, event_id: int) -> List[FamilyMemberRead]:
        """Household members older than five with their pass preferences for ``event_id``.

        Raises ``ValueError`` when the caller is not registered.
        """
        household = await FamilyService.resolve_household(its_id)
        if not household:
            raise ValueError("Mumineen not found")
        ids = sorted(household)
        marks = ", ".join("?" for _ in ids)
        conn = get_connection()
        try:
            rows = conn.execute(
                f"SELECT * FROM mumineens WHERE its_id IN ({marks}) AND age > ? ORDER BY its_id",
                (*ids, FAMILY_MIN_AGE),
            ).fetchall()
            return cls._attach_passes(conn, rows, event_id)
        finally:
            conn.close()

    @classmethod
    async def all_with_passes(cls, event_id: int) -> List[FamilyMemberRead]:
        """Every attendee with its pass preferences for ``event_id``."""
        conn = get_connection()
        try:
            if not conn.execute("SELECT 1 FROM events WHERE id = ?", (event_id,)).fetchone():
                raise ValueError(f"Event {event_id} not found")
            rows = conn.execute("SELECT * FROM mumineens ORDER BY its_id").fetchall()
            return cls._attach_passes(conn, rows, event_id)
        finally:
            conn.close()

    @staticmethod
    def _attach_passes(
        conn: sqlite3.Connection, rows: List[sqlite3.Row], event_id: Optional[int]
    ) -> List[FamilyMemberRead]:
        prefs: Dict[int, list] = {}
        for p in conn.execute(PASS_PREFERENCE_SELECT + " WHERE pp.event_id = ? ORDER BY pp.id", (event_id,)):
            prefs.setdefault(p["its_id"], []).append(row_to_pass_preference(p))
        return [
            FamilyMemberRead(**_row_to_dict(r), pass_preferences=prefs.get(r["its_id"], []))
            for r in rows
        ]
