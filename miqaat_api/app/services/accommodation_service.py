"""
Business logic for accommodations.

Accommodations belong to one attendee for one miqaat.  Attendees see
and manage the accommodations of their own household only: every
operation runs ``FamilyService`` against the record's ``its_id`` (and
the new ``its_id`` on reassignment) before touching the row.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from miqaat_api.app.core.db import get_connection, transaction
from miqaat_api.app.core.enums import AuditObjectType
from miqaat_api.app.core.exceptions import FamilyAccessError
from miqaat_api.app.schemas.accommodation import AccommodationCreate, AccommodationRead
from miqaat_api.app.services.audit_service import AuditService
from miqaat_api.app.services.family_service import FamilyService

logger = logging.getLogger(__name__)

COLUMNS = "id, miqaat_id, its_id, type, name, address"


class AccommodationService:
    """Household-scoped CRUD for the ``accommodations`` table."""

    @staticmethod
    def _fetch(cursor: sqlite3.Cursor, accommodation_id: int) -> sqlite3.Row:
        row = cursor.execute(
            f"SELECT {COLUMNS} FROM accommodations WHERE id = ?", (accommodation_id,)
        ).fetchone()
        if not row:
            raise ValueError("Accommodation not found")
        return row

    @staticmethod
    def _check_miqaat(cursor: sqlite3.Cursor, miqaat_id: Optional[int]) -> None:
        if miqaat_id is not None and not cursor.execute(
            "SELECT 1 FROM miqaats WHERE id = ?", (miqaat_id,)
        ).fetchone():
            raise ValueError(f"Miqaat {miqaat_id} not found")

    @classmethod
    async def list_accommodations(
        cls,
        requester_its_id: int,
        its_id: Optional[int] = None,
        miqaat_id: Optional[int] = None,
        type: Optional[str] = None,
    ) -> List[AccommodationRead]:
        """List accommodations of one household member or of the whole household.

        An explicit ``its_id`` outside the household raises
        ``FamilyAccessError``; so does a caller without a registry
        record.
        """
        household = await FamilyService.resolve_household(requester_its_id)
        if its_id is not None:
            if not FamilyService.is_family_member(household, its_id):
                raise FamilyAccessError("You are not authorized to view accommodations for this ITS ID.")
            ids = [its_id]
        else:
            if not household:
                raise FamilyAccessError("Could not determine family ITS IDs for authorization.")
            ids = sorted(household)
        query = f"SELECT {COLUMNS} FROM accommodations WHERE its_id IN ({', '.join('?' for _ in ids)})"
        params: List[Any] = list(ids)
        if miqaat_id is not None:
            query += " AND miqaat_id = ?"
            params.append(miqaat_id)
        if type:
            query += " AND type = ?"
            params.append(type)
        conn = get_connection()
        try:
            rows = conn.execute(query + " ORDER BY id", tuple(params)).fetchall()
            return [AccommodationRead(**dict(r)) for r in rows]
        finally:
            conn.close()

    @classmethod
    async def create(cls, data: AccommodationCreate, requester_its_id: int) -> AccommodationRead:
        with transaction() as conn:
            await FamilyService.ensure_family_member(requester_its_id, data.its_id, conn=conn)
            cursor = conn.cursor()
            cls._check_miqaat(cursor, data.miqaat_id)
            cursor.execute(
                "INSERT INTO accommodations (miqaat_id, its_id, type, name, address) VALUES (?, ?, ?, ?, ?)",
                (data.miqaat_id, data.its_id, data.type, data.name, data.address),
            )
            accommodation_id = cursor.lastrowid
            created = AccommodationRead(**dict(cls._fetch(cursor, accommodation_id)))
        await AuditService.record(requester_its_id, "create", AuditObjectType.ACCOMMODATION, accommodation_id, {"its_id": data.its_id})
        return created

    @classmethod
    async def get(cls, accommodation_id: int, requester_its_id: int) -> AccommodationRead:
        conn = get_connection()
        try:
            row = cls._fetch(conn.cursor(), accommodation_id)
        finally:
            conn.close()
        await FamilyService.ensure_family_member(requester_its_id, row["its_id"])
        return AccommodationRead(**dict(row))

    @classmethod
    async def update(
        cls, accommodation_id: int, updates: Dict[str, Any], requester_its_id: int
    ) -> AccommodationRead:
        """Apply a partial update.

        The caller must be in the household of the current owner and,
        when ``its_id`` changes, of the new owner as well.
        """
        with transaction() as conn:
            cursor = conn.cursor()
            row = cls._fetch(cursor, accommodation_id)
            household = await FamilyService.ensure_family_member(requester_its_id, row["its_id"], conn=conn)
            new_owner = updates.get("its_id")
            if new_owner is not None and new_owner != row["its_id"]:
                if not FamilyService.is_family_member(household, new_owner):
                    raise FamilyAccessError("You are not authorized to assign this accommodation to the target ITS ID.")
            else:
                updates.pop("its_id", None)
            cls._check_miqaat(cursor, updates.get("miqaat_id"))
            if updates:
                assignments = ", ".join(f"{k} = ?" for k in updates)
                cursor.execute(
                    f"UPDATE accommodations SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*updates.values(), accommodation_id),
                )
            updated = AccommodationRead(**dict(cls._fetch(cursor, accommodation_id)))
        await AuditService.record(requester_its_id, "update", AuditObjectType.ACCOMMODATION, accommodation_id, updates)
        return updated

    @classmethod
    async def delete(cls, accommodation_id: int, requester_its_id: int) -> None:
        with transaction() as conn:
            cursor = conn.cursor()
            row = cls._fetch(cursor, accommodation_id)
            await FamilyService.ensure_family_member(requester_its_id, row["its_id"], conn=conn)
            cursor.execute("DELETE FROM accommodations WHERE id = ?", (accommodation_id,))
        await AuditService.record(requester_its_id, "delete", AuditObjectType.ACCOMMODATION, accommodation_id)
