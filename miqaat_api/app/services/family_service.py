"""
Household resolution for family-scoped authorization.

An attendee's household is everyone sharing its head of family (HoF).
The head is the attendee's own ``hof_id`` when set, otherwise the
attendee itself.  Endpoints that expose per-attendee data
(accommodations, pass preferences, family rosters) use
``FamilyService.ensure_family_member`` before touching any row and
answer 403 when it fails, so unrelated callers cannot probe which ITS
ids exist.
"""

import logging
import sqlite3
from typing import Optional, Set

from miqaat_api.app.core.db import get_connection
from miqaat_api.app.core.exceptions import FamilyAccessError

logger = logging.getLogger(__name__)


class FamilyService:
    """Resolve households from the ``mumineens`` table."""

    @classmethod
    def _resolve(cls, cursor: sqlite3.Cursor, its_id: int) -> Set[int]:
        row = cursor.execute(
            "SELECT its_id, hof_id FROM mumineens WHERE its_id = ?",
            (its_id,),
        ).fetchone()
        if not row:
            return set()
        head_id = row["hof_id"] if row["hof_id"] is not None else row["its_id"]
        rows = cursor.execute(
            "SELECT its_id FROM mumineens WHERE hof_id = ? OR its_id = ?",
            (head_id, head_id),
        ).fetchall()
        household = {r["its_id"] for r in rows}
        household.add(row["its_id"])
        return household

    @classmethod
    async def resolve_household(cls, its_id: int, conn: Optional[sqlite3.Connection] = None) -> Set[int]:
        """Return the ITS ids of ``its_id``'s household, itself included.

        An unknown ``its_id`` yields an empty set.  Pass ``conn`` to run
        the lookup on an already open connection (e.g. inside a
        transaction).
        """
        if conn is not None:
            return cls._resolve(conn.cursor(), its_id)
        conn = get_connection()
        try:
            return cls._resolve(conn.cursor(), its_id)
        finally:
            conn.close()

    @staticmethod
    def is_family_member(household: Set[int], target_id: int) -> bool:
        return target_id in household

    @classmethod
    async def ensure_family_member(
        cls, requester_its_id: int, target_id: int, conn: Optional[sqlite3.Connection] = None
    ) -> Set[int]:
        """Raise ``FamilyAccessError`` unless ``target_id`` is in the requester's household.

        Returns the household so callers can reuse it.  Writers pass the
        ``conn`` of their open transaction so the registry cannot change
        between the check and the write.
        """
        household = await cls.resolve_household(requester_its_id, conn=conn)
        if not cls.is_family_member(household, target_id):
            logger.info("ITS %s denied access to ITS %s", requester_its_id, target_id)
            raise FamilyAccessError(f"ITS {target_id} is not a member of your family")
        return household
