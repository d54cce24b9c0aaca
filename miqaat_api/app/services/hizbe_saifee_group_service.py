"""
Business logic for Hizbe Saifee groups.

Groups are created and updated in batches.  ``group_no`` must be unique
both inside a batch and against the stored groups; a clash rejects the
whole batch.
"""

import logging
import sqlite3
from typing import List, Optional

from miqaat_api.app.core.db import get_connection, transaction
from miqaat_api.app.core.enums import AuditObjectType
from miqaat_api.app.core.exceptions import ConflictError
from miqaat_api.app.schemas.hizbe_saifee_group import (
    HizbeSaifeeGroupCreate,
    HizbeSaifeeGroupRead,
    HizbeSaifeeGroupUpdate,
)
from miqaat_api.app.services.audit_service import AuditService

logger = logging.getLogger(__name__)

COLUMNS = "id, name, capacity, group_no, whatsapp_link"


def _link(value) -> Optional[str]:
    return str(value) if value is not None else None


class HizbeSaifeeGroupService:
    @staticmethod
    def _fetch(cursor: sqlite3.Cursor, group_id: int) -> HizbeSaifeeGroupRead:
        row = cursor.execute(
            f"SELECT {COLUMNS} FROM hizbe_saifee_groups WHERE id = ?", (group_id,)
        ).fetchone()
        if not row:
            raise ValueError(f"Hizbe Saifee group {group_id} not found")
        return HizbeSaifeeGroupRead(**dict(row))

    @classmethod
    async def list_groups(cls) -> List[HizbeSaifeeGroupRead]:
        conn = get_connection()
        try:
            rows = conn.execute(f"SELECT {COLUMNS} FROM hizbe_saifee_groups ORDER BY group_no").fetchall()
            return [HizbeSaifeeGroupRead(**dict(r)) for r in rows]
        finally:
            conn.close()

    @classmethod
    async def get_group(cls, group_id: int) -> HizbeSaifeeGroupRead:
        conn = get_connection()
        try:
            return cls._fetch(conn.cursor(), group_id)
        finally:
            conn.close()

    @classmethod
    async def create_groups(
        cls, items: List[HizbeSaifeeGroupCreate], current_user: dict
    ) -> List[HizbeSaifeeGroupRead]:
        numbers = [item.group_no for item in items]
        if len(numbers) != len(set(numbers)):
            raise ConflictError("Duplicate group_no found in the request batch.")
        created: List[HizbeSaifeeGroupRead] = []
        with transaction() as conn:
            cursor = conn.cursor()
            marks = ", ".join("?" for _ in numbers)
            taken = [
                r["group_no"]
                for r in cursor.execute(
                    f"SELECT group_no FROM hizbe_saifee_groups WHERE group_no IN ({marks})", tuple(numbers)
                )
            ]
            if taken:
                raise ConflictError(
                    f"The following group_no already exist: {', '.join(str(n) for n in sorted(taken))}."
                )
            for item in items:
                cursor.execute(
                    "INSERT INTO hizbe_saifee_groups (name, capacity, group_no, whatsapp_link) VALUES (?, ?, ?, ?)",
                    (item.name, item.capacity, item.group_no, _link(item.whatsapp_link)),
                )
                created.append(cls._fetch(cursor, cursor.lastrowid))
        logger.info("Created %s Hizbe Saifee groups", len(created))
        await AuditService.record(
            current_user.get("its_id"), "create", AuditObjectType.HIZBE_SAIFEE_GROUP, details={"group_nos": numbers}
        )
        return created

    @classmethod
    async def update_groups(
        cls, items: List[HizbeSaifeeGroupUpdate], current_user: dict
    ) -> List[HizbeSaifeeGroupRead]:
        """Apply partial updates to several groups at once, all or nothing."""
        batch_numbers = {}
        for item in items:
            if item.group_no is None:
                continue
            other = batch_numbers.get(item.group_no)
            if other is not None and other != item.id:
                raise ConflictError(f"Duplicate group_no '{item.group_no}' found in the request batch for different IDs.")
            batch_numbers[item.group_no] = item.id

        updated: List[HizbeSaifeeGroupRead] = []
        with transaction() as conn:
            cursor = conn.cursor()
            for item in items:
                cls._fetch(cursor, item.id)
                fields = item.model_dump(exclude_none=True, exclude={"id"})
                if "group_no" in fields:
                    clash = cursor.execute(
                        "SELECT id FROM hizbe_saifee_groups WHERE group_no = ? AND id != ?",
                        (fields["group_no"], item.id),
                    ).fetchone()
                    if clash:
                        raise ConflictError(
                            f"Group_no '{fields['group_no']}' already exists for another group (ID: {clash['id']})."
                        )
                if "whatsapp_link" in fields:
                    fields["whatsapp_link"] = _link(item.whatsapp_link)
                if fields:
                    assignments = ", ".join(f"{k} = ?" for k in fields)
                    cursor.execute(
                        f"UPDATE hizbe_saifee_groups SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                        (*fields.values(), item.id),
                    )
            for item in items:
                updated.append(cls._fetch(cursor, item.id))
        await AuditService.record(
            current_user.get("its_id"), "update", AuditObjectType.HIZBE_SAIFEE_GROUP, details={"ids": [i.id for i in items]}
        )
        return updated

    @classmethod
    async def delete_group(cls, group_id: int, current_user: dict) -> None:
        """Delete a group.  Members keep their registry record with no group."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM hizbe_saifee_groups WHERE id = ?", (group_id,))
            if cursor.rowcount == 0:
                raise ValueError(f"Hizbe Saifee group {group_id} not found")
            conn.commit()
        finally:
            conn.close()
        await AuditService.record(current_user.get("its_id"), "delete", AuditObjectType.HIZBE_SAIFEE_GROUP, group_id)
