"""Business logic for blocks (seating sections of a vaaz center)."""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from miqaat_api.app.core.db import get_connection
from miqaat_api.app.core.enums import AuditObjectType
from miqaat_api.app.schemas.block import BlockCreate, BlockRead
from miqaat_api.app.services.audit_service import AuditService

logger = logging.getLogger(__name__)

COLUMNS = "id, vaaz_center_id, type, capacity, min_age, max_age, gender"


def _db_value(value: Any) -> Any:
    return getattr(value, "value", value)


class BlockService:
    @staticmethod
    def _check_center(cursor: sqlite3.Cursor, vaaz_center_id: Optional[int]) -> None:
        if vaaz_center_id is not None and not cursor.execute(
            "SELECT 1 FROM vaaz_centers WHERE id = ?", (vaaz_center_id,)
        ).fetchone():
            raise ValueError(f"Vaaz Center {vaaz_center_id} not found")

    @classmethod
    async def create(cls, data: BlockCreate, current_user: dict) -> BlockRead:
        fields = {k: _db_value(v) for k, v in data.model_dump().items()}
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._check_center(cursor, data.vaaz_center_id)
            cursor.execute(
                f"INSERT INTO blocks ({', '.join(fields)}) VALUES ({', '.join('?' for _ in fields)})",
                tuple(fields.values()),
            )
            block_id = cursor.lastrowid
            conn.commit()
        finally:
            conn.close()
        await AuditService.record(current_user.get("its_id"), "create", AuditObjectType.BLOCK, block_id, {"type": data.type})
        return await cls.get(block_id)

    @classmethod
    async def list_blocks(cls, vaaz_center_id: Optional[int] = None) -> List[BlockRead]:
        conn = get_connection()
        try:
            if vaaz_center_id is not None:
                rows = conn.execute(
                    f"SELECT {COLUMNS} FROM blocks WHERE vaaz_center_id = ? ORDER BY id", (vaaz_center_id,)
                ).fetchall()
            else:
                rows = conn.execute(f"SELECT {COLUMNS} FROM blocks ORDER BY id").fetchall()
            return [BlockRead(**dict(r)) for r in rows]
        finally:
            conn.close()

    @classmethod
    async def get(cls, block_id: int) -> BlockRead:
        conn = get_connection()
        try:
            row = conn.execute(f"SELECT {COLUMNS} FROM blocks WHERE id = ?", (block_id,)).fetchone()
            if not row:
                raise ValueError("Block not found")
            return BlockRead(**dict(row))
        finally:
            conn.close()

    @classmethod
    async def update(cls, block_id: int, updates: Dict[str, Any], current_user: dict) -> BlockRead:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if not cursor.execute("SELECT 1 FROM blocks WHERE id = ?", (block_id,)).fetchone():
                raise ValueError("Block not found")
            cls._check_center(cursor, updates.get("vaaz_center_id"))
            if updates:
                assignments = ", ".join(f"{k} = ?" for k in updates)
                cursor.execute(
                    f"UPDATE blocks SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*[_db_value(v) for v in updates.values()], block_id),
                )
                conn.commit()
        finally:
            conn.close()
        await AuditService.record(current_user.get("its_id"), "update", AuditObjectType.BLOCK, block_id, updates)
        return await cls.get(block_id)

    @classmethod
    async def delete(cls, block_id: int, current_user: dict) -> None:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM blocks WHERE id = ?", (block_id,))
            if cursor.rowcount == 0:
                raise ValueError("Block not found")
            conn.commit()
        finally:
            conn.close()
        await AuditService.record(current_user.get("its_id"), "delete", AuditObjectType.BLOCK, block_id)
