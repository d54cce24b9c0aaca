"""
Audit trail of writes to the registry, events and passes.

Services record an entry after their own write has committed.  Only
administrators may read the trail.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional

from miqaat_api.app.core.db import get_connection
from miqaat_api.app.core.enums import AuditObjectType

logger = logging.getLogger(__name__)

# Filter column -> SQL condition, applied in this order.
_FILTERS = (
    ("its_id", "its_id = ?"),
    ("object_type", "object_type = ?"),
    ("action", "action = ?"),
    ("start_date", "timestamp >= ?"),
    ("end_date", "timestamp <= ?"),
)


def _row_to_log(row: sqlite3.Row) -> Dict[str, Any]:
    entry = dict(row)
    if entry["details"]:
        try:
            entry["details"] = json.loads(entry["details"])
        except json.JSONDecodeError:
            pass
    return entry


class AuditService:

    @classmethod
    async def record(
        cls,
        its_id: Optional[int],
        action: str,
        object_type: AuditObjectType,
        object_id: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Write one audit entry; a storage failure is logged, not raised."""
        object_type = AuditObjectType(object_type)
        conn = get_connection()
        try:
            conn.execute(
                "INSERT INTO audit_logs (its_id, action, object_type, object_id, details) VALUES (?, ?, ?, ?, ?)",
                (its_id, action, object_type.value, object_id, json.dumps(details, default=str) if details else None),
            )
            conn.commit()
        except sqlite3.Error as e:
            logger.warning("Failed to write audit log for %s %s %s: %s", action, object_type.value, object_id, e)
        finally:
            conn.close()

    @classmethod
    async def list_logs(cls, limit: int = 100, offset: int = 0, **filters: Any) -> List[Dict[str, Any]]:
        """Return audit entries newest first.

        ``filters`` may hold ``its_id``, ``object_type``, ``action``,
        ``start_date`` and ``end_date`` (ISO dates).  ``None`` values
        are ignored.
        """
        clauses: List[str] = []
        params: List[Any] = []
        for name, clause in _FILTERS:
            value = filters.get(name)
            if value is None or value == "":
                continue
            clauses.append(clause)
            params.append(value.value if isinstance(value, AuditObjectType) else value)

        query = "SELECT id, its_id, action, object_type, object_id, timestamp, details FROM audit_logs"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY timestamp DESC, id DESC LIMIT ? OFFSET ?"
        conn = get_connection()
        try:
            rows = conn.execute(query, (*params, limit, offset)).fetchall()
        finally:
            conn.close()
        return [_row_to_log(r) for r in rows]
