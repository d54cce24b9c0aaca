"""
Business logic for pass preferences.

A pass preference ties one attendee to an event and optionally to a
pass type, a vaaz center and a block inside that center.  Attendees
manage the preferences of their own household; administrators lock
preferences and assign centers in bulk.

Every bulk write runs inside one ``transaction()`` so a single bad item
rolls back the whole batch.  Business rule violations are raised as
``PassPreferenceError`` carrying a ``PassPreferenceErrorCode`` and the
HTTP status the endpoint should answer with.
"""

import logging
import sqlite3
from typing import Any, Iterable, List, Optional, Set, Union

from miqaat_api.app.core.db import get_connection, transaction
from miqaat_api.app.core.enums import AuditObjectType, Gender, PassPreferenceErrorCode, PassType
from miqaat_api.app.core.exceptions import FamilyAccessError, PassPreferenceError
from miqaat_api.app.schemas.pass_preference import (
    BlockSummary,
    BulkVaazCenterAssignment,
    PassPreferenceCreate,
    PassPreferenceRead,
    PassPreferenceUpdate,
    PassTypePreference,
    VaazCenterGenderSummary,
    VaazCenterPassSummary,
    VaazCenterPreference,
)
from miqaat_api.app.services.audit_service import AuditService
from miqaat_api.app.services.family_service import FamilyService

logger = logging.getLogger(__name__)

PASS_PREFERENCE_SELECT = """
    SELECT pp.id, pp.its_id, pp.event_id, pp.pass_type, pp.block_id,
           pp.vaaz_center_id, pp.is_locked, vc.name AS vaaz_center_name
    FROM pass_preferences pp
    LEFT JOIN vaaz_centers vc ON vc.id = pp.vaaz_center_id
"""

ErrorCode = PassPreferenceErrorCode


def row_to_pass_preference(row: sqlite3.Row) -> PassPreferenceRead:
    return PassPreferenceRead(
        id=row["id"],
        its_id=row["its_id"],
        event_id=row["event_id"],
        pass_type=row["pass_type"],
        block_id=row["block_id"],
        vaaz_center_id=row["vaaz_center_id"],
        vaaz_center_name=row["vaaz_center_name"],
        is_locked=bool(row["is_locked"]),
    )


def _value(v: Any) -> Any:
    return v.value if isinstance(v, (PassType, Gender)) else v


def _availability(capacity: Optional[int], issued: int, unset: str) -> Union[int, str]:
    if capacity is None:
        return unset
    if capacity > 0:
        return capacity - issued
    return 0


class PassPreferenceService:
    """Create, update and summarise pass preferences."""

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------

    @staticmethod
    def _event_exists(cursor: sqlite3.Cursor, event_id: int) -> bool:
        return cursor.execute("SELECT 1 FROM events WHERE id = ?", (event_id,)).fetchone() is not None

    @staticmethod
    def _vaaz_center(cursor: sqlite3.Cursor, vaaz_center_id: int) -> Optional[sqlite3.Row]:
        return cursor.execute(
            "SELECT id, event_id, name, est_capacity, male_capacity, female_capacity FROM vaaz_centers WHERE id = ?",
            (vaaz_center_id,),
        ).fetchone()

    @staticmethod
    def _block(cursor: sqlite3.Cursor, block_id: int) -> Optional[sqlite3.Row]:
        return cursor.execute(
            """
            SELECT b.id, b.vaaz_center_id, b.capacity, vc.event_id
            FROM blocks b LEFT JOIN vaaz_centers vc ON vc.id = b.vaaz_center_id
            WHERE b.id = ?
            """,
            (block_id,),
        ).fetchone()

    @staticmethod
    def _find(cursor: sqlite3.Cursor, its_id: int, event_id: Optional[int] = None) -> Optional[sqlite3.Row]:
        if event_id is None:
            return cursor.execute(
                PASS_PREFERENCE_SELECT + " WHERE pp.its_id = ? ORDER BY pp.id LIMIT 1",
                (its_id,),
            ).fetchone()
        return cursor.execute(
            PASS_PREFERENCE_SELECT + " WHERE pp.its_id = ? AND pp.event_id = ?",
            (its_id, event_id),
        ).fetchone()

    @classmethod
    def _get_by_id(cls, cursor: sqlite3.Cursor, pref_id: int) -> PassPreferenceRead:
        row = cursor.execute(PASS_PREFERENCE_SELECT + " WHERE pp.id = ?", (pref_id,)).fetchone()
        return row_to_pass_preference(row)

    # ------------------------------------------------------------------
    # validation helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _ensure_distinct(its_ids: List[int]) -> None:
        seen: Set[int] = set()
        for its_id in its_ids:
            if its_id in seen:
                raise PassPreferenceError(
                    ErrorCode.VALIDATION_FAILED.value,
                    f"ITS {its_id} appears more than once in the request.",
                    details={"its_id": its_id},
                )
            seen.add(its_id)

    @staticmethod
    async def _ensure_household(conn: sqlite3.Connection, requester_its_id: int, its_ids: Iterable[int]) -> None:
        """Family check run on the writer's transaction, before any row is touched."""
        household = await FamilyService.resolve_household(requester_its_id, conn=conn)
        for its_id in its_ids:
            if not FamilyService.is_family_member(household, its_id):
                logger.info("ITS %s denied pass preference access to ITS %s", requester_its_id, its_id)
                raise FamilyAccessError("Authorization failed for one or more ITS numbers.")

    @classmethod
    def _check_placement(
        cls,
        cursor: sqlite3.Cursor,
        its_id: int,
        event_id: int,
        vaaz_center_id: Optional[int],
        block_id: Optional[int],
    ) -> None:
        """Check that the center and block exist and belong to ``event_id``.

        When both are given the block must also sit inside the center.
        """
        if vaaz_center_id is not None:
            center = cls._vaaz_center(cursor, vaaz_center_id)
            if center is None:
                raise PassPreferenceError(
                    ErrorCode.VALIDATION_FAILED.value,
                    f"Vaaz Center {vaaz_center_id} does not exist.",
                    details={"vaaz_center_id": vaaz_center_id},
                )
            if center["event_id"] != event_id:
                raise PassPreferenceError(
                    ErrorCode.VAAZ_CENTER_EVENT_MISMATCH.value,
                    f"The selected Vaaz Center does not belong to the specified event for ITS {its_id}.",
                    details={"its_id": its_id, "vaaz_center_id": vaaz_center_id, "event_id": event_id},
                )
        if block_id is not None:
            block = cls._block(cursor, block_id)
            if block is None:
                raise PassPreferenceError(
                    ErrorCode.VALIDATION_FAILED.value,
                    f"Block {block_id} does not exist.",
                    details={"block_id": block_id},
                )
            if block["event_id"] != event_id:
                raise PassPreferenceError(
                    ErrorCode.BLOCK_EVENT_MISMATCH.value,
                    f"The selected Block does not belong to the specified event for ITS {its_id}.",
                    details={"its_id": its_id, "block_id": block_id, "event_id": event_id},
                )
            if vaaz_center_id is not None and block["vaaz_center_id"] != vaaz_center_id:
                raise PassPreferenceError(
                    ErrorCode.BLOCK_VAAZ_CENTER_MISMATCH.value,
                    f"The selected Block does not belong to the specified Vaaz Center for ITS {its_id}.",
                    details={"its_id": its_id, "block_id": block_id, "vaaz_center_id": vaaz_center_id},
                )

    @classmethod
    def _check_capacity(
        cls,
        cursor: sqlite3.Cursor,
        its_id: int,
        vaaz_center_id: Optional[int],
        block_id: Optional[int],
    ) -> None:
        """Reject a new pass in a full center or block.  Capacity 0 means unlimited."""
        if vaaz_center_id is not None:
            center = cls._vaaz_center(cursor, vaaz_center_id)
            if center and center["est_capacity"] and center["est_capacity"] > 0:
                issued = cursor.execute(
                    "SELECT COUNT(*) AS c FROM pass_preferences WHERE vaaz_center_id = ?",
                    (vaaz_center_id,),
                ).fetchone()["c"]
                if issued >= center["est_capacity"]:
                    raise PassPreferenceError(
                        ErrorCode.VAAZ_CENTER_FULL.value,
                        f"Selected Vaaz Center is full for ITS {its_id}.",
                        details={"its_id": its_id, "vaaz_center_id": vaaz_center_id},
                    )
        if block_id is not None:
            block = cls._block(cursor, block_id)
            if block and block["capacity"] and block["capacity"] > 0:
                issued = cursor.execute(
                    "SELECT COUNT(*) AS c FROM pass_preferences WHERE block_id = ?",
                    (block_id,),
                ).fetchone()["c"]
                if issued >= block["capacity"]:
                    raise PassPreferenceError(
                        ErrorCode.BLOCK_FULL.value,
                        f"Selected block is full for ITS {its_id}.",
                        details={"its_id": its_id, "block_id": block_id},
                    )

    @staticmethod
    def _gender_issued(cursor: sqlite3.Cursor, vaaz_center_id: int, event_id: int, gender: str) -> int:
        return cursor.execute(
            """
            SELECT COUNT(*) AS c
            FROM pass_preferences pp JOIN mumineens m ON m.its_id = pp.its_id
            WHERE pp.vaaz_center_id = ? AND pp.event_id = ? AND LOWER(m.gender) = ?
            """,
            (vaaz_center_id, event_id, gender),
        ).fetchone()["c"]

    @classmethod
    def _check_gender_capacity(
        cls,
        cursor: sqlite3.Cursor,
        its_id: int,
        event_id: int,
        center: sqlite3.Row,
    ) -> None:
        """Reject placing ``its_id`` in ``center`` when its gender has no room.

        Only ``male`` and ``female`` attendees can be placed; a center
        with no capacity set for the attendee's gender accepts nobody of
        that gender.
        """
        row = cursor.execute("SELECT gender FROM mumineens WHERE its_id = ?", (its_id,)).fetchone()
        if row is None:
            raise PassPreferenceError(
                ErrorCode.RESOURCE_NOT_FOUND.value,
                f"Mumineen record not found for ITS {its_id}.",
                status_code=404,
                details={"its_id": its_id, "resource_type": "Mumineen"},
            )
        gender = (row["gender"] or "").lower()
        if gender not in (Gender.MALE.value, Gender.FEMALE.value):
            shown = gender or "unspecified"
            raise PassPreferenceError(
                ErrorCode.VAAZ_CENTER_CAPACITY_GENDER_UNSUPPORTED.value,
                f"Vaaz Center {center['id']} does not support pass preferences for gender '{shown}' (ITS {its_id}).",
                details={"its_id": its_id, "gender": shown, "vaaz_center_id": center["id"]},
            )
        capacity = center[f"{gender}_capacity"]
        details = {"its_id": its_id, "vaaz_center_id": center["id"], "gender": gender}
        if not capacity:
            raise PassPreferenceError(
                ErrorCode.VAAZ_CENTER_CAPACITY_GENDER_UNAVAILABLE.value,
                f"Vaaz Center {center['id']} has no defined capacity for {gender}s (ITS {its_id}).",
                details=details,
            )
        if cls._gender_issued(cursor, center["id"], event_id, gender) >= capacity:
            raise PassPreferenceError(
                ErrorCode.VAAZ_CENTER_FULL.value,
                f"Vaaz Center {center['id']} is full for {gender}s (ITS {its_id}).",
                details=details,
            )

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    @classmethod
    async def list_for_household(cls, its_id: int) -> List[PassPreferenceRead]:
        """Return the pass preferences of every member of ``its_id``'s household.

        Raises ``ValueError`` when the caller has no household or the
        household has no preferences yet.
        """
        household = await FamilyService.resolve_household(its_id)
        if not household:
            raise ValueError("Could not determine family members.")
        conn = get_connection()
        try:
            ids = sorted(household)
            marks = ", ".join("?" for _ in ids)
            rows = conn.execute(
                PASS_PREFERENCE_SELECT + f" WHERE pp.its_id IN ({marks}) ORDER BY pp.event_id, pp.its_id",
                tuple(ids),
            ).fetchall()
        finally:
            conn.close()
        if not rows:
            raise ValueError("No pass preferences found for this family.")
        return [row_to_pass_preference(r) for r in rows]

    @classmethod
    async def summary(cls, event_id: int, vaaz_center_id: Optional[int] = None) -> List[VaazCenterPassSummary]:
        """Issued passes and availability per vaaz center and block of an event.

        A center or block with capacity 0 is reported as ``"unlimited"``.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            centers = cls._centers_for_event(cursor, event_id, vaaz_center_id)
            result: List[VaazCenterPassSummary] = []
            for center in centers:
                issued = cursor.execute(
                    "SELECT COUNT(*) AS c FROM pass_preferences WHERE vaaz_center_id = ?",
                    (center["id"],),
                ).fetchone()["c"]
                capacity = center["est_capacity"] or 0
                blocks: List[BlockSummary] = []
                block_rows = cursor.execute(
                    """
                    SELECT b.id, b.type, b.capacity, b.gender, b.min_age, b.max_age,
                           (SELECT COUNT(*) FROM pass_preferences pp WHERE pp.block_id = b.id) AS issued
                    FROM blocks b WHERE b.vaaz_center_id = ? ORDER BY b.id
                    """,
                    (center["id"],),
                ).fetchall()
                for b in block_rows:
                    block_capacity = b["capacity"] or 0
                    blocks.append(
                        BlockSummary(
                            id=b["id"],
                            type=b["type"],
                            capacity=block_capacity,
                            gender=b["gender"],
                            min_age=b["min_age"],
                            max_age=b["max_age"],
                            block_issued_passes=b["issued"],
                            block_availability=block_capacity - b["issued"] if block_capacity > 0 else "unlimited",
                        )
                    )
                result.append(
                    VaazCenterPassSummary(
                        id=center["id"],
                        name=center["name"],
                        vaaz_center_capacity=capacity,
                        vaaz_center_issued_passes=issued,
                        vaaz_center_availability=capacity - issued if capacity > 0 else "unlimited",
                        blocks=blocks,
                    )
                )
            return result
        finally:
            conn.close()

    @classmethod
    async def vaaz_center_summary(
        cls, event_id: int, vaaz_center_id: Optional[int] = None
    ) -> List[VaazCenterGenderSummary]:
        """Total, male and female capacity, issued passes and availability per center.

        Capacities that were never set are reported as ``"Not Set"``.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            centers = cls._centers_for_event(cursor, event_id, vaaz_center_id)
            result: List[VaazCenterGenderSummary] = []
            for center in centers:
                total = cursor.execute(
                    "SELECT COUNT(*) AS c FROM pass_preferences WHERE vaaz_center_id = ?",
                    (center["id"],),
                ).fetchone()["c"]
                male = cls._gender_issued(cursor, center["id"], event_id, Gender.MALE.value)
                female = cls._gender_issued(cursor, center["id"], event_id, Gender.FEMALE.value)
                result.append(
                    VaazCenterGenderSummary(
                        id=center["id"],
                        name=center["name"],
                        total_capacity=center["est_capacity"] if center["est_capacity"] is not None else "Not Set",
                        total_issued_passes=total,
                        total_availability=_availability(center["est_capacity"], total, "unlimited"),
                        male_capacity=center["male_capacity"] if center["male_capacity"] is not None else "Not Set",
                        male_issued_passes=male,
                        male_availability=_availability(center["male_capacity"], male, "Not Set"),
                        female_capacity=center["female_capacity"] if center["female_capacity"] is not None else "Not Set",
                        female_issued_passes=female,
                        female_availability=_availability(center["female_capacity"], female, "Not Set"),
                    )
                )
            return result
        finally:
            conn.close()

    @classmethod
    def _centers_for_event(
        cls, cursor: sqlite3.Cursor, event_id: int, vaaz_center_id: Optional[int]
    ) -> List[sqlite3.Row]:
        if not cls._event_exists(cursor, event_id):
            raise ValueError(f"Event {event_id} not found")
        query = (
            "SELECT id, name, est_capacity, male_capacity, female_capacity FROM vaaz_centers WHERE event_id = ?"
        )
        params: List[Any] = [event_id]
        if vaaz_center_id is not None:
            query += " AND id = ?"
            params.append(vaaz_center_id)
        rows = cursor.execute(query + " ORDER BY id", tuple(params)).fetchall()
        if vaaz_center_id is not None and not rows:
            raise ValueError("The specified Vaaz Center was not found for the given event.")
        return rows

    @staticmethod
    def pass_types() -> List[str]:
        return [p.value for p in PassType]

    # ------------------------------------------------------------------
    # household writes
    # ------------------------------------------------------------------

    @classmethod
    async def create_bulk(
        cls, items: List[PassPreferenceCreate], requester_its_id: int
    ) -> List[PassPreferenceRead]:
        """Create one preference per item, all or nothing.

        Every ``its_id`` must be distinct, in the requester's household
        and without a preference for the event yet.  Center and block
        must belong to the event (and the block to the center) and still
        have room.
        """
        its_ids = [item.its_id for item in items]
        cls._ensure_distinct(its_ids)

        created: List[PassPreferenceRead] = []
        with transaction() as conn:
            await cls._ensure_household(conn, requester_its_id, its_ids)
            cursor = conn.cursor()
            for item in items:
                if not cls._event_exists(cursor, item.event_id):
                    raise PassPreferenceError(
                        ErrorCode.VALIDATION_FAILED.value,
                        f"Event {item.event_id} does not exist.",
                        details={"event_id": item.event_id},
                    )
                existing = cls._find(cursor, item.its_id, item.event_id)
                if existing is not None:
                    state = "is locked and cannot be changed" if existing["is_locked"] else "already exists"
                    raise PassPreferenceError(
                        ErrorCode.ITS_ID_ALREADY_EXISTS_FOR_EVENT.value,
                        f"A pass preference for ITS {item.its_id} {state}. Use the update endpoint instead.",
                        details={"its_id": item.its_id, "event_id": item.event_id},
                    )
                cls._check_placement(cursor, item.its_id, item.event_id, item.vaaz_center_id, item.block_id)
                cls._check_capacity(cursor, item.its_id, item.vaaz_center_id, item.block_id)
                cursor.execute(
                    """
                    INSERT INTO pass_preferences (its_id, event_id, pass_type, block_id, vaaz_center_id)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (item.its_id, item.event_id, _value(item.pass_type), item.block_id, item.vaaz_center_id),
                )
                created.append(cls._get_by_id(cursor, cursor.lastrowid))
        logger.info("ITS %s created %s pass preferences", requester_its_id, len(created))
        await AuditService.record(
            requester_its_id, "create", AuditObjectType.PASS_PREFERENCE, details={"its_ids": its_ids}
        )
        return created

    @classmethod
    async def update_bulk(cls, items: List[PassPreferenceUpdate], requester_its_id: int) -> int:
        """Update existing preferences, all or nothing.

        Only fields present in each item are written.  Locked
        preferences are rejected with 403 and missing ones with 404.
        Center and block changes follow the same placement and capacity
        rules as creation.  Returns the number of updated preferences.
        """
        with transaction() as conn:
            await cls._ensure_household(conn, requester_its_id, [item.its_id for item in items])
            cursor = conn.cursor()
            for item in items:
                fields = item.model_dump(exclude_unset=True)
                pref = cls._find(cursor, item.its_id, item.event_id)
                if pref is None:
                    raise PassPreferenceError(
                        ErrorCode.RESOURCE_NOT_FOUND.value,
                        f"Pass Preference not found for ITS: {item.its_id}.",
                        status_code=404,
                        details={"its_id": item.its_id, "event_id": item.event_id},
                    )
                if pref["is_locked"]:
                    raise PassPreferenceError(
                        ErrorCode.PASS_PREFERENCE_LOCKED.value,
                        f"Pass preference for ITS {item.its_id} is locked and cannot be updated.",
                        status_code=403,
                        details={"its_id": item.its_id},
                    )
                target_event = item.event_id if item.event_id is not None else pref["event_id"]
                cls._check_placement(
                    cursor,
                    item.its_id,
                    target_event,
                    fields.get("vaaz_center_id"),
                    fields.get("block_id"),
                )
                new_center = fields.get("vaaz_center_id")
                new_block = fields.get("block_id")
                cls._check_capacity(
                    cursor,
                    item.its_id,
                    new_center if new_center is not None and new_center != pref["vaaz_center_id"] else None,
                    new_block if new_block is not None and new_block != pref["block_id"] else None,
                )
                fields.pop("its_id", None)
                if not fields:
                    continue
                assignments = ", ".join(f"{k} = ?" for k in fields)
                params = [_value(v) for v in fields.values()] + [pref["id"]]
                try:
                    cursor.execute(
                        f"UPDATE pass_preferences SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                        tuple(params),
                    )
                except sqlite3.IntegrityError as e:
                    raise PassPreferenceError(
                        ErrorCode.ITS_ID_ALREADY_EXISTS_FOR_EVENT.value,
                        f"A pass preference for ITS {item.its_id} already exists for event {target_event}.",
                        details={"its_id": item.its_id, "event_id": target_event},
                    ) from e
        await AuditService.record(
            requester_its_id, "update", AuditObjectType.PASS_PREFERENCE, details={"its_ids": [i.its_id for i in items]}
        )
        return len(items)

    @classmethod
    async def delete(cls, its_id: int, event_id: int, requester_its_id: int) -> None:
        """Delete one preference.  The family check runs before the lookup."""
        with transaction() as conn:
            await FamilyService.ensure_family_member(requester_its_id, its_id, conn=conn)
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM pass_preferences WHERE its_id = ? AND event_id = ?",
                (its_id, event_id),
            )
            if cursor.rowcount == 0:
                raise ValueError("Pass Preference not found for the given ITS number.")
        await AuditService.record(
            requester_its_id, "delete", AuditObjectType.PASS_PREFERENCE, details={"its_id": its_id, "event_id": event_id}
        )

    @classmethod
    async def create_vaaz_center_bulk(
        cls, items: List[VaazCenterPreference], requester_its_id: int
    ) -> List[PassPreferenceRead]:
        """Create center-only preferences, enforcing gender specific capacity."""
        its_ids = [item.its_id for item in items]
        cls._ensure_distinct(its_ids)

        created: List[PassPreferenceRead] = []
        with transaction() as conn:
            await cls._ensure_household(conn, requester_its_id, its_ids)
            cursor = conn.cursor()
            for item in items:
                if not cls._event_exists(cursor, item.event_id):
                    raise PassPreferenceError(
                        ErrorCode.VALIDATION_FAILED.value,
                        f"Event {item.event_id} does not exist.",
                        details={"event_id": item.event_id},
                    )
                existing = cls._find(cursor, item.its_id, item.event_id)
                if existing is not None:
                    state = "is locked and cannot be changed" if existing["is_locked"] else "already exists"
                    raise PassPreferenceError(
                        ErrorCode.ITS_ID_ALREADY_EXISTS_FOR_EVENT.value,
                        f"Pass preference for ITS {item.its_id} and Event {item.event_id} {state}.",
                        details={"its_id": item.its_id, "event_id": item.event_id},
                    )
                center = cls._vaaz_center(cursor, item.vaaz_center_id)
                if center is None:
                    raise PassPreferenceError(
                        ErrorCode.RESOURCE_NOT_FOUND.value,
                        f"Vaaz Center with ID {item.vaaz_center_id} not found.",
                        status_code=404,
                        details={"vaaz_center_id": item.vaaz_center_id, "resource_type": "VaazCenter"},
                    )
                if center["event_id"] is not None and center["event_id"] != item.event_id:
                    raise PassPreferenceError(
                        ErrorCode.VAAZ_CENTER_EVENT_MISMATCH.value,
                        f"Vaaz Center ID {item.vaaz_center_id} is not assigned to Event ID {item.event_id}.",
                        details={"its_id": item.its_id, "vaaz_center_id": item.vaaz_center_id},
                    )
                cls._check_gender_capacity(cursor, item.its_id, item.event_id, center)
                cursor.execute(
                    "INSERT INTO pass_preferences (its_id, event_id, vaaz_center_id) VALUES (?, ?, ?)",
                    (item.its_id, item.event_id, item.vaaz_center_id),
                )
                created.append(cls._get_by_id(cursor, cursor.lastrowid))
        await AuditService.record(
            requester_its_id, "create", AuditObjectType.PASS_PREFERENCE, details={"its_ids": its_ids, "kind": "vaaz_center"}
        )
        return created

    @classmethod
    async def update_vaaz_center_bulk(cls, items: List[VaazCenterPreference], requester_its_id: int) -> int:
        """Move existing preferences to another center, all or nothing.

        The gender capacity of the new center is checked only when the
        center actually changes.  A block inside the old center is
        cleared.  Every failure is a ``PassPreferenceError``, including
        the family check.
        """
        with transaction() as conn:
            household = await FamilyService.resolve_household(requester_its_id, conn=conn)
            for item in items:
                if not FamilyService.is_family_member(household, item.its_id):
                    raise PassPreferenceError(
                        ErrorCode.AUTHORIZATION_FAILED.value,
                        f"Authorization failed for ITS {item.its_id}.",
                        status_code=403,
                        details={"its_id": item.its_id},
                    )
            cursor = conn.cursor()
            for item in items:
                pref = cls._find(cursor, item.its_id, item.event_id)
                if pref is None:
                    raise PassPreferenceError(
                        ErrorCode.RESOURCE_NOT_FOUND.value,
                        f"Pass Preference not found for ITS {item.its_id} and Event ID {item.event_id}.",
                        status_code=404,
                        details={"its_id": item.its_id, "event_id": item.event_id, "resource_type": "PassPreference"},
                    )
                if pref["is_locked"]:
                    raise PassPreferenceError(
                        ErrorCode.PASS_PREFERENCE_LOCKED.value,
                        f"Pass preference for ITS {item.its_id} is locked and cannot be updated.",
                        status_code=403,
                        details={"its_id": item.its_id},
                    )
                center = cls._vaaz_center(cursor, item.vaaz_center_id)
                if center is None:
                    raise PassPreferenceError(
                        ErrorCode.RESOURCE_NOT_FOUND.value,
                        f"Target Vaaz Center with ID {item.vaaz_center_id} not found.",
                        status_code=404,
                        details={"vaaz_center_id": item.vaaz_center_id, "resource_type": "VaazCenter"},
                    )
                if center["event_id"] != item.event_id:
                    raise PassPreferenceError(
                        ErrorCode.VAAZ_CENTER_EVENT_MISMATCH.value,
                        f"The selected Vaaz Center for ITS {item.its_id} does not belong to the specified event.",
                        details={"its_id": item.its_id},
                    )
                if pref["vaaz_center_id"] == item.vaaz_center_id:
                    continue
                cls._check_gender_capacity(cursor, item.its_id, item.event_id, center)
                block_id = pref["block_id"]
                if block_id is not None:
                    block = cls._block(cursor, block_id)
                    if block is not None and block["vaaz_center_id"] != item.vaaz_center_id:
                        block_id = None
                cursor.execute(
                    """
                    UPDATE pass_preferences
                    SET vaaz_center_id = ?, block_id = ?, updated_at = CURRENT_TIMESTAMP
                    WHERE id = ?
                    """,
                    (item.vaaz_center_id, block_id, pref["id"]),
                )
        await AuditService.record(
            requester_its_id,
            "update",
            AuditObjectType.PASS_PREFERENCE,
            details={"its_ids": [i.its_id for i in items], "kind": "vaaz_center"},
        )
        return len(items)

    @classmethod
    async def create_pass_type(cls, item: PassTypePreference, requester_its_id: int) -> PassPreferenceRead:
        with transaction() as conn:
            await FamilyService.ensure_family_member(requester_its_id, item.its_id, conn=conn)
            cursor = conn.cursor()
            if not cls._event_exists(cursor, item.event_id):
                raise PassPreferenceError(
                    ErrorCode.VALIDATION_FAILED.value,
                    f"Event {item.event_id} does not exist.",
                    details={"event_id": item.event_id},
                )
            if cls._find(cursor, item.its_id, item.event_id) is not None:
                raise PassPreferenceError(
                    ErrorCode.ITS_ID_ALREADY_EXISTS_FOR_EVENT.value,
                    "A pass preference already exists for this ITS ID and Event ID combination.",
                    details={"its_id": item.its_id, "event_id": item.event_id},
                )
            cursor.execute(
                "INSERT INTO pass_preferences (its_id, event_id, pass_type) VALUES (?, ?, ?)",
                (item.its_id, item.event_id, _value(item.pass_type)),
            )
            created = cls._get_by_id(cursor, cursor.lastrowid)
        await AuditService.record(requester_its_id, "create", AuditObjectType.PASS_PREFERENCE, created.id, {"pass_type": created.pass_type})
        return created

    @classmethod
    async def update_pass_type(cls, item: PassTypePreference, requester_its_id: int) -> PassPreferenceRead:
        """Change the pass type of one preference.  Locked preferences are rejected."""
        with transaction() as conn:
            await FamilyService.ensure_family_member(requester_its_id, item.its_id, conn=conn)
            cursor = conn.cursor()
            pref = cls._find(cursor, item.its_id, item.event_id)
            if pref is None:
                raise ValueError("Pass Preference not found for the given ITS ID and Event ID.")
            if pref["is_locked"]:
                raise PassPreferenceError(
                    ErrorCode.PASS_PREFERENCE_LOCKED.value,
                    f"Pass preference for ITS {item.its_id} is locked and cannot be updated.",
                    status_code=403,
                    details={"its_id": item.its_id},
                )
            cursor.execute(
                "UPDATE pass_preferences SET pass_type = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (_value(item.pass_type), pref["id"]),
            )
            updated = cls._get_by_id(cursor, pref["id"])
        await AuditService.record(requester_its_id, "update", AuditObjectType.PASS_PREFERENCE, updated.id, {"pass_type": updated.pass_type})
        return updated

    # ------------------------------------------------------------------
    # admin writes
    # ------------------------------------------------------------------

    @classmethod
    async def set_lock(cls, its_ids: List[int], is_locked: bool, admin_its_id: int) -> int:
        """Lock or unlock every preference of the given attendees.  Returns the row count."""
        ids = sorted(set(its_ids))
        marks = ", ".join("?" for _ in ids)
        with transaction() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"UPDATE pass_preferences SET is_locked = ?, updated_at = CURRENT_TIMESTAMP WHERE its_id IN ({marks})",
                (int(is_locked), *ids),
            )
            updated = cursor.rowcount
        logger.info("Admin %s set is_locked=%s on %s pass preferences", admin_its_id, is_locked, updated)
        await AuditService.record(
            admin_its_id, "lock" if is_locked else "unlock", AuditObjectType.PASS_PREFERENCE, details={"its_ids": ids}
        )
        return updated

    @classmethod
    async def assign_vaaz_center(cls, data: BulkVaazCenterAssignment, admin_its_id: int) -> int:
        """Assign attendees of one gender to a center for an event.

        The whole batch is rejected when the center's capacity for that
        gender would be exceeded.  Returns the number of preferences
        moved.
        """
        its_ids = sorted(set(data.its_ids))
        gender = _value(data.gender)
        marks = ", ".join("?" for _ in its_ids)

        with transaction() as conn:
            cursor = conn.cursor()
            matching = cursor.execute(
                f"SELECT COUNT(*) AS c FROM mumineens WHERE its_id IN ({marks}) AND LOWER(gender) = ?",
                (*its_ids, gender),
            ).fetchone()["c"]
            if matching != len(its_ids):
                raise PassPreferenceError(
                    ErrorCode.VALIDATION_FAILED.value,
                    "One or more provided ITS IDs do not match the specified gender or do not exist.",
                    details={"gender": gender},
                )
            if not cls._event_exists(cursor, data.event_id):
                raise PassPreferenceError(
                    ErrorCode.RESOURCE_NOT_FOUND.value,
                    f"Event {data.event_id} not found.",
                    status_code=404,
                    details={"event_id": data.event_id, "resource_type": "Event"},
                )
            center = cls._vaaz_center(cursor, data.vaaz_center_id)
            if center is None:
                raise PassPreferenceError(
                    ErrorCode.RESOURCE_NOT_FOUND.value,
                    "Vaaz Center not found.",
                    status_code=404,
                    details={"vaaz_center_id": data.vaaz_center_id, "resource_type": "VaazCenter"},
                )
            if center["event_id"] != data.event_id:
                raise PassPreferenceError(
                    ErrorCode.VAAZ_CENTER_EVENT_MISMATCH.value,
                    "The selected Vaaz Center does not belong to the specified event.",
                    details={"vaaz_center_id": data.vaaz_center_id, "event_id": data.event_id},
                )
            if gender not in (Gender.MALE.value, Gender.FEMALE.value):
                raise PassPreferenceError(
                    ErrorCode.VAAZ_CENTER_CAPACITY_GENDER_UNSUPPORTED.value,
                    f"Vaaz Centers have no capacity for gender '{gender}'.",
                    details={"gender": gender},
                )
            capacity = center[f"{gender}_capacity"] or 0
            occupancy = cls._gender_issued(cursor, data.vaaz_center_id, data.event_id, gender)
            new_assignments = cursor.execute(
                f"""
                SELECT COUNT(*) AS c FROM pass_preferences
                WHERE its_id IN ({marks}) AND event_id = ?
                  AND (vaaz_center_id IS NULL OR vaaz_center_id != ?)
                """,
                (*its_ids, data.event_id, data.vaaz_center_id),
            ).fetchone()["c"]
            if occupancy + new_assignments > capacity:
                raise PassPreferenceError(
                    ErrorCode.VAAZ_CENTER_FULL.value,
                    "Assigning these Mumineen would exceed the Vaaz Center capacity for the specified gender.",
                    details={
                        "gender": gender,
                        "capacity": capacity,
                        "current_occupancy": occupancy,
                        "new_assignments": new_assignments,
                    },
                )
            cursor.execute(
                f"""
                UPDATE pass_preferences SET vaaz_center_id = ?, updated_at = CURRENT_TIMESTAMP
                WHERE its_id IN ({marks}) AND event_id = ?
                """,
                (data.vaaz_center_id, *its_ids, data.event_id),
            )
            updated = cursor.rowcount
        await AuditService.record(
            admin_its_id,
            "assign",
            AuditObjectType.PASS_PREFERENCE,
            details={"its_ids": its_ids, "vaaz_center_id": data.vaaz_center_id, "event_id": data.event_id},
        )
        return updated
