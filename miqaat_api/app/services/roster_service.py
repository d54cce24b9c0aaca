"""
Roster synchronisation for the attendee registry.

An administrator uploads the full attendee roster as CSV.  The
registry is made to match it exactly: attendees missing from the
roster are removed together with their pass preferences, and every
roster row is inserted or updated by ``its_id``.  The whole sync runs
in one write transaction, so the registry is never left half
synchronised.

Input problems are reported as ``MalformedRosterError`` before the
transaction opens.  Any database error inside the transaction rolls
everything back and is re-raised as ``RosterStorageError``.
"""

import csv
import io
import logging
import sqlite3
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from pydantic import ValidationError

from miqaat_api.app.core.db import transaction
from miqaat_api.app.core.enums import AuditObjectType
from miqaat_api.app.core.exceptions import MalformedRosterError, RosterStorageError
from miqaat_api.app.schemas.roster import RosterRow, RosterSyncSummary

logger = logging.getLogger(__name__)

# Registry columns a roster may set, in table order.
MUMINEEN_COLUMNS = (
    "its_id",
    "hof_id",
    "fullname",
    "gender",
    "age",
    "jamaat",
    "hizbe_saifee_group_id",
    "idara",
    "category",
    "prefix",
    "title",
    "venue_waaz",
    "city",
    "local_mehman",
    "arr_place_date",
    "flight_code",
    "whatsapp_link_clicked",
    "daily_trans",
    "acc_arranged_at",
    "acc_zone",
    "mobile",
    "country",
)
INTEGER_COLUMNS = {"its_id", "hof_id", "age", "hizbe_saifee_group_id"}
BOOLEAN_COLUMNS = {"local_mehman", "whatsapp_link_clicked", "daily_trans"}

_TRUE_VALUES = {"1", "true", "yes", "y"}
_FALSE_VALUES = {"0", "false", "no", "n"}

# Stay below SQLite's default limit on bound parameters.
_DELETE_CHUNK = 500

SAMPLE_CSV_COLUMNS = [c for c in MUMINEEN_COLUMNS if c != "hizbe_saifee_group_id"]
SAMPLE_CSV_ROW = {
    "its_id": "40486549",
    "hof_id": "40486549",
    "fullname": "Maleka bai S",
    "gender": "female",
    "age": "73",
    "jamaat": "COLOMBO",
    "prefix": "MS",
    "city": "COLOMBO",
    "local_mehman": "0",
    "whatsapp_link_clicked": "0",
    "daily_trans": "0",
    "mobile": "0000000000",
    "country": "SRI LANKA",
}


def _chunks(values: Sequence[int], size: int) -> Iterator[Sequence[int]]:
    for start in range(0, len(values), size):
        yield values[start:start + size]


class RosterService:
    """Parse uploaded rosters and synchronise the registry with them."""

    @staticmethod
    def parse_roster(text: str) -> List[Dict[str, Any]]:
        """Split CSV text into one dict per data row.

        Header names are stripped and lower-cased.  Blank lines, and
        lines holding nothing but separators, are skipped.  Values are
        returned as strings; ``sync`` converts them.
        """
        text = text.lstrip("\ufeff")
        reader = csv.DictReader(io.StringIO(text))
        if not reader.fieldnames:
            raise MalformedRosterError("The roster is empty; expected a header row.")
        reader.fieldnames = [(name or "").strip().lower() for name in reader.fieldnames]
        if "its_id" not in reader.fieldnames:
            raise MalformedRosterError("The roster header must contain an 'its_id' column.")

        rows: List[Dict[str, Any]] = []
        for raw in reader:
            values = {k: v for k, v in raw.items() if k}
            if all(v is None or not str(v).strip() for v in values.values()):
                continue
            rows.append(values)
        return rows

    @staticmethod
    def _convert(column: str, value: Any, line: int) -> Any:
        if value is None:
            return None
        if isinstance(value, bool):
            return int(value) if column in BOOLEAN_COLUMNS else value
        if isinstance(value, int):
            return value
        text = str(value).strip()
        if text == "":
            return None
        if column in INTEGER_COLUMNS:
            try:
                return int(text)
            except ValueError:
                raise MalformedRosterError(
                    f"Row {line}: '{column}' must be a whole number, got '{text}'."
                ) from None
        if column in BOOLEAN_COLUMNS:
            lowered = text.lower()
            if lowered in _TRUE_VALUES:
                return 1
            if lowered in _FALSE_VALUES:
                return 0
            raise MalformedRosterError(f"Row {line}: '{column}' must be a yes/no value, got '{text}'.")
        if column == "gender":
            return text.lower()
        return text

    @staticmethod
    def _validate(row: Dict[str, Any], line: int) -> None:
        try:
            RosterRow.model_validate(row)
        except ValidationError as e:
            problems = "; ".join(
                f"'{'.'.join(str(p) for p in err['loc'])}': {err['msg']}"
                for err in e.errors()
            )
            raise MalformedRosterError(f"Row {line}: {problems}.") from None

    @classmethod
    def normalize_rows(cls, rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Keep recognised columns and convert their values.

        Raises ``MalformedRosterError`` when there are no rows, when a
        row has no ``its_id``, when a typed column cannot be converted,
        or when a value breaks a registry limit (e.g. a ``fullname``
        over 255 characters or a negative ``age``).  Row numbers in
        messages count data rows from 1.
        """
        normalized: List[Dict[str, Any]] = []
        for line, raw in enumerate(rows, start=1):
            row: Dict[str, Any] = {}
            for key, value in raw.items():
                column = str(key).strip().lower() if key is not None else ""
                if column in MUMINEEN_COLUMNS:
                    row[column] = cls._convert(column, value, line)
            if row.get("its_id") is None:
                raise MalformedRosterError(f"Row {line} is missing an its_id.")
            cls._validate(row, line)
            normalized.append(row)
        if not normalized:
            raise MalformedRosterError("The roster has no data rows; refusing to empty the registry.")
        return normalized

    @staticmethod
    def _upsert_row(cursor: sqlite3.Cursor, row: Dict[str, Any]) -> None:
        """Insert ``row`` or update the existing attendee with the same ``its_id``.

        Only the columns present in ``row`` are written.  An update that
        would not change anything leaves the record (and its
        ``updated_at``) untouched.
        """
        columns = list(row.keys())
        placeholders = ", ".join("?" for _ in columns)
        updates = [c for c in columns if c != "its_id"]
        sql = f"INSERT INTO mumineens ({', '.join(columns)}) VALUES ({placeholders})"
        if updates:
            assignments = ", ".join(f"{c} = excluded.{c}" for c in updates)
            changed = " OR ".join(f"mumineens.{c} IS NOT excluded.{c}" for c in updates)
            sql += (
                f" ON CONFLICT(its_id) DO UPDATE SET {assignments}, updated_at = CURRENT_TIMESTAMP"
                f" WHERE {changed}"
            )
        else:
            sql += " ON CONFLICT(its_id) DO NOTHING"
        cursor.execute(sql, tuple(row[c] for c in columns))

    @classmethod
    async def sync(
        cls,
        rows: Iterable[Dict[str, Any]],
        actor_its_id: Optional[int] = None,
    ) -> RosterSyncSummary:
        """Make the registry match ``rows`` exactly.

        Attendees absent from the roster lose their pass preferences and
        are then deleted; every row is upserted by ``its_id``.  Returns
        the processed, deleted and upserted counts.
        """
        normalized = cls.normalize_rows(rows)
        roster_ids = {row["its_id"] for row in normalized}

        try:
            with transaction() as conn:
                cursor = conn.cursor()
                registry_ids = [r["its_id"] for r in cursor.execute("SELECT its_id FROM mumineens").fetchall()]
                to_delete = sorted(set(registry_ids) - roster_ids)
                for chunk in _chunks(to_delete, _DELETE_CHUNK):
                    marks = ", ".join("?" for _ in chunk)
                    cursor.execute(f"DELETE FROM pass_preferences WHERE its_id IN ({marks})", tuple(chunk))
                    cursor.execute(f"DELETE FROM mumineens WHERE its_id IN ({marks})", tuple(chunk))
                for row in normalized:
                    cls._upsert_row(cursor, row)
        except sqlite3.Error as e:
            logger.error("Roster sync rolled back: %s", e)
            raise RosterStorageError(f"The roster could not be saved and no changes were made: {e}") from e

        summary = RosterSyncSummary(
            processed=len(normalized),
            deleted=len(to_delete),
            upserted=len(normalized),
        )
        logger.info(
            "Roster sync by ITS %s: processed=%s deleted=%s upserted=%s",
            actor_its_id,
            summary.processed,
            summary.deleted,
            summary.upserted,
        )
        from miqaat_api.app.services.audit_service import AuditService
        await AuditService.record(
            its_id=actor_its_id,
            action="sync",
            object_type=AuditObjectType.MUMINEEN,
            details=summary.model_dump(),
        )
        return summary

    @staticmethod
    def sample_csv() -> str:
        """Return a CSV template: the header row plus one example attendee."""
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=SAMPLE_CSV_COLUMNS, lineterminator="\n")
        writer.writeheader()
        writer.writerow({c: SAMPLE_CSV_ROW.get(c, "") for c in SAMPLE_CSV_COLUMNS})
        return buffer.getvalue()
