"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), running a block of statements inside a single
write transaction (``transaction``) and applying migrations on
application start (``init_db``).

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings

logger = logging.getLogger(__name__)


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # miqaat_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Foreign key enforcement is switched on for the lifetime of
    the connection; SQLite leaves it off by default.
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


@contextmanager
def transaction() -> Iterator[sqlite3.Connection]:
    """Run the enclosed statements as one all-or-nothing write transaction.

    ``BEGIN IMMEDIATE`` takes SQLite's write lock up front, so two
    transactions started through this helper never interleave.  Any
    exception rolls back every statement issued inside the block and is
    re-raised to the caller.
    """
    conn = get_connection()
    try:
        conn.execute("BEGIN IMMEDIATE")
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS miqaats (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            status TEXT NOT NULL DEFAULT 'active',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS events (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            miqaat_id INTEGER,
            name TEXT NOT NULL UNIQUE,
            status TEXT NOT NULL DEFAULT 'active',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(miqaat_id) REFERENCES miqaats(id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS vaaz_centers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            event_id INTEGER,
            name TEXT NOT NULL,
            est_capacity INTEGER NOT NULL DEFAULT 0,
            lat REAL,
            long REAL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(event_id) REFERENCES events(id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS blocks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            vaaz_center_id INTEGER NOT NULL,
            type TEXT NOT NULL,
            capacity INTEGER NOT NULL DEFAULT 0,
            min_age INTEGER,
            max_age INTEGER,
            gender TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(vaaz_center_id) REFERENCES vaaz_centers(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS hizbe_saifee_groups (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            capacity INTEGER NOT NULL,
            group_no INTEGER NOT NULL UNIQUE,
            whatsapp_link TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS mumineens (
            its_id INTEGER PRIMARY KEY,
            hof_id INTEGER,
            fullname TEXT,
            gender TEXT,
            age INTEGER,
            jamaat TEXT,
            hizbe_saifee_group_id INTEGER,
            idara TEXT,
            category TEXT,
            prefix TEXT,
            title TEXT,
            venue_waaz TEXT,
            city TEXT,
            local_mehman INTEGER DEFAULT 0,
            arr_place_date TEXT,
            flight_code TEXT,
            whatsapp_link_clicked INTEGER DEFAULT 0,
            daily_trans INTEGER DEFAULT 0,
            acc_arranged_at TEXT,
            acc_zone TEXT,
            mobile TEXT,
            country TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(hizbe_saifee_group_id) REFERENCES hizbe_saifee_groups(id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS pass_preferences (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            its_id INTEGER NOT NULL,
            event_id INTEGER NOT NULL,
            pass_type TEXT,
            block_id INTEGER,
            vaaz_center_id INTEGER,
            is_locked INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(its_id, event_id),
            FOREIGN KEY(its_id) REFERENCES mumineens(its_id),
            FOREIGN KEY(event_id) REFERENCES events(id) ON DELETE CASCADE,
            FOREIGN KEY(block_id) REFERENCES blocks(id) ON DELETE SET NULL,
            FOREIGN KEY(vaaz_center_id) REFERENCES vaaz_centers(id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS accommodations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            miqaat_id INTEGER NOT NULL,
            its_id INTEGER NOT NULL,
            type TEXT NOT NULL,
            name TEXT NOT NULL,
            address TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(miqaat_id) REFERENCES miqaats(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS audit_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            its_id INTEGER,
            action TEXT NOT NULL,
            object_type TEXT,
            object_id INTEGER,
            timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            details TEXT
        );
        """,
    ),
    # Migration 2: indices on lookup columns
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_mumineens_hof_id ON mumineens(hof_id);
        CREATE INDEX IF NOT EXISTS idx_pass_preferences_its_id ON pass_preferences(its_id);
        CREATE INDEX IF NOT EXISTS idx_pass_preferences_pass_type ON pass_preferences(pass_type);
        CREATE INDEX IF NOT EXISTS idx_accommodations_miqaat_id ON accommodations(miqaat_id);
        CREATE INDEX IF NOT EXISTS idx_accommodations_its_id ON accommodations(its_id);
        CREATE INDEX IF NOT EXISTS idx_accommodations_type ON accommodations(type);
        """,
    ),
    # Migration 3: gender specific capacities on vaaz centers
    (
        3,
        """
        ALTER TABLE vaaz_centers ADD COLUMN male_capacity INTEGER;
        ALTER TABLE vaaz_centers ADD COLUMN female_capacity INTEGER;
        """,
    ),
]


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  Append new migrations with an incremented version.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                logger.info("Applying migration %s", version)
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
