"""Shared fixtures: a fresh SQLite database per test, an API client and seed helpers."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from miqaat_api.app.core.config import settings
from miqaat_api.app.core.db import get_connection, init_db
from miqaat_api.app.core.security import create_access_token

ADMIN_ITS = 30361114
ITS_KEY = "0123456789abcdef0123456789abcdef"


def run(coro):
    """Run a service coroutine from a synchronous test."""
    return asyncio.run(coro)


def auth_headers(its_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(its_id)})}"}


class Seed:
    """Insert rows straight into the test database."""

    def _insert(self, sql: str, params: tuple) -> int:
        conn = get_connection()
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor.lastrowid
        finally:
            conn.close()

    def mumineen(self, its_id, hof_id=None, gender="male", age=30, jamaat="COLOMBO", fullname=None):
        self._insert(
            "INSERT INTO mumineens (its_id, hof_id, fullname, gender, age, jamaat) VALUES (?, ?, ?, ?, ?, ?)",
            (its_id, hof_id, fullname or f"Member {its_id}", gender, age, jamaat),
        )
        return its_id

    def miqaat(self, name="Ashara 1447"):
        return self._insert("INSERT INTO miqaats (name) VALUES (?)", (name,))

    def event(self, name="Day 1", miqaat_id=None):
        return self._insert("INSERT INTO events (name, miqaat_id) VALUES (?, ?)", (name, miqaat_id))

    def vaaz_center(self, event_id, name="Saifee Masjid", est_capacity=0, male_capacity=None, female_capacity=None):
        return self._insert(
            "INSERT INTO vaaz_centers (event_id, name, est_capacity, male_capacity, female_capacity)"
            " VALUES (?, ?, ?, ?, ?)",
            (event_id, name, est_capacity, male_capacity, female_capacity),
        )

    def block(self, vaaz_center_id, type="Ground floor", capacity=0):
        return self._insert(
            "INSERT INTO blocks (vaaz_center_id, type, capacity) VALUES (?, ?, ?)",
            (vaaz_center_id, type, capacity),
        )

    def pass_preference(self, its_id, event_id, vaaz_center_id=None, block_id=None, pass_type=None, is_locked=False):
        return self._insert(
            "INSERT INTO pass_preferences (its_id, event_id, vaaz_center_id, block_id, pass_type, is_locked)"
            " VALUES (?, ?, ?, ?, ?, ?)",
            (its_id, event_id, vaaz_center_id, block_id, pass_type, int(is_locked)),
        )

    def query(self, sql: str, params: tuple = ()) -> list:
        conn = get_connection()
        try:
            return [dict(r) for r in conn.execute(sql, params).fetchall()]
        finally:
            conn.close()


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    """Point the settings at an empty database and apply the migrations."""
    db_path = tmp_path / "test.db"
    monkeypatch.setattr(settings, "database_url", str(db_path))
    monkeypatch.setattr(settings, "admin_its_ids", str(ADMIN_ITS))
    monkeypatch.setattr(settings, "its_encryption_key", ITS_KEY)
    monkeypatch.setattr(settings, "secret_key", "test-secret")
    monkeypatch.setattr(settings, "allowed_jamaats", "")
    init_db()
    return db_path


@pytest.fixture
def client():
    from miqaat_api.app.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seed() -> Seed:
    return Seed()


@pytest.fixture
def admin_headers() -> dict:
    return auth_headers(ADMIN_ITS)


@pytest.fixture
def family(seed: Seed) -> dict:
    """Household headed by 1001 plus an unrelated attendee 2001."""
    seed.mumineen(1001, gender="male", age=45)
    seed.mumineen(1002, hof_id=1001, gender="female", age=40)
    seed.mumineen(1003, hof_id=1001, gender="male", age=4)
    seed.mumineen(1004, hof_id=1001, gender="male", age=18)
    seed.mumineen(2001, gender="female", age=35, jamaat="JAFFNA")
    return {"head": 1001, "members": [1001, 1002, 1003, 1004], "outsider": 2001}
