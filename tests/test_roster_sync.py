"""Roster parsing and the all-or-nothing registry sync."""

import sqlite3

import pytest

from conftest import ADMIN_ITS, run
from miqaat_api.app.core.exceptions import MalformedRosterError, RosterStorageError
from miqaat_api.app.services.roster_service import RosterService


def _registry(seed) -> dict:
    return {r["its_id"]: r for r in seed.query("SELECT * FROM mumineens ORDER BY its_id")}


def _sync(text: str):
    return run(RosterService.sync(RosterService.parse_roster(text), actor_its_id=ADMIN_ITS))


def test_parse_normalizes_headers_and_skips_blank_lines() -> None:
    text = "\ufeff ITS_ID , FullName ,Gender\n1001,Ali,Male\n\n,,\n1002,Sakina,female\n"
    rows = RosterService.parse_roster(text)
    assert rows == [
        {"its_id": "1001", "fullname": "Ali", "gender": "Male"},
        {"its_id": "1002", "fullname": "Sakina", "gender": "female"},
    ]


def test_parse_requires_its_id_column() -> None:
    with pytest.raises(MalformedRosterError):
        RosterService.parse_roster("fullname,gender\nAli,male\n")


def test_parse_rejects_empty_text() -> None:
    with pytest.raises(MalformedRosterError):
        RosterService.parse_roster("")


def test_normalize_converts_typed_columns() -> None:
    rows = RosterService.normalize_rows(
        [{"its_id": "1001", "age": " 40 ", "local_mehman": "Yes", "daily_trans": "0", "gender": "MALE", "extra": "x"}]
    )
    assert rows == [{"its_id": 1001, "age": 40, "local_mehman": 1, "daily_trans": 0, "gender": "male"}]


def test_normalize_rejects_bad_numbers() -> None:
    with pytest.raises(MalformedRosterError, match="age"):
        RosterService.normalize_rows([{"its_id": "1001", "age": "forty"}])


def test_sync_replaces_registry(seed) -> None:
    event_id = seed.event()
    seed.mumineen(1001, fullname="Old Name")
    seed.mumineen(1002, fullname="Stays")
    seed.pass_preference(1001, event_id)

    summary = _sync("its_id,fullname,gender,age\n1002,Stays Updated,female,40\n1003,New Member,male,12\n")

    assert (summary.processed, summary.deleted, summary.upserted) == (2, 1, 2)
    registry = _registry(seed)
    assert sorted(registry) == [1002, 1003]
    assert registry[1002]["fullname"] == "Stays Updated"
    assert registry[1003]["age"] == 12
    assert seed.query("SELECT * FROM pass_preferences WHERE its_id = 1001") == []


def test_sync_is_idempotent(seed) -> None:
    text = "its_id,hof_id,fullname,gender\n1001,,Head,male\n1002,1001,Member,female\n"
    _sync(text)
    first = _registry(seed)

    summary = _sync(text)

    assert (summary.processed, summary.deleted, summary.upserted) == (2, 0, 2)
    assert _registry(seed) == first


def test_sync_drops_household_member_missing_from_roster(seed) -> None:
    event_id = seed.event()
    seed.mumineen(1001)
    seed.mumineen(1002, hof_id=1001, gender="female")
    seed.pass_preference(1002, event_id)

    summary = _sync("its_id\n1001\n")

    assert (summary.processed, summary.deleted, summary.upserted) == (1, 1, 1)
    assert sorted(_registry(seed)) == [1001]
    assert seed.query("SELECT * FROM pass_preferences WHERE its_id = 1002") == []


@pytest.mark.parametrize(
    "row, column",
    [
        ("1002,%s,30" % ("A" * 300), "fullname"),
        ("1002,Someone,-1", "age"),
    ],
)
def test_sync_rejects_values_the_registry_cannot_hold(seed, row, column) -> None:
    seed.mumineen(1001, fullname="Head")
    with pytest.raises(MalformedRosterError, match=column):
        _sync(f"its_id,fullname,age\n1001,Head,45\n{row}\n")
    registry = _registry(seed)
    assert sorted(registry) == [1001]
    assert registry[1001]["fullname"] == "Head"


def test_sync_accepts_genders_outside_the_usual_set(seed) -> None:
    _sync("its_id,gender\n1001,Unknown\n")
    assert _registry(seed)[1001]["gender"] == "unknown"


def test_sync_keeps_columns_missing_from_the_roster(seed) -> None:
    seed.mumineen(1001, fullname="Head", jamaat="COLOMBO")
    _sync("its_id,fullname\n1001,Head Renamed\n")
    assert _registry(seed)[1001]["jamaat"] == "COLOMBO"


def test_sync_rejects_row_without_its_id(seed) -> None:
    seed.mumineen(1001)
    with pytest.raises(MalformedRosterError):
        _sync("its_id,fullname\n1002,Someone\n,Nobody\n")
    assert sorted(_registry(seed)) == [1001]


def test_sync_refuses_header_only_roster(seed) -> None:
    seed.mumineen(1001)
    with pytest.raises(MalformedRosterError):
        _sync("its_id,fullname\n")
    assert sorted(_registry(seed)) == [1001]


def test_sync_rolls_back_on_storage_failure(seed, monkeypatch) -> None:
    event_id = seed.event()
    seed.mumineen(1001, fullname="Head")
    seed.pass_preference(1001, event_id)
    calls = []

    def failing_upsert(cursor, row):
        calls.append(row["its_id"])
        if len(calls) == 2:
            raise sqlite3.OperationalError("disk I/O error")
        cursor.execute("INSERT INTO mumineens (its_id) VALUES (?)", (row["its_id"],))

    monkeypatch.setattr(RosterService, "_upsert_row", staticmethod(failing_upsert))

    with pytest.raises(RosterStorageError):
        _sync("its_id,fullname\n1002,A\n1003,B\n")

    assert sorted(_registry(seed)) == [1001]
    assert len(seed.query("SELECT * FROM pass_preferences")) == 1


def test_sync_rolls_back_on_constraint_violation(seed) -> None:
    seed.mumineen(1001)
    with pytest.raises(RosterStorageError):
        _sync("its_id,hizbe_saifee_group_id\n1002,\n1003,77\n")
    assert sorted(_registry(seed)) == [1001]


def test_sync_is_audited(seed) -> None:
    _sync("its_id\n1001\n")
    logs = seed.query("SELECT * FROM audit_logs WHERE action = 'sync'")
    assert len(logs) == 1
    assert logs[0]["its_id"] == ADMIN_ITS
    assert logs[0]["object_type"] == "mumineen"


def test_sample_csv_has_header_and_example_row() -> None:
    lines = RosterService.sample_csv().splitlines()
    assert lines[0].startswith("its_id,hof_id,fullname,gender,age,jamaat")
    assert "hizbe_saifee_group_id" not in lines[0]
    assert lines[1].startswith("40486549,40486549,Maleka bai S,female,73")
