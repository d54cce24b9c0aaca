"""Accommodations are visible and editable only within the owner's household."""

import pytest

from conftest import auth_headers
from miqaat_api.app.services.family_service import FamilyService

BASE = "/api/v1/accommodations"


@pytest.fixture
def miqaat_id(seed, family) -> int:
    return seed.miqaat()


def _create(client, miqaat_id, its_id, requester):
    body = {"miqaat_id": miqaat_id, "its_id": its_id, "type": "Hotel", "name": "Hilton", "address": "Colombo 1"}
    return client.post(f"{BASE}/", json=body, headers=auth_headers(requester))


def test_create_and_list_for_household(client, miqaat_id) -> None:
    created = _create(client, miqaat_id, 1002, requester=1001)
    assert created.status_code == 201
    assert created.json()["its_id"] == 1002

    listed = client.get(f"{BASE}/", headers=auth_headers(1004))
    assert [a["id"] for a in listed.json()] == [created.json()["id"]]
    assert client.get(f"{BASE}/", headers=auth_headers(2001)).json() == []


def test_list_filters(client, miqaat_id, seed) -> None:
    other_miqaat = seed.miqaat("Urus 1447")
    _create(client, miqaat_id, 1001, requester=1001)
    _create(client, other_miqaat, 1002, requester=1001)
    by_member = client.get(f"{BASE}/?its_id=1002", headers=auth_headers(1001)).json()
    assert [a["miqaat_id"] for a in by_member] == [other_miqaat]
    by_miqaat = client.get(f"{BASE}/?miqaat_id={miqaat_id}", headers=auth_headers(1001)).json()
    assert [a["its_id"] for a in by_miqaat] == [1001]
    assert client.get(f"{BASE}/?type=Apartment", headers=auth_headers(1001)).json() == []


def test_list_for_outsider_is_forbidden(client, miqaat_id) -> None:
    assert client.get(f"{BASE}/?its_id=2001", headers=auth_headers(1001)).status_code == 403


def test_unregistered_caller_cannot_list(client, miqaat_id) -> None:
    assert client.get(f"{BASE}/", headers=auth_headers(9999)).status_code == 403


def test_create_for_outsider_is_forbidden(client, miqaat_id) -> None:
    assert _create(client, miqaat_id, 2001, requester=1001).status_code == 403


def test_create_with_unknown_miqaat(client, miqaat_id) -> None:
    assert _create(client, 999, 1001, requester=1001).status_code == 404


def test_get_checks_household(client, miqaat_id) -> None:
    accommodation_id = _create(client, miqaat_id, 1001, requester=1001).json()["id"]
    assert client.get(f"{BASE}/{accommodation_id}", headers=auth_headers(1002)).status_code == 200
    assert client.get(f"{BASE}/{accommodation_id}", headers=auth_headers(2001)).status_code == 403
    assert client.get(f"{BASE}/999", headers=auth_headers(1001)).status_code == 404


def test_update_and_reassign(client, miqaat_id) -> None:
    accommodation_id = _create(client, miqaat_id, 1001, requester=1001).json()["id"]
    updated = client.put(
        f"{BASE}/{accommodation_id}", json={"its_id": 1002, "name": "Cinnamon Grand"}, headers=auth_headers(1001)
    )
    assert updated.status_code == 200
    assert updated.json()["its_id"] == 1002
    assert updated.json()["name"] == "Cinnamon Grand"

    to_outsider = client.put(f"{BASE}/{accommodation_id}", json={"its_id": 2001}, headers=auth_headers(1001))
    assert to_outsider.status_code == 403


def test_delete(client, miqaat_id) -> None:
    accommodation_id = _create(client, miqaat_id, 1001, requester=1001).json()["id"]
    assert client.delete(f"{BASE}/{accommodation_id}", headers=auth_headers(2001)).status_code == 403
    deleted = client.delete(f"{BASE}/{accommodation_id}", headers=auth_headers(1002))
    assert deleted.json() == {"message": "Accommodation deleted successfully"}
    assert client.delete(f"{BASE}/{accommodation_id}", headers=auth_headers(1002)).status_code == 404


def test_writes_check_the_household_inside_their_transaction(client, miqaat_id, monkeypatch) -> None:
    original = FamilyService.resolve_household
    seen = []

    async def resolve(its_id, conn=None):
        seen.append(conn is not None and conn.in_transaction)
        return await original(its_id, conn=conn)

    monkeypatch.setattr(FamilyService, "resolve_household", resolve)
    accommodation_id = _create(client, miqaat_id, 1002, requester=1001).json()["id"]
    client.put(f"{BASE}/{accommodation_id}", json={"name": "Cinnamon"}, headers=auth_headers(1001))
    client.delete(f"{BASE}/{accommodation_id}", headers=auth_headers(1001))
    assert seen == [True, True, True]
