"""Pass preference rules: household scope, placement, capacity and locking."""

import pytest

from conftest import auth_headers, run
from miqaat_api.app.services.family_service import FamilyService
from miqaat_api.app.services.roster_service import RosterService

BASE = "/api/v1/pass-preferences"


@pytest.fixture
def venue(seed, family) -> dict:
    event_id = seed.event("Day 1")
    other_event = seed.event("Day 2")
    center_id = seed.vaaz_center(event_id, est_capacity=10, male_capacity=1)
    block_id = seed.block(center_id, capacity=1)
    open_block = seed.block(center_id, type="Upper floor", capacity=0)
    other_center = seed.vaaz_center(other_event, name="Burhani Hall")
    return {
        "event": event_id,
        "other_event": other_event,
        "center": center_id,
        "block": block_id,
        "open_block": open_block,
        "other_center": other_center,
    }


def _error(response) -> str:
    return response.json()["detail"]["error_code"]


def test_create_for_household(client, venue) -> None:
    items = [
        {"its_id": 1001, "event_id": venue["event"], "pass_type": "RAHAT", "vaaz_center_id": venue["center"]},
        {"its_id": 1002, "event_id": venue["event"], "pass_type": "GENERAL"},
    ]
    response = client.post(f"{BASE}/", json=items, headers=auth_headers(1001))
    assert response.status_code == 201
    created = response.json()
    assert [p["its_id"] for p in created] == [1001, 1002]
    assert created[0]["vaaz_center_name"] == "Saifee Masjid"
    assert created[0]["is_locked"] is False

    listed = client.get(f"{BASE}/", headers=auth_headers(1002))
    assert len(listed.json()) == 2


def test_create_outside_household_is_forbidden(client, venue) -> None:
    items = [{"its_id": 2001, "event_id": venue["event"]}]
    assert client.post(f"{BASE}/", json=items, headers=auth_headers(1001)).status_code == 403


def test_empty_batch_is_rejected(client, venue) -> None:
    assert client.post(f"{BASE}/", json=[], headers=auth_headers(1001)).status_code == 400


def test_duplicate_its_id_in_batch(client, venue) -> None:
    items = [{"its_id": 1001, "event_id": venue["event"]}] * 2
    response = client.post(f"{BASE}/", json=items, headers=auth_headers(1001))
    assert response.status_code == 422
    assert _error(response) == "VALIDATION_FAILED"


def test_existing_preference_is_rejected(client, venue, seed) -> None:
    seed.pass_preference(1001, venue["event"])
    response = client.post(f"{BASE}/", json=[{"its_id": 1001, "event_id": venue["event"]}], headers=auth_headers(1001))
    assert response.status_code == 422
    assert _error(response) == "ITS_ID_ALREADY_EXISTS_FOR_EVENT"


def test_center_from_another_event(client, venue) -> None:
    items = [{"its_id": 1001, "event_id": venue["event"], "vaaz_center_id": venue["other_center"]}]
    response = client.post(f"{BASE}/", json=items, headers=auth_headers(1001))
    assert _error(response) == "VAAZ_CENTER_EVENT_MISMATCH"


def test_block_outside_center(client, venue, seed) -> None:
    second_center = seed.vaaz_center(venue["event"], name="Mohammedi Park")
    items = [
        {"its_id": 1001, "event_id": venue["event"], "vaaz_center_id": second_center, "block_id": venue["block"]}
    ]
    response = client.post(f"{BASE}/", json=items, headers=auth_headers(1001))
    assert _error(response) == "BLOCK_VAAZ_CENTER_MISMATCH"


def test_full_block_rejects_whole_batch(client, venue, seed) -> None:
    items = [
        {"its_id": 1001, "event_id": venue["event"], "block_id": venue["block"]},
        {"its_id": 1002, "event_id": venue["event"], "block_id": venue["block"]},
    ]
    response = client.post(f"{BASE}/", json=items, headers=auth_headers(1001))
    assert response.status_code == 422
    assert _error(response) == "BLOCK_FULL"
    assert seed.query("SELECT * FROM pass_preferences") == []


def test_update_preference(client, venue, seed) -> None:
    seed.pass_preference(1002, venue["event"], pass_type="GENERAL")
    items = [{"its_id": 1002, "event_id": venue["event"], "pass_type": "CHAIR", "block_id": venue["open_block"]}]
    response = client.put(f"{BASE}/", json=items, headers=auth_headers(1001))
    assert response.status_code == 200
    row = seed.query("SELECT pass_type, block_id FROM pass_preferences WHERE its_id = 1002")[0]
    assert row == {"pass_type": "CHAIR", "block_id": venue["open_block"]}


def test_update_missing_preference(client, venue) -> None:
    items = [{"its_id": 1002, "event_id": venue["event"], "pass_type": "CHAIR"}]
    response = client.put(f"{BASE}/", json=items, headers=auth_headers(1001))
    assert response.status_code == 404
    assert _error(response) == "RESOURCE_NOT_FOUND"


def test_locked_preference_cannot_change(client, venue, seed, admin_headers) -> None:
    seed.pass_preference(1001, venue["event"], pass_type="GENERAL")
    locked = client.put(f"{BASE}/lock", json={"its_id": [1001], "is_locked": True}, headers=admin_headers)
    assert locked.json() == {"message": "Lock status updated for 1 records."}

    items = [{"its_id": 1001, "event_id": venue["event"], "pass_type": "CHAIR"}]
    response = client.put(f"{BASE}/", json=items, headers=auth_headers(1001))
    assert response.status_code == 403
    assert _error(response) == "PASS_PREFERENCE_LOCKED"

    pass_type = {"its_id": 1001, "event_id": venue["event"], "pass_type": "CHAIR"}
    assert client.put(f"{BASE}/pass-type", json=pass_type, headers=auth_headers(1001)).status_code == 403


def test_lock_needs_admin(client, venue) -> None:
    response = client.put(f"{BASE}/lock", json={"its_id": [1001], "is_locked": True}, headers=auth_headers(1001))
    assert response.status_code == 403


def test_delete_preference(client, venue, seed) -> None:
    seed.pass_preference(1002, venue["event"])
    url = f"{BASE}/?its_id=1002&event_id={venue['event']}"
    assert client.delete(url, headers=auth_headers(2001)).status_code == 403
    assert client.delete(url, headers=auth_headers(1001)).status_code == 200
    assert client.delete(url, headers=auth_headers(1001)).status_code == 404


def test_vaaz_center_preference_checks_gender_capacity(client, venue) -> None:
    male = [{"its_id": 1001, "event_id": venue["event"], "vaaz_center_id": venue["center"]}]
    assert client.post(f"{BASE}/vaaz-center", json=male, headers=auth_headers(1001)).status_code == 201

    second_male = [{"its_id": 1004, "event_id": venue["event"], "vaaz_center_id": venue["center"]}]
    full = client.post(f"{BASE}/vaaz-center", json=second_male, headers=auth_headers(1001))
    assert _error(full) == "VAAZ_CENTER_FULL"

    female = [{"its_id": 1002, "event_id": venue["event"], "vaaz_center_id": venue["center"]}]
    unavailable = client.post(f"{BASE}/vaaz-center", json=female, headers=auth_headers(1001))
    assert _error(unavailable) == "VAAZ_CENTER_CAPACITY_GENDER_UNAVAILABLE"


def test_move_to_another_center(client, venue, seed) -> None:
    second_center = seed.vaaz_center(venue["event"], name="Mohammedi Park", female_capacity=5)
    seed.pass_preference(1002, venue["event"], vaaz_center_id=venue["center"], block_id=venue["block"])
    items = [{"its_id": 1002, "event_id": venue["event"], "vaaz_center_id": second_center}]
    response = client.put(f"{BASE}/vaaz-center", json=items, headers=auth_headers(1001))
    assert response.status_code == 200
    row = seed.query("SELECT vaaz_center_id, block_id FROM pass_preferences WHERE its_id = 1002")[0]
    assert row == {"vaaz_center_id": second_center, "block_id": None}


def test_move_outside_household_has_structured_error(client, venue, seed) -> None:
    seed.pass_preference(2001, venue["event"])
    items = [{"its_id": 2001, "event_id": venue["event"], "vaaz_center_id": venue["center"]}]
    response = client.put(f"{BASE}/vaaz-center", json=items, headers=auth_headers(1001))
    assert response.status_code == 403
    assert _error(response) == "AUTHORIZATION_FAILED"


def test_move_with_empty_body(client, venue) -> None:
    response = client.put(f"{BASE}/vaaz-center", json=[], headers=auth_headers(1001))
    assert response.status_code == 400
    assert _error(response) == "INVALID_REQUEST_BODY"


def test_pass_type_create_and_update(client, venue, seed) -> None:
    body = {"its_id": 1004, "event_id": venue["event"], "pass_type": "RAHAT"}
    created = client.post(f"{BASE}/pass-type", json=body, headers=auth_headers(1001))
    assert created.status_code == 201
    assert created.json()["pass_type"] == "RAHAT"

    again = client.post(f"{BASE}/pass-type", json=body, headers=auth_headers(1001))
    assert _error(again) == "ITS_ID_ALREADY_EXISTS_FOR_EVENT"

    updated = client.put(f"{BASE}/pass-type", json={**body, "pass_type": "CHAIR"}, headers=auth_headers(1001))
    assert updated.json()["pass_type"] == "CHAIR"


def test_pass_types(client, family) -> None:
    response = client.get(f"{BASE}/pass-types", headers=auth_headers(1001))
    assert response.json() == ["RAHAT", "CHAIR", "GENERAL"]


def test_summary(client, venue, seed) -> None:
    seed.pass_preference(1001, venue["event"], vaaz_center_id=venue["center"], block_id=venue["block"])
    response = client.get(f"{BASE}/summary?event_id={venue['event']}", headers=auth_headers(1001))
    assert response.status_code == 200
    center = response.json()[0]
    assert center["vaaz_center_issued_passes"] == 1
    assert center["vaaz_center_availability"] == 9
    blocks = {b["id"]: b for b in center["blocks"]}
    assert blocks[venue["block"]]["block_availability"] == 0
    assert blocks[venue["open_block"]]["block_availability"] == "unlimited"

    missing = client.get(f"{BASE}/summary?event_id={venue['event']}&vaaz_center_id=999", headers=auth_headers(1001))
    assert missing.status_code == 404


def test_vaaz_center_summary(client, venue, seed) -> None:
    seed.pass_preference(1001, venue["event"], vaaz_center_id=venue["center"])
    response = client.get(
        f"{BASE}/vaaz-center-summary?event_id={venue['event']}&vaaz_center_id={venue['center']}",
        headers=auth_headers(1001),
    )
    center = response.json()[0]
    assert center["male_capacity"] == 1
    assert center["male_issued_passes"] == 1
    assert center["male_availability"] == 0
    assert center["female_capacity"] == "Not Set"
    assert center["female_availability"] == "Not Set"


def test_assign_vaaz_center(client, venue, seed, admin_headers) -> None:
    seed.pass_preference(1001, venue["event"])
    seed.pass_preference(1004, venue["event"])
    body = {"event_id": venue["event"], "vaaz_center_id": venue["center"], "its_ids": [1001, 1004], "gender": "male"}

    too_many = client.put(f"{BASE}/assign-vaaz-center", json=body, headers=admin_headers)
    assert too_many.status_code == 422
    detail = too_many.json()["detail"]
    assert detail["error_code"] == "VAAZ_CENTER_FULL"
    assert detail["details"]["new_assignments"] == 2

    one = client.put(f"{BASE}/assign-vaaz-center", json={**body, "its_ids": [1001]}, headers=admin_headers)
    assert one.json() == {"message": "Successfully assigned 1 Mumineen to the Vaaz Center."}


def test_assign_rejects_gender_mismatch(client, venue, seed, admin_headers) -> None:
    seed.pass_preference(1002, venue["event"])
    body = {"event_id": venue["event"], "vaaz_center_id": venue["center"], "its_ids": [1002], "gender": "male"}
    response = client.put(f"{BASE}/assign-vaaz-center", json=body, headers=admin_headers)
    assert _error(response) == "VALIDATION_FAILED"


def test_household_is_checked_inside_the_write_transaction(client, venue, monkeypatch) -> None:
    original = FamilyService.resolve_household
    seen = []

    async def resolve(its_id, conn=None):
        seen.append(conn is not None and conn.in_transaction)
        return await original(its_id, conn=conn)

    monkeypatch.setattr(FamilyService, "resolve_household", resolve)
    items = [{"its_id": 1002, "event_id": venue["event"]}]
    assert client.post(f"{BASE}/", json=items, headers=auth_headers(1001)).status_code == 201
    assert seen == [True]


def test_member_removed_by_roster_sync_is_forbidden(client, venue) -> None:
    run(RosterService.sync(RosterService.parse_roster("its_id,hof_id\n1001,\n1003,1001\n1004,1001\n2001,\n")))
    items = [{"its_id": 1002, "event_id": venue["event"]}]
    response = client.post(f"{BASE}/", json=items, headers=auth_headers(1001))
    assert response.status_code == 403
