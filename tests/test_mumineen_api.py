"""Attendee registry endpoints, including the CSV roster upload."""

from conftest import auth_headers
from miqaat_api.app.core.config import settings

ROSTER = "its_id,hof_id,fullname,gender,age\n1001,,Head,male,45\n1002,1001,Wife,female,40\n"


def test_read_own_record(client, family) -> None:
    response = client.get("/api/v1/mumineen/", headers=auth_headers(1001))
    assert response.status_code == 200
    assert response.json()["its_id"] == 1001
    assert response.json()["local_mehman"] is False


def test_own_record_respects_jamaat_filter(client, family, monkeypatch) -> None:
    monkeypatch.setattr(settings, "allowed_jamaats", "JAFFNA")
    assert client.get("/api/v1/mumineen/", headers=auth_headers(1001)).status_code == 404
    assert client.get("/api/v1/mumineen/", headers=auth_headers(2001)).status_code == 200


def test_read_household_member(client, family) -> None:
    response = client.get("/api/v1/mumineen/1002", headers=auth_headers(1001))
    assert response.status_code == 200
    assert response.json()["gender"] == "female"


def test_read_outside_household_is_forbidden(client, family) -> None:
    assert client.get("/api/v1/mumineen/2001", headers=auth_headers(1001)).status_code == 403
    # Unknown ids look the same as other households.
    assert client.get("/api/v1/mumineen/99999", headers=auth_headers(1001)).status_code == 403


def test_admin_reads_any_record(client, family, admin_headers) -> None:
    assert client.get("/api/v1/mumineen/2001", headers=admin_headers).status_code == 200
    assert client.get("/api/v1/mumineen/99999", headers=admin_headers).status_code == 404


def test_family_view_hides_young_children(client, family, seed) -> None:
    event_id = seed.event()
    seed.pass_preference(1002, event_id, pass_type="CHAIR")
    response = client.get(f"/api/v1/mumineen/family?event_id={event_id}", headers=auth_headers(1004))
    assert response.status_code == 200
    members = {m["its_id"]: m for m in response.json()}
    assert sorted(members) == [1001, 1002, 1004]
    assert members[1002]["pass_preferences"][0]["pass_type"] == "CHAIR"
    assert members[1001]["pass_preferences"] == []


def test_all_with_passes_is_admin_only(client, family, seed, admin_headers) -> None:
    event_id = seed.event()
    url = f"/api/v1/mumineen/with-passes?event_id={event_id}"
    assert client.get(url, headers=auth_headers(1001)).status_code == 403
    response = client.get(url, headers=admin_headers)
    assert response.status_code == 200
    assert len(response.json()) == 5
    assert client.get("/api/v1/mumineen/with-passes?event_id=999", headers=admin_headers).status_code == 404


def test_create_update_delete(client, admin_headers) -> None:
    payload = {"its_id": 40486549, "fullname": "Maleka bai S", "gender": "female", "age": 73}
    created = client.post("/api/v1/mumineen/", json=payload, headers=admin_headers)
    assert created.status_code == 201
    assert created.json()["jamaat"] is None

    assert client.post("/api/v1/mumineen/", json=payload, headers=admin_headers).status_code == 409

    updated = client.put("/api/v1/mumineen/40486549", json={"jamaat": "COLOMBO"}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["jamaat"] == "COLOMBO"
    assert updated.json()["fullname"] == "Maleka bai S"

    deleted = client.delete("/api/v1/mumineen/40486549", headers=admin_headers)
    assert deleted.json() == {"message": "Mumineen record deleted successfully"}
    assert client.delete("/api/v1/mumineen/40486549", headers=admin_headers).status_code == 404


def test_writes_need_admin(client, family) -> None:
    payload = {"its_id": 7, "fullname": "X", "gender": "male"}
    assert client.post("/api/v1/mumineen/", json=payload, headers=auth_headers(1001)).status_code == 403
    assert client.delete("/api/v1/mumineen/1002", headers=auth_headers(1001)).status_code == 403


def test_bulk_upload_syncs_registry(client, family, admin_headers, seed) -> None:
    response = client.post(
        "/api/v1/mumineen/bulk-upload",
        files={"file": ("roster.csv", ROSTER.encode("utf-8"), "text/csv")},
        headers=admin_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["summary"] == {"processed": 2, "deleted": 3, "upserted": 2}
    assert [r["its_id"] for r in seed.query("SELECT its_id FROM mumineens ORDER BY its_id")] == [1001, 1002]


def test_bulk_upload_rejects_bad_files(client, family, admin_headers, seed) -> None:
    wrong_type = client.post(
        "/api/v1/mumineen/bulk-upload",
        files={"file": ("roster.xlsx", b"its_id\n1\n", "application/octet-stream")},
        headers=admin_headers,
    )
    assert wrong_type.status_code == 422

    missing_id = client.post(
        "/api/v1/mumineen/bulk-upload",
        files={"file": ("roster.csv", b"its_id,fullname\n,Nobody\n", "text/csv")},
        headers=admin_headers,
    )
    assert missing_id.status_code == 422
    assert len(seed.query("SELECT its_id FROM mumineens")) == 5


def test_bulk_upload_rejects_overlong_name_and_keeps_records_readable(client, family, admin_headers) -> None:
    roster = "its_id,hof_id,fullname,gender,age\n1001,,%s,male,45\n" % ("A" * 300)
    response = client.post(
        "/api/v1/mumineen/bulk-upload",
        files={"file": ("roster.csv", roster.encode("utf-8"), "text/csv")},
        headers=admin_headers,
    )
    assert response.status_code == 422
    assert "fullname" in response.json()["detail"]

    own = client.get("/api/v1/mumineen/", headers=auth_headers(1001))
    assert own.status_code == 200
    assert own.json()["fullname"] == "Member 1001"


def test_bulk_upload_needs_admin(client, family) -> None:
    response = client.post(
        "/api/v1/mumineen/bulk-upload",
        files={"file": ("roster.csv", ROSTER.encode("utf-8"), "text/csv")},
        headers=auth_headers(1001),
    )
    assert response.status_code == 403


def test_sample_csv(client, admin_headers) -> None:
    response = client.get("/api/v1/mumineen/sample-csv", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "sample_mumineen_upload.csv" in response.headers["content-disposition"]
    assert response.text.startswith("its_id,hof_id,fullname")
