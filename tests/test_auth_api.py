"""ITS login and the current-user endpoint."""

from conftest import ADMIN_ITS, auth_headers
from miqaat_api.app.core.its_crypto import encrypt_its_id


def _login(client, plain: str):
    return client.post("/api/v1/auth/login", json={"its_id": encrypt_its_id(plain)})


def test_registered_attendee_can_log_in(client, family) -> None:
    response = _login(client, "1001")
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["its_id"] == 1001
    assert me.json()["roles"] == []
    assert me.json()["mumineen"]["fullname"] == "Member 1001"


def test_unregistered_attendee_is_refused(client, family) -> None:
    response = _login(client, "5555")
    assert response.status_code == 401
    assert response.json()["detail"] == "ITS ID is not registered."


def test_admin_without_registry_record_can_log_in(client) -> None:
    response = _login(client, str(ADMIN_ITS))
    assert response.status_code == 200
    me = client.get("/api/v1/auth/me", headers=auth_headers(ADMIN_ITS))
    assert me.json()["roles"] == ["admin"]
    assert me.json()["mumineen"] is None


def test_corrupted_payload_is_rejected(client) -> None:
    response = client.post("/api/v1/auth/login", json={"its_id": "not base64!"})
    assert response.status_code == 422
    assert response.json()["detail"] == "The provided ITS ID is invalid or corrupted."


def test_non_numeric_identity_is_rejected(client) -> None:
    assert _login(client, "abc").status_code == 422


def test_missing_or_bad_token(client) -> None:
    assert client.get("/api/v1/auth/me").status_code == 401
    bad = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer nope"})
    assert bad.status_code == 401
