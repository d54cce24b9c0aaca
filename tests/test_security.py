"""Tokens, roles and ITS OneLogin payload decryption."""

import base64

from conftest import ADMIN_ITS, ITS_KEY
from miqaat_api.app.core.its_crypto import decrypt_its_id, encrypt_its_id
from miqaat_api.app.core.security import create_access_token, decode_access_token, roles_for


def test_token_round_trip() -> None:
    token = create_access_token({"sub": "1001"})
    payload = decode_access_token(token)
    assert payload is not None
    assert payload["sub"] == "1001"
    assert "exp" in payload


def test_expired_token_is_rejected() -> None:
    token = create_access_token({"sub": "1001"}, expires_delta=-10)
    assert decode_access_token(token) is None


def test_tampered_token_is_rejected() -> None:
    header, payload, signature = create_access_token({"sub": "1001"}).split(".")
    forged = base64.urlsafe_b64encode(b'{"sub":"30361114","exp":9999999999}').rstrip(b"=").decode()
    assert decode_access_token(f"{header}.{forged}.{signature}") is None


def test_malformed_tokens_are_rejected() -> None:
    assert decode_access_token("not-a-token") is None
    assert decode_access_token("a.b.c") is None


def test_roles_come_from_configuration() -> None:
    assert roles_for(ADMIN_ITS) == ["admin"]
    assert roles_for(1001) == []


def test_its_payload_round_trip() -> None:
    encrypted = encrypt_its_id("30361114", key=ITS_KEY)
    assert decrypt_its_id(encrypted) == "30361114"


def test_its_payload_uses_fresh_iv() -> None:
    assert encrypt_its_id("30361114") != encrypt_its_id("30361114")


def test_invalid_its_payloads_decrypt_to_none() -> None:
    assert decrypt_its_id("") is None
    assert decrypt_its_id("not base64!") is None
    # Shorter than one IV.
    assert decrypt_its_id(base64.b64encode(b"short").decode()) is None
    # IV plus a partial block.
    assert decrypt_its_id(base64.b64encode(b"\0" * 16 + b"abc").decode()) is None
