"""Request and response bodies for ITS login."""

from typing import List

from pydantic import BaseModel, Field

from .mumineen import MumineenRead


class LoginRequest(BaseModel):
    """The ITS OneLogin identity, encrypted as base64(IV || AES-256-CBC ciphertext)."""

    its_id: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class CurrentUserRead(BaseModel):
    its_id: int
    roles: List[str] = []
    mumineen: MumineenRead | None = None
