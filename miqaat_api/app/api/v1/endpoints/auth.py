"""
Authentication endpoints for API v1.

Attendees sign in through ITS OneLogin, which hands the client an
encrypted ITS id.  ``/auth/login`` decrypts it and exchanges it for a
bearer token whose ``sub`` claim is the plain ITS id.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from miqaat_api.app.core.config import settings
from miqaat_api.app.core.its_crypto import decrypt_its_id
from miqaat_api.app.core.security import create_access_token, get_current_user, roles_for
from miqaat_api.app.schemas.auth import CurrentUserRead, LoginRequest, TokenResponse
from miqaat_api.app.services.mumineen_service import MumineenService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest) -> TokenResponse:
    """Exchange an encrypted ITS id for an access token.

    Answers 422 when the payload cannot be decrypted and 401 when the
    ITS id is neither registered nor listed as an administrator.
    """
    plain = decrypt_its_id(payload.its_id)
    if plain is None or not plain.strip().isdigit():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="The provided ITS ID is invalid or corrupted.",
        )
    its_id = int(plain.strip())
    try:
        await MumineenService.get(its_id)
    except ValueError:
        if not roles_for(its_id):
            logger.info("Login refused for unregistered ITS %s", its_id)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="ITS ID is not registered.",
            )
    token = create_access_token({"sub": str(its_id)})
    return TokenResponse(access_token=token, expires_in=settings.access_token_expire_minutes * 60)


@router.get("/me", response_model=CurrentUserRead)
async def read_me(current_user: dict = Depends(get_current_user)) -> CurrentUserRead:
    """Return the caller's ITS id, roles and registry record (if any)."""
    try:
        record = await MumineenService.get(current_user["its_id"])
    except ValueError:
        record = None
    return CurrentUserRead(its_id=current_user["its_id"], roles=current_user["roles"], mumineen=record)
