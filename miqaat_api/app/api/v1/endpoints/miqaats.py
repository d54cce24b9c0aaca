"""Miqaat endpoints for API v1.  Reads are open to any signed-in caller; writes need the admin role."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from miqaat_api.app.core.exceptions import ConflictError
from miqaat_api.app.core.security import get_current_user, require_roles
from miqaat_api.app.schemas.miqaat import MiqaatCreate, MiqaatRead, MiqaatUpdate
from miqaat_api.app.services.miqaat_service import MiqaatService

router = APIRouter()


@router.get("/", response_model=List[MiqaatRead])
async def list_miqaats(current_user: dict = Depends(get_current_user)) -> List[MiqaatRead]:
    """List every miqaat with its events."""
    return await MiqaatService.list_miqaats()


@router.post("/", response_model=MiqaatRead, status_code=status.HTTP_201_CREATED)
async def create_miqaat(
    miqaat: MiqaatCreate,
    current_user: dict = Depends(require_roles("admin")),
) -> MiqaatRead:
    try:
        return await MiqaatService.create_miqaat(miqaat, current_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.get("/{miqaat_id}", response_model=MiqaatRead)
async def get_miqaat(miqaat_id: int, current_user: dict = Depends(get_current_user)) -> MiqaatRead:
    try:
        return await MiqaatService.get_miqaat(miqaat_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.put("/{miqaat_id}", response_model=MiqaatRead)
async def update_miqaat(
    miqaat_id: int,
    updates: MiqaatUpdate,
    current_user: dict = Depends(require_roles("admin")),
) -> MiqaatRead:
    """Update a miqaat.  Unspecified fields stay unchanged."""
    update_dict = {k: v for k, v in updates.model_dump().items() if v is not None}
    try:
        return await MiqaatService.update_miqaat(miqaat_id, update_dict, current_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.delete("/{miqaat_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_miqaat(
    miqaat_id: int,
    current_user: dict = Depends(require_roles("admin")),
) -> None:
    try:
        await MiqaatService.delete_miqaat(miqaat_id, current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
