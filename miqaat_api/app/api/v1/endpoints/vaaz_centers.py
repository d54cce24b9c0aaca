"""Vaaz center endpoints for API v1."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from miqaat_api.app.core.security import get_current_user, require_roles
from miqaat_api.app.schemas.vaaz_center import VaazCenterCreate, VaazCenterRead, VaazCenterUpdate
from miqaat_api.app.services.vaaz_center_service import VaazCenterService

router = APIRouter()


@router.get("/", response_model=List[VaazCenterRead])
async def list_vaaz_centers(
    event_id: Optional[int] = Query(None, description="Only centers of this event"),
    current_user: dict = Depends(get_current_user),
) -> List[VaazCenterRead]:
    return await VaazCenterService.list_vaaz_centers(event_id)


@router.post("/", response_model=VaazCenterRead, status_code=status.HTTP_201_CREATED)
async def create_vaaz_center(
    center: VaazCenterCreate,
    current_user: dict = Depends(require_roles("admin")),
) -> VaazCenterRead:
    try:
        return await VaazCenterService.create(center, current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.get("/{center_id}", response_model=VaazCenterRead)
async def get_vaaz_center(center_id: int, current_user: dict = Depends(get_current_user)) -> VaazCenterRead:
    try:
        return await VaazCenterService.get(center_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.put("/{center_id}", response_model=VaazCenterRead)
async def update_vaaz_center(
    center_id: int,
    updates: VaazCenterUpdate,
    current_user: dict = Depends(require_roles("admin")),
) -> VaazCenterRead:
    """Partial update.  Coordinates, gender capacities and ``event_id`` may be cleared with null."""
    update_dict = updates.model_dump(exclude_unset=True)
    for required in ("name", "est_capacity"):
        if required in update_dict and update_dict[required] is None:
            update_dict.pop(required)
    try:
        return await VaazCenterService.update(center_id, update_dict, current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.delete("/{center_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vaaz_center(
    center_id: int,
    current_user: dict = Depends(require_roles("admin")),
) -> None:
    try:
        await VaazCenterService.delete(center_id, current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
