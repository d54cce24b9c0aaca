"""
Accommodation endpoints for API v1.

Every route is limited to the caller's household.  A record owned by
someone outside it answers 403; an unknown accommodation id answers 404.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from miqaat_api.app.core.exceptions import FamilyAccessError
from miqaat_api.app.core.security import get_current_user
from miqaat_api.app.schemas.accommodation import AccommodationCreate, AccommodationRead, AccommodationUpdate
from miqaat_api.app.schemas.pass_preference import MessageResponse
from miqaat_api.app.services.accommodation_service import AccommodationService

router = APIRouter()


@router.get("/", response_model=List[AccommodationRead])
async def list_accommodations(
    its_id: Optional[int] = Query(None, description="One household member; defaults to the whole household"),
    miqaat_id: Optional[int] = Query(None),
    type: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
) -> List[AccommodationRead]:
    try:
        return await AccommodationService.list_accommodations(
            current_user["its_id"], its_id=its_id, miqaat_id=miqaat_id, type=type
        )
    except FamilyAccessError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e


@router.post("/", response_model=AccommodationRead, status_code=status.HTTP_201_CREATED)
async def create_accommodation(
    data: AccommodationCreate,
    current_user: dict = Depends(get_current_user),
) -> AccommodationRead:
    try:
        return await AccommodationService.create(data, current_user["its_id"])
    except FamilyAccessError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.get("/{accommodation_id}", response_model=AccommodationRead)
async def get_accommodation(
    accommodation_id: int,
    current_user: dict = Depends(get_current_user),
) -> AccommodationRead:
    try:
        return await AccommodationService.get(accommodation_id, current_user["its_id"])
    except FamilyAccessError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.put("/{accommodation_id}", response_model=AccommodationRead)
async def update_accommodation(
    accommodation_id: int,
    updates: AccommodationUpdate,
    current_user: dict = Depends(get_current_user),
) -> AccommodationRead:
    update_dict = {k: v for k, v in updates.model_dump().items() if v is not None}
    try:
        return await AccommodationService.update(accommodation_id, update_dict, current_user["its_id"])
    except FamilyAccessError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.delete("/{accommodation_id}", response_model=MessageResponse)
async def delete_accommodation(
    accommodation_id: int,
    current_user: dict = Depends(get_current_user),
) -> MessageResponse:
    try:
        await AccommodationService.delete(accommodation_id, current_user["its_id"])
    except FamilyAccessError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return MessageResponse(message="Accommodation deleted successfully")
