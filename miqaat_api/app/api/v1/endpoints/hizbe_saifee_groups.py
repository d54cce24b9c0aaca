"""Hizbe Saifee group endpoints for API v1.  Every route requires the admin role."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from miqaat_api.app.core.exceptions import ConflictError
from miqaat_api.app.core.security import require_roles
from miqaat_api.app.schemas.hizbe_saifee_group import (
    HizbeSaifeeGroupCreate,
    HizbeSaifeeGroupRead,
    HizbeSaifeeGroupUpdate,
)
from miqaat_api.app.schemas.pass_preference import MessageResponse
from miqaat_api.app.services.hizbe_saifee_group_service import HizbeSaifeeGroupService

router = APIRouter()


def _require_items(items: list) -> None:
    if not items:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body must be a non-empty array of group objects.",
        )


@router.get("/", response_model=List[HizbeSaifeeGroupRead])
async def list_groups(current_user: dict = Depends(require_roles("admin"))) -> List[HizbeSaifeeGroupRead]:
    return await HizbeSaifeeGroupService.list_groups()


@router.post("/", response_model=List[HizbeSaifeeGroupRead], status_code=status.HTTP_201_CREATED)
async def create_groups(
    items: List[HizbeSaifeeGroupCreate],
    current_user: dict = Depends(require_roles("admin")),
) -> List[HizbeSaifeeGroupRead]:
    """Create several groups.  ``group_no`` clashes reject the whole batch with 409."""
    _require_items(items)
    try:
        return await HizbeSaifeeGroupService.create_groups(items, current_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.put("/", response_model=List[HizbeSaifeeGroupRead])
async def update_groups(
    items: List[HizbeSaifeeGroupUpdate],
    current_user: dict = Depends(require_roles("admin")),
) -> List[HizbeSaifeeGroupRead]:
    _require_items(items)
    try:
        return await HizbeSaifeeGroupService.update_groups(items, current_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.get("/{group_id}", response_model=HizbeSaifeeGroupRead)
async def get_group(group_id: int, current_user: dict = Depends(require_roles("admin"))) -> HizbeSaifeeGroupRead:
    try:
        return await HizbeSaifeeGroupService.get_group(group_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.delete("/{group_id}", response_model=MessageResponse)
async def delete_group(group_id: int, current_user: dict = Depends(require_roles("admin"))) -> MessageResponse:
    try:
        await HizbeSaifeeGroupService.delete_group(group_id, current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return MessageResponse(message="Hizbe Saifee Group deleted successfully.")
