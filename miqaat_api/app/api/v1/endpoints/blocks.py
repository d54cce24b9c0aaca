"""Block endpoints for API v1."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from miqaat_api.app.core.security import get_current_user, require_roles
from miqaat_api.app.schemas.block import BlockCreate, BlockRead, BlockUpdate
from miqaat_api.app.services.block_service import BlockService

router = APIRouter()


@router.get("/", response_model=List[BlockRead])
async def list_blocks(
    vaaz_center_id: Optional[int] = Query(None),
    current_user: dict = Depends(get_current_user),
) -> List[BlockRead]:
    return await BlockService.list_blocks(vaaz_center_id)


@router.post("/", response_model=BlockRead, status_code=status.HTTP_201_CREATED)
async def create_block(
    block: BlockCreate,
    current_user: dict = Depends(require_roles("admin")),
) -> BlockRead:
    try:
        return await BlockService.create(block, current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.get("/{block_id}", response_model=BlockRead)
async def get_block(block_id: int, current_user: dict = Depends(get_current_user)) -> BlockRead:
    try:
        return await BlockService.get(block_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.put("/{block_id}", response_model=BlockRead)
async def update_block(
    block_id: int,
    updates: BlockUpdate,
    current_user: dict = Depends(require_roles("admin")),
) -> BlockRead:
    """Partial update.  ``min_age``, ``max_age`` and ``gender`` may be cleared with null."""
    update_dict = updates.model_dump(exclude_unset=True)
    for required in ("vaaz_center_id", "type", "capacity"):
        if required in update_dict and update_dict[required] is None:
            update_dict.pop(required)
    try:
        return await BlockService.update(block_id, update_dict, current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.delete("/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_block(
    block_id: int,
    current_user: dict = Depends(require_roles("admin")),
) -> None:
    try:
        await BlockService.delete(block_id, current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
