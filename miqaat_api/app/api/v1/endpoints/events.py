"""
Event endpoints for API v1.

These routes provide CRUD operations for events.  Any signed-in caller
may read events; creating, changing and deleting them requires the
admin role.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from miqaat_api.app.core.exceptions import ConflictError
from miqaat_api.app.core.security import get_current_user, require_roles
from miqaat_api.app.schemas.event import EventCreate, EventRead, EventUpdate
from miqaat_api.app.services.event_service import EventService

router = APIRouter()


@router.post("/", response_model=EventRead, status_code=status.HTTP_201_CREATED)
async def create_event(
    event: EventCreate,
    current_user: dict = Depends(require_roles("admin")),
) -> EventRead:
    """Create a new event.

    Answers 409 when the name is taken and 404 when ``miqaat_id``
    points at a missing miqaat.
    """
    try:
        return await EventService.create_event(event, current_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.get("/", response_model=List[EventRead])
async def list_events(
    miqaat_id: Optional[int] = Query(None),
    current_user: dict = Depends(get_current_user),
) -> List[EventRead]:
    return await EventService.list_events(miqaat_id=miqaat_id)


@router.get("/{event_id}", response_model=EventRead)
async def get_event(event_id: int, current_user: dict = Depends(get_current_user)) -> EventRead:
    try:
        return await EventService.get_event(event_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.put("/{event_id}", response_model=EventRead)
async def update_event(
    event_id: int,
    updates: EventUpdate,
    current_user: dict = Depends(require_roles("admin")),
) -> EventRead:
    """Update an existing event.  Any unspecified fields remain unchanged."""
    update_dict = {k: v for k, v in updates.model_dump().items() if v is not None}
    try:
        return await EventService.update_event(event_id, update_dict, current_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: int,
    current_user: dict = Depends(require_roles("admin")),
) -> None:
    try:
        await EventService.delete_event(event_id, current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
