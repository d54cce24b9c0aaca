"""
Pass preference endpoints for API v1.

Attendees create and change the preferences of their household; the
family check answers 403 for anyone else.  Business rule failures are
returned as ``{"detail": {"error_code", "message", "details"}}`` with
the status chosen by the service.  ``/lock`` and
``/assign-vaaz-center`` need the admin role.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from miqaat_api.app.core.enums import PassPreferenceErrorCode
from miqaat_api.app.core.exceptions import FamilyAccessError, PassPreferenceError
from miqaat_api.app.core.security import get_current_user, require_roles
from miqaat_api.app.schemas.pass_preference import (
    BulkVaazCenterAssignment,
    LockStatusUpdate,
    MessageResponse,
    PassPreferenceCreate,
    PassPreferenceRead,
    PassPreferenceUpdate,
    PassTypePreference,
    VaazCenterGenderSummary,
    VaazCenterPassSummary,
    VaazCenterPreference,
)
from miqaat_api.app.services.pass_preference_service import PassPreferenceService

router = APIRouter()


def _require_items(items: list) -> None:
    if not items:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body must be a non-empty array of pass preferences.",
        )


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, PassPreferenceError):
        return HTTPException(status_code=e.status_code, detail=e.to_dict())
    if isinstance(e, FamilyAccessError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/", response_model=List[PassPreferenceRead])
async def list_household_preferences(current_user: dict = Depends(get_current_user)) -> List[PassPreferenceRead]:
    """Pass preferences of every member of the caller's household."""
    try:
        return await PassPreferenceService.list_for_household(current_user["its_id"])
    except ValueError as e:
        raise _http_error(e) from e


@router.get("/summary", response_model=List[VaazCenterPassSummary])
async def pass_summary(
    event_id: int = Query(...),
    vaaz_center_id: Optional[int] = Query(None),
    current_user: dict = Depends(get_current_user),
) -> List[VaazCenterPassSummary]:
    """Issued passes and availability per vaaz center and block."""
    try:
        return await PassPreferenceService.summary(event_id, vaaz_center_id)
    except ValueError as e:
        raise _http_error(e) from e


@router.get("/vaaz-center-summary", response_model=List[VaazCenterGenderSummary])
async def vaaz_center_summary(
    event_id: int = Query(...),
    vaaz_center_id: Optional[int] = Query(None),
    current_user: dict = Depends(get_current_user),
) -> List[VaazCenterGenderSummary]:
    try:
        return await PassPreferenceService.vaaz_center_summary(event_id, vaaz_center_id)
    except ValueError as e:
        raise _http_error(e) from e


@router.get("/pass-types", response_model=List[str])
async def pass_types(current_user: dict = Depends(get_current_user)) -> List[str]:
    return PassPreferenceService.pass_types()


@router.post("/", response_model=List[PassPreferenceRead], status_code=status.HTTP_201_CREATED)
async def create_preferences(
    items: List[PassPreferenceCreate],
    current_user: dict = Depends(get_current_user),
) -> List[PassPreferenceRead]:
    """Create several preferences at once; one failure rejects the batch."""
    _require_items(items)
    try:
        return await PassPreferenceService.create_bulk(items, current_user["its_id"])
    except (PassPreferenceError, FamilyAccessError) as e:
        raise _http_error(e) from e


@router.put("/", response_model=MessageResponse)
async def update_preferences(
    items: List[PassPreferenceUpdate],
    current_user: dict = Depends(get_current_user),
) -> MessageResponse:
    _require_items(items)
    try:
        await PassPreferenceService.update_bulk(items, current_user["its_id"])
    except (PassPreferenceError, FamilyAccessError) as e:
        raise _http_error(e) from e
    return MessageResponse(message="Pass preferences updated successfully.")


@router.delete("/", response_model=MessageResponse)
async def delete_preference(
    its_id: int = Query(...),
    event_id: int = Query(...),
    current_user: dict = Depends(get_current_user),
) -> MessageResponse:
    try:
        await PassPreferenceService.delete(its_id, event_id, current_user["its_id"])
    except (FamilyAccessError, ValueError) as e:
        raise _http_error(e) from e
    return MessageResponse(message="Pass Preference deleted successfully.")


@router.post("/vaaz-center", response_model=List[PassPreferenceRead], status_code=status.HTTP_201_CREATED)
async def create_vaaz_center_preferences(
    items: List[VaazCenterPreference],
    current_user: dict = Depends(get_current_user),
) -> List[PassPreferenceRead]:
    """Create center-only preferences, checking the center's capacity for each attendee's gender."""
    _require_items(items)
    try:
        return await PassPreferenceService.create_vaaz_center_bulk(items, current_user["its_id"])
    except (PassPreferenceError, FamilyAccessError) as e:
        raise _http_error(e) from e


@router.put("/vaaz-center", response_model=MessageResponse)
async def update_vaaz_center_preferences(
    items: List[VaazCenterPreference],
    current_user: dict = Depends(get_current_user),
) -> MessageResponse:
    """Move preferences to another center.  Every failure has a structured body."""
    if not items:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=PassPreferenceError(
                PassPreferenceErrorCode.INVALID_REQUEST_BODY.value,
                "Request body must be a valid JSON array of preferences.",
            ).to_dict(),
        )
    try:
        await PassPreferenceService.update_vaaz_center_bulk(items, current_user["its_id"])
    except PassPreferenceError as e:
        raise _http_error(e) from e
    return MessageResponse(message="Pass preferences updated successfully.")


@router.post("/pass-type", response_model=PassPreferenceRead, status_code=status.HTTP_201_CREATED)
async def create_pass_type(
    item: PassTypePreference,
    current_user: dict = Depends(get_current_user),
) -> PassPreferenceRead:
    try:
        return await PassPreferenceService.create_pass_type(item, current_user["its_id"])
    except (PassPreferenceError, FamilyAccessError) as e:
        raise _http_error(e) from e


@router.put("/pass-type", response_model=PassPreferenceRead)
async def update_pass_type(
    item: PassTypePreference,
    current_user: dict = Depends(get_current_user),
) -> PassPreferenceRead:
    try:
        return await PassPreferenceService.update_pass_type(item, current_user["its_id"])
    except (PassPreferenceError, FamilyAccessError, ValueError) as e:
        raise _http_error(e) from e


@router.put("/lock", response_model=MessageResponse)
async def update_lock_status(
    payload: LockStatusUpdate,
    current_user: dict = Depends(require_roles("admin")),
) -> MessageResponse:
    updated = await PassPreferenceService.set_lock(payload.its_id, payload.is_locked, current_user["its_id"])
    return MessageResponse(message=f"Lock status updated for {updated} records.")


@router.put("/assign-vaaz-center", response_model=MessageResponse)
async def assign_vaaz_center(
    payload: BulkVaazCenterAssignment,
    current_user: dict = Depends(require_roles("admin")),
) -> MessageResponse:
    """Assign attendees of one gender to a center, rejecting the batch when it would overflow."""
    try:
        updated = await PassPreferenceService.assign_vaaz_center(payload, current_user["its_id"])
    except PassPreferenceError as e:
        raise _http_error(e) from e
    return MessageResponse(message=f"Successfully assigned {updated} Mumineen to the Vaaz Center.")
