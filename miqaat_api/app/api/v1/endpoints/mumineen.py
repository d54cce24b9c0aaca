"""
Attendee (mumineen) endpoints for API v1.

Attendees read their own record and their household; administrators
maintain the registry, either one record at a time or by uploading the
full roster as CSV.  Static paths are declared before ``/{its_id}`` so
they are not captured by it.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status

from miqaat_api.app.core.exceptions import (
    ConflictError,
    FamilyAccessError,
    MalformedRosterError,
    RosterStorageError,
)
from miqaat_api.app.core.security import get_current_user, is_admin, require_roles
from miqaat_api.app.schemas.mumineen import FamilyMemberRead, MumineenCreate, MumineenRead, MumineenUpdate
from miqaat_api.app.schemas.pass_preference import MessageResponse
from miqaat_api.app.schemas.roster import RosterUploadResponse
from miqaat_api.app.services.family_service import FamilyService
from miqaat_api.app.services.mumineen_service import MumineenService
from miqaat_api.app.services.roster_service import RosterService

logger = logging.getLogger(__name__)

router = APIRouter()

ROSTER_EXTENSIONS = (".csv", ".txt")


@router.get("/", response_model=MumineenRead)
async def read_own_record(current_user: dict = Depends(get_current_user)) -> MumineenRead:
    """Return the caller's own registry record.

    Only members of the jamaats listed in ``ALLOWED_JAMAATS`` are
    found when that setting is used.
    """
    try:
        return await MumineenService.get_own(current_user["its_id"])
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post("/", response_model=MumineenRead, status_code=status.HTTP_201_CREATED)
async def create_mumineen(
    data: MumineenCreate,
    current_user: dict = Depends(require_roles("admin")),
) -> MumineenRead:
    try:
        return await MumineenService.create(data, current_user)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.get("/family", response_model=List[FamilyMemberRead])
async def read_family(
    event_id: int = Query(..., description="Event whose pass preferences are attached"),
    current_user: dict = Depends(get_current_user),
) -> List[FamilyMemberRead]:
    """Household members older than five with their pass preferences for ``event_id``."""
    try:
        return await MumineenService.family_with_passes(current_user["its_id"], event_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.get("/with-passes", response_model=List[FamilyMemberRead])
async def read_all_with_passes(
    event_id: int = Query(...),
    current_user: dict = Depends(require_roles("admin")),
) -> List[FamilyMemberRead]:
    try:
        return await MumineenService.all_with_passes(event_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post("/bulk-upload", response_model=RosterUploadResponse)
async def bulk_upload(
    file: UploadFile = File(...),
    current_user: dict = Depends(require_roles("admin")),
) -> RosterUploadResponse:
    """Synchronise the registry with an uploaded CSV roster.

    Attendees missing from the file are deleted together with their
    pass preferences; every row is inserted or updated.  Malformed
    files answer 422 and storage failures 500; in both cases nothing
    changes.
    """
    filename = (file.filename or "").lower()
    if not filename.endswith(ROSTER_EXTENSIONS):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="The roster must be a .csv or .txt file.",
        )
    raw = await file.read()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="The roster must be UTF-8 encoded text.",
        ) from e
    try:
        rows = RosterService.parse_roster(text)
        summary = await RosterService.sync(rows, actor_its_id=current_user["its_id"])
    except MalformedRosterError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    except RosterStorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"An error occurred during bulk processing: {e}",
        ) from e
    return RosterUploadResponse(message="Bulk upload completed successfully.", summary=summary)


@router.get("/sample-csv")
async def sample_csv(current_user: dict = Depends(require_roles("admin"))) -> Response:
    return Response(
        content=RosterService.sample_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="sample_mumineen_upload.csv"'},
    )


@router.get("/{its_id}", response_model=MumineenRead)
async def read_mumineen(its_id: int, current_user: dict = Depends(get_current_user)) -> MumineenRead:
    """Return one attendee of the caller's household.

    Administrators may read any record.  Anyone else gets 403 for an
    ITS id outside their household, whether or not it exists.
    """
    if not is_admin(current_user):
        try:
            await FamilyService.ensure_family_member(current_user["its_id"], its_id)
        except FamilyAccessError as e:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    try:
        return await MumineenService.get(its_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.put("/{its_id}", response_model=MumineenRead)
async def update_mumineen(
    its_id: int,
    updates: MumineenUpdate,
    current_user: dict = Depends(require_roles("admin")),
) -> MumineenRead:
    update_dict = updates.model_dump(exclude_unset=True)
    try:
        return await MumineenService.update(its_id, update_dict, current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.delete("/{its_id}", response_model=MessageResponse)
async def delete_mumineen(
    its_id: int,
    current_user: dict = Depends(require_roles("admin")),
) -> MessageResponse:
    try:
        await MumineenService.delete(its_id, current_user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return MessageResponse(message="Mumineen record deleted successfully")
