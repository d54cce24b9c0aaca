"""Schemas used by the roster upload: row validation and the sync report."""

from typing import Optional

from pydantic import BaseModel, Field

from .mumineen import MumineenBase


class RosterRow(MumineenBase):
    """One roster row, held to the limits ``MumineenRead`` enforces on load.

    ``gender`` stays free text so rosters may carry values outside
    ``Gender``.
    """

    its_id: int = Field(..., gt=0)
    gender: Optional[str] = None


class RosterSyncSummary(BaseModel):
    """Counts reported after a roster sync.

    ``processed`` and ``upserted`` both equal the number of data rows;
    ``deleted`` is the number of registry records purged because they
    were missing from the roster.
    """

    processed: int
    deleted: int
    upserted: int


class RosterUploadResponse(BaseModel):
    success: bool = True
    message: str
    summary: RosterSyncSummary
