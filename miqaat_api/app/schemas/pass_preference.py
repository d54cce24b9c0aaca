"""
Pydantic models for pass preferences.

Bulk endpoints accept JSON arrays of the ``*Create``/``*Update`` models;
FastAPI rejects an empty or non-array body before the service runs.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from ..core.enums import Gender, PassType


class PassPreferenceCreate(BaseModel):
    its_id: int = Field(..., examples=[30361114])
    event_id: int = Field(..., examples=[1])
    pass_type: Optional[PassType] = None
    block_id: Optional[int] = None
    vaaz_center_id: Optional[int] = None


class PassPreferenceUpdate(BaseModel):
    """Update of an existing preference, keyed by ``its_id`` (and ``event_id`` when given)."""

    its_id: int
    event_id: Optional[int] = None
    pass_type: Optional[PassType] = None
    block_id: Optional[int] = None
    vaaz_center_id: Optional[int] = None


class PassPreferenceRead(BaseModel):
    id: int
    its_id: int
    event_id: int
    pass_type: Optional[PassType] = None
    block_id: Optional[int] = None
    vaaz_center_id: Optional[int] = None
    vaaz_center_name: Optional[str] = None
    is_locked: bool = False

    model_config = {
        "from_attributes": True,
    }


class VaazCenterPreference(BaseModel):
    its_id: int
    event_id: int
    vaaz_center_id: int


class PassTypePreference(BaseModel):
    its_id: int
    event_id: int
    pass_type: PassType


class LockStatusUpdate(BaseModel):
    its_id: List[int] = Field(..., min_length=1)
    is_locked: bool


class BulkVaazCenterAssignment(BaseModel):
    event_id: int
    vaaz_center_id: int
    its_ids: List[int] = Field(..., min_length=1)
    gender: Gender


class BlockSummary(BaseModel):
    id: int
    type: str
    capacity: int
    gender: Optional[str] = None
    min_age: Optional[int] = None
    max_age: Optional[int] = None
    block_issued_passes: int
    block_availability: Union[int, str]


class VaazCenterPassSummary(BaseModel):
    id: int
    name: str
    vaaz_center_capacity: int
    vaaz_center_issued_passes: int
    vaaz_center_availability: Union[int, str]
    blocks: List[BlockSummary] = []


class VaazCenterGenderSummary(BaseModel):
    id: int
    name: str
    total_capacity: Union[int, str]
    total_issued_passes: int
    total_availability: Union[int, str]
    male_capacity: Union[int, str]
    male_issued_passes: int
    male_availability: Union[int, str]
    female_capacity: Union[int, str]
    female_issued_passes: int
    female_availability: Union[int, str]


class MessageResponse(BaseModel):
    message: str
