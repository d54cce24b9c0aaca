"""
Pydantic models for attendee (mumineen) records.

``MumineenBase`` carries every descriptive column of the registry.
``MumineenCreate`` adds the mandatory ``its_id`` key for registration,
``MumineenUpdate`` makes everything optional for partial updates, and
``MumineenRead`` is the shape returned by the API.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.enums import Gender
from .pass_preference import PassPreferenceRead


class MumineenBase(BaseModel):
    hof_id: Optional[int] = Field(None, examples=[30361114])
    fullname: Optional[str] = Field(None, max_length=255, examples=["Maleka bai S"])
    gender: Optional[Gender] = Field(None, examples=["female"])
    age: Optional[int] = Field(None, ge=0, examples=[73])
    jamaat: Optional[str] = Field(None, examples=["COLOMBO"])
    hizbe_saifee_group_id: Optional[int] = None
    idara: Optional[str] = None
    category: Optional[str] = None
    prefix: Optional[str] = None
    title: Optional[str] = None
    venue_waaz: Optional[str] = None
    city: Optional[str] = None
    local_mehman: Optional[bool] = False
    arr_place_date: Optional[str] = None
    flight_code: Optional[str] = None
    whatsapp_link_clicked: Optional[bool] = False
    daily_trans: Optional[bool] = False
    acc_arranged_at: Optional[str] = None
    acc_zone: Optional[str] = None
    mobile: Optional[str] = None
    country: Optional[str] = None


class MumineenCreate(MumineenBase):
    """Schema for registering a single attendee."""

    its_id: int = Field(..., gt=0, examples=[30361114])
    fullname: str = Field(..., max_length=255, examples=["Maleka bai S"])
    gender: Gender = Field(..., examples=["female"])


class MumineenUpdate(MumineenBase):
    """Schema for updating an attendee.

    All fields are optional; only fields present in the request body are
    written.
    """

    local_mehman: Optional[bool] = None
    whatsapp_link_clicked: Optional[bool] = None
    daily_trans: Optional[bool] = None


class MumineenRead(MumineenBase):
    its_id: int
    # Roster uploads may store genders outside ``Gender``.
    gender: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class FamilyMemberRead(MumineenRead):
    """A household member together with their pass preferences for one event."""

    pass_preferences: List[PassPreferenceRead] = []
