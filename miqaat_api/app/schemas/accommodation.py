"""Pydantic models for accommodations booked for an attendee during a miqaat."""

from typing import Optional

from pydantic import BaseModel, Field


class AccommodationCreate(BaseModel):
    miqaat_id: int = Field(..., examples=[1])
    its_id: int = Field(..., examples=[30361114])
    type: str = Field(..., min_length=1, max_length=255, examples=["Hotel"])
    name: str = Field(..., min_length=1, max_length=255, examples=["Hilton Colombo"])
    address: str = Field(..., min_length=1, examples=["2 Sir Chittampalam A Gardiner Mawatha"])


class AccommodationUpdate(BaseModel):
    miqaat_id: Optional[int] = None
    its_id: Optional[int] = None
    type: Optional[str] = Field(None, min_length=1, max_length=255)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, min_length=1)


class AccommodationRead(AccommodationCreate):
    id: int

    model_config = {
        "from_attributes": True,
    }
