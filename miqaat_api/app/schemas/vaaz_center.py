"""Pydantic models for vaaz centers (venues)."""

from typing import Optional

from pydantic import BaseModel, Field


class VaazCenterBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Saifee Masjid"])
    est_capacity: int = Field(..., ge=0, examples=[1500])
    male_capacity: Optional[int] = Field(None, ge=0, examples=[800])
    female_capacity: Optional[int] = Field(None, ge=0, examples=[700])
    lat: Optional[float] = Field(None, ge=-90, le=90)
    long: Optional[float] = Field(None, ge=-180, le=180)
    event_id: Optional[int] = None


class VaazCenterCreate(VaazCenterBase):
    pass


class VaazCenterUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    est_capacity: Optional[int] = Field(None, ge=0)
    male_capacity: Optional[int] = Field(None, ge=0)
    female_capacity: Optional[int] = Field(None, ge=0)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    long: Optional[float] = Field(None, ge=-180, le=180)
    event_id: Optional[int] = None


class VaazCenterRead(VaazCenterBase):
    id: int

    model_config = {
        "from_attributes": True,
    }
