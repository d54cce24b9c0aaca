"""Pydantic models for Hizbe Saifee groups."""

from typing import Optional

from pydantic import BaseModel, Field, HttpUrl


class HizbeSaifeeGroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    capacity: int = Field(..., ge=1)
    group_no: int
    whatsapp_link: Optional[HttpUrl] = None


class HizbeSaifeeGroupUpdate(BaseModel):
    id: int
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    capacity: Optional[int] = Field(None, ge=1)
    group_no: Optional[int] = None
    whatsapp_link: Optional[HttpUrl] = None


class HizbeSaifeeGroupRead(BaseModel):
    id: int
    name: str
    capacity: int
    group_no: int
    whatsapp_link: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }
