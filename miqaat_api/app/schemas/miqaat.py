"""Pydantic models for miqaats (occasions grouping several events)."""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.enums import MiqaatStatus
from .event import EventRead


class MiqaatCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Ashara Mubaraka 1447"])
    status: MiqaatStatus = MiqaatStatus.ACTIVE


class MiqaatUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[MiqaatStatus] = None


class MiqaatRead(MiqaatCreate):
    id: int
    events: List[EventRead] = []

    model_config = {
        "from_attributes": True,
    }
