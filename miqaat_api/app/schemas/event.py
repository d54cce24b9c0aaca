"""
Pydantic models for event data.

``EventBase`` contains shared fields; ``EventCreate`` is used for
requests, ``EventRead`` adds the ``id`` for responses and
``EventUpdate`` makes every field optional.
"""

from typing import Optional

from pydantic import BaseModel, Field

from ..core.enums import EventStatus


class EventBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Ashara Mubaraka - Day 1"])
    status: EventStatus = Field(EventStatus.ACTIVE, examples=["active"])
    miqaat_id: Optional[int] = Field(None, examples=[1])


class EventCreate(EventBase):
    """Schema for creating an event."""
    pass


class EventRead(EventBase):
    """Schema for reading an event from the API."""

    id: int
    model_config = {
        "from_attributes": True,
    }


class EventUpdate(BaseModel):
    """Schema for updating an event.

    All fields are optional; only provided fields will be updated.
    """
    name: str | None = Field(None, min_length=1, max_length=255)
    status: EventStatus | None = None
    miqaat_id: int | None = None
