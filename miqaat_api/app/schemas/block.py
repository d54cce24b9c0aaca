"""Pydantic models for blocks, the seating sections inside a vaaz center."""

from typing import Optional

from pydantic import BaseModel, Field

from ..core.enums import BlockGender


class BlockBase(BaseModel):
    vaaz_center_id: int = Field(..., examples=[1])
    type: str = Field(..., min_length=1, max_length=255, examples=["Ground floor"])
    capacity: int = Field(..., ge=0, examples=[250])
    min_age: Optional[int] = None
    max_age: Optional[int] = None
    gender: Optional[BlockGender] = None


class BlockCreate(BlockBase):
    pass


class BlockUpdate(BaseModel):
    vaaz_center_id: Optional[int] = None
    type: Optional[str] = Field(None, min_length=1, max_length=255)
    capacity: Optional[int] = Field(None, ge=0)
    min_age: Optional[int] = None
    max_age: Optional[int] = None
    gender: Optional[BlockGender] = None


class BlockRead(BlockBase):
    id: int

    model_config = {
        "from_attributes": True,
    }
