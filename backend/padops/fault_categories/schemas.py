from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FaultCategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None


class FaultCategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None


class FaultCategoryOut(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
