from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class IncidentTypeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    fault_category: Optional[str] = None


class IncidentTypeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    fault_category: Optional[str] = None


class IncidentTypeOut(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: int
    name: str
    description: str = ""
    fault_category: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
