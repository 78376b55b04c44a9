from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OperatorCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    role: str = "Operator"
    status: str = "Inactive"


class OperatorUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    role: Optional[str] = None
    status: Optional[str] = None


class OperatorOut(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: int
    name: str
    role: str = "Operator"
    status: str = "Inactive"


class OperatorDeleteOut(BaseModel):
    message: str
    deletedPads: int
