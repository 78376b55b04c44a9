from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PadIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    location: str = Field(min_length=1, max_length=255)
    operator_id: int


class PadOut(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: int
    name: str
    location: str
    operator_id: int
    deleted: bool = False


class PadDeleteOut(BaseModel):
    message: str
