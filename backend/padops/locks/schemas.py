# backend/padops/locks/schemas.py
from pydantic import BaseModel
from datetime import datetime
from typing import List


class LockOut(BaseModel):
    resource_type: str
    resource_id: str
    acquired_at: datetime
    age_seconds: float


class LockStatusOut(BaseModel):
    resource_type: str
    resource_id: str
    locked: bool


class ReleaseOut(BaseModel):
    released: bool


class SweepOut(BaseModel):
    reclaimed: List[str]
