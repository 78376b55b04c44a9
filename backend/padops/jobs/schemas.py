from __future__ import annotations
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

JobStatus = Literal["active", "completed"]


class JobCreate(BaseModel):
    pad_id: int
    start_date: datetime


class JobUpdate(BaseModel):
    pad_id: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[JobStatus] = None

    @model_validator(mode="after")
    def _completion_needs_end(self):
        if self.status == "completed" and self.end_date is None:
            raise ValueError("end_date is required to complete a job")
        return self


class JobOut(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: int
    pad_id: int
    start_date: str
    end_date: Optional[str] = None
    status: str = "active"
    incidents: List[int] = []
    pad_name: Optional[str] = None
    operator_name: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class JobDeleteOut(BaseModel):
    message: str
    deletedIncidents: int
