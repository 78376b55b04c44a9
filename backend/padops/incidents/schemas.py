from __future__ import annotations
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class IncidentCreate(BaseModel):
    job_id: int
    type_id: int
    description: str = Field(min_length=10)
    start_time: datetime
    end_time: Optional[datetime] = None
    fault: str = Field(min_length=1)

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class IncidentUpdate(BaseModel):
    job_id: Optional[int] = None
    type_id: Optional[int] = None
    description: Optional[str] = Field(default=None, min_length=1)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    fault: Optional[str] = Field(default=None, min_length=1)


class IncidentOut(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: int
    job_id: int
    type_id: int
    description: str
    start_time: str
    end_time: Optional[str] = None
    fault: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TypeStats(BaseModel):
    count: int
    total_downtime: float


class IncidentStatsOut(BaseModel):
    total_incidents: int
    total_downtime_hours: float
    by_type: Dict[str, TypeStats]
