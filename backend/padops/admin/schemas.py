from __future__ import annotations
from typing import List

from pydantic import BaseModel


class BackupOut(BaseModel):
    table: str
    file: str


class BackupListOut(BaseModel):
    table: str
    files: List[str]


class SequenceResetOut(BaseModel):
    name: str
    value: int = 0


class ValidationOut(BaseModel):
    ok: bool
    problems: List[str]
