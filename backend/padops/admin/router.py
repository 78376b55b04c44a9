# backend/padops/admin/router.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import get_backups, get_sequences, get_store
from ..shared.backup import BackupManager
from ..shared.sequence import SequenceGenerator
from ..shared.store import SEQUENCES, TABLES, JsonStore
from ..validate import find_problems
from . import schemas as s

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])

# 백업/복원 대상 (sequences 는 카운터라 제외)
DATA_TABLES = tuple(t for t in TABLES if t != SEQUENCES)


def ensure_table(table: str) -> str:
    if table not in DATA_TABLES:
        raise HTTPException(404, f"Unknown table: {table}")
    return table


@router.get("/backups/{table}", response_model=s.BackupListOut)
def list_backups(table: str, backups: BackupManager = Depends(get_backups)):
    ensure_table(table)
    return {"table": table, "files": [p.name for p in backups.list_backups(table)]}


@router.post("/backups/{table}", response_model=s.BackupOut, status_code=201)
def backup_now(table: str, backups: BackupManager = Depends(get_backups)):
    ensure_table(table)
    target = backups.backup_file(table)
    if target is None:
        raise HTTPException(404, f"Nothing to back up for {table}")
    return {"table": table, "file": target.name}


@router.post("/backups/{table}/restore", response_model=s.BackupOut)
def restore_backup(
    table: str,
    stamp: str = Query(..., min_length=1),
    backups: BackupManager = Depends(get_backups),
):
    ensure_table(table)
    try:
        restored = backups.restore_backup(table, stamp)
    except FileNotFoundError as e:
        raise HTTPException(404, str(e))
    logger.warning("Table %s restored from %s", table, restored.name)
    return {"table": table, "file": restored.name}


@router.post("/sequences/{name}/reset", response_model=s.SequenceResetOut)
def reset_sequence(name: str, seq: SequenceGenerator = Depends(get_sequences)):
    ensure_table(name)
    seq.reset(name)
    return {"name": name}


@router.get("/validate", response_model=s.ValidationOut)
def validate_data(store: JsonStore = Depends(get_store)):
    problems = find_problems(store)
    return {"ok": not problems, "problems": problems}
