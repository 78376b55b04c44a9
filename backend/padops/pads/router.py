# backend/padops/pads/router.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_backups, get_sequences, get_store
from ..jobs.utils import find_by_id, is_active, sync_job_names
from ..locks.guard import resource_lock
from ..shared.backup import BackupManager
from ..shared.sequence import SequenceGenerator
from ..shared.store import JOBS, OPERATORS, PADS, JsonStore
from . import schemas as s

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/pads",
    tags=["pads"],
    dependencies=[Depends(resource_lock("pad", id_param="pad_id"))],
)


def ensure_operator(store: JsonStore, operator_id: int) -> dict:
    operator = find_by_id(store.read(OPERATORS), operator_id)
    if not operator:
        raise HTTPException(400, "Invalid operator ID")
    return operator


@router.get("", response_model=List[s.PadOut])
def list_pads(store: JsonStore = Depends(get_store)):
    return store.read(PADS)


@router.get("/{pad_id}", response_model=s.PadOut)
def get_pad(pad_id: int, store: JsonStore = Depends(get_store)):
    pad = find_by_id(store.read(PADS), pad_id)
    if not pad:
        logger.warning("Pad not found with ID: %s", pad_id)
        raise HTTPException(404, "Pad not found")
    return pad


@router.post("", response_model=s.PadOut, status_code=201)
def create_pad(
    payload: s.PadIn,
    store: JsonStore = Depends(get_store),
    seq: SequenceGenerator = Depends(get_sequences),
    backups: BackupManager = Depends(get_backups),
):
    ensure_operator(store, payload.operator_id)
    pads = store.read(PADS)
    pad = {
        "id": seq.next_id(PADS, (p["id"] for p in pads)),
        **payload.model_dump(),
        "deleted": False,
    }
    backups.backup_file(PADS)
    store.write(PADS, [*pads, pad])
    logger.info("Created new pad with ID: %s", pad["id"])
    return pad


@router.put("/{pad_id}", response_model=s.PadOut)
def update_pad(
    pad_id: int,
    payload: s.PadIn,
    store: JsonStore = Depends(get_store),
    backups: BackupManager = Depends(get_backups),
):
    pads = store.read(PADS)
    pad = find_by_id(pads, pad_id)
    if not pad:
        logger.warning("Attempt to update non-existent pad with ID: %s", pad_id)
        raise HTTPException(404, "Pad not found")
    operator = ensure_operator(store, payload.operator_id)

    backups.backup_file(PADS)
    pad.update(payload.model_dump())
    store.write(PADS, pads)

    jobs = store.read(JOBS)
    if sync_job_names(jobs, pad, operator["name"]):
        backups.backup_file(JOBS)
        store.write(JOBS, jobs)

    logger.info("Updated pad with ID: %s", pad_id)
    return pad


@router.delete("/{pad_id}", response_model=s.PadDeleteOut)
def delete_pad(
    pad_id: int,
    store: JsonStore = Depends(get_store),
    backups: BackupManager = Depends(get_backups),
):
    if any(j.get("pad_id") == pad_id and is_active(j) for j in store.read(JOBS)):
        logger.warning("Attempt to delete pad %s with active jobs", pad_id)
        raise HTTPException(400, "Cannot delete pad with active jobs")

    pads = store.read(PADS)
    pad = find_by_id(pads, pad_id)
    if not pad:
        logger.warning("Attempt to delete non-existent pad with ID: %s", pad_id)
        raise HTTPException(404, "Pad not found")

    backups.backup_file(PADS)
    pad["deleted"] = True  # soft delete
    store.write(PADS, pads)
    logger.info("Soft deleted pad with ID: %s", pad_id)
    return {"message": "Pad deleted successfully"}
