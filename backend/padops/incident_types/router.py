# backend/padops/incident_types/router.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from ..deps import get_backups, get_sequences, get_store
from ..jobs.utils import find_by_id, now_iso
from ..locks.guard import resource_lock
from ..shared.backup import BackupManager
from ..shared.sequence import SequenceGenerator
from ..shared.store import INCIDENT_TYPES, JsonStore
from . import schemas as s

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/incident-types",
    tags=["incident-types"],
    dependencies=[Depends(resource_lock("incident-type", id_param="type_id"))],
)


def clean_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise HTTPException(400, "Invalid incident type data")
    return name


def ensure_unique_name(types: list, name: str, exclude_id: Optional[int] = None):
    if any(t.get("name") == name and t["id"] != exclude_id for t in types):
        raise HTTPException(400, "An incident type with this name already exists")


@router.get("", response_model=List[s.IncidentTypeOut])
def list_incident_types(store: JsonStore = Depends(get_store)):
    return store.read(INCIDENT_TYPES)


@router.get("/{type_id}", response_model=s.IncidentTypeOut)
def get_incident_type(type_id: int, store: JsonStore = Depends(get_store)):
    t = find_by_id(store.read(INCIDENT_TYPES), type_id)
    if not t:
        raise HTTPException(404, "Incident type not found")
    return t


@router.post("", response_model=s.IncidentTypeOut, status_code=201)
def create_incident_type(
    payload: s.IncidentTypeCreate,
    store: JsonStore = Depends(get_store),
    seq: SequenceGenerator = Depends(get_sequences),
    backups: BackupManager = Depends(get_backups),
):
    types = store.read(INCIDENT_TYPES)
    name = clean_name(payload.name)
    ensure_unique_name(types, name)

    new_type = {
        "id": seq.next_id(INCIDENT_TYPES, (t["id"] for t in types)),
        "name": name,
        "description": payload.description,
        "created_at": now_iso(),
    }
    if payload.fault_category:
        new_type["fault_category"] = payload.fault_category
    types.append(new_type)

    backups.backup_file(INCIDENT_TYPES)
    store.write(INCIDENT_TYPES, types)
    logger.info("Created new incident type with ID: %s", new_type["id"])
    return new_type


@router.put("/{type_id}", response_model=s.IncidentTypeOut)
def update_incident_type(
    type_id: int,
    payload: s.IncidentTypeUpdate,
    store: JsonStore = Depends(get_store),
    backups: BackupManager = Depends(get_backups),
):
    types = store.read(INCIDENT_TYPES)
    t = find_by_id(types, type_id)
    if not t:
        raise HTTPException(404, "Incident type not found")
    updates = payload.model_dump(exclude_none=True)
    if "name" in updates:
        updates["name"] = clean_name(updates["name"])
        ensure_unique_name(types, updates["name"], exclude_id=type_id)

    t.update(updates)
    t["updated_at"] = now_iso()

    backups.backup_file(INCIDENT_TYPES)
    store.write(INCIDENT_TYPES, types)
    logger.info("Updated incident type %s", type_id)
    return t


@router.delete("/{type_id}", status_code=204)
def delete_incident_type(
    type_id: int,
    store: JsonStore = Depends(get_store),
    backups: BackupManager = Depends(get_backups),
):
    types = store.read(INCIDENT_TYPES)
    if not find_by_id(types, type_id):
        raise HTTPException(404, "Incident type not found")

    backups.backup_file(INCIDENT_TYPES)
    store.write(INCIDENT_TYPES, [t for t in types if t["id"] != type_id])
    logger.info("Deleted incident type with ID: %s", type_id)
    return Response(status_code=204)
