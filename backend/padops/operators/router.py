# backend/padops/operators/router.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_sequences, get_store
from ..jobs.utils import find_by_id, is_active
from ..locks.guard import resource_lock
from ..shared.sequence import SequenceGenerator
from ..shared.store import JOBS, OPERATORS, PADS, JsonStore
from . import schemas as s

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/operators",
    tags=["operators"],
    dependencies=[Depends(resource_lock("operator", id_param="operator_id"))],
)


def _normalize(name: str) -> str:
    return name.strip().lower()


def ensure_unique_name(operators: list, name: str, exclude_id: int | None = None):
    wanted = _normalize(name)
    if any(_normalize(o["name"]) == wanted and o["id"] != exclude_id for o in operators):
        raise HTTPException(
            400,
            f'An operator with the name "{name}" already exists (names are case-insensitive)',
        )


@router.get("", response_model=List[s.OperatorOut])
def list_operators(store: JsonStore = Depends(get_store)):
    return store.read(OPERATORS)


@router.get("/{operator_id}", response_model=s.OperatorOut)
def get_operator(operator_id: int, store: JsonStore = Depends(get_store)):
    op = find_by_id(store.read(OPERATORS), operator_id)
    if not op:
        raise HTTPException(404, "Operator not found")
    return op


@router.post("", response_model=s.OperatorOut, status_code=201)
def create_operator(
    payload: s.OperatorCreate,
    store: JsonStore = Depends(get_store),
    seq: SequenceGenerator = Depends(get_sequences),
):
    operators = store.read(OPERATORS)
    ensure_unique_name(operators, payload.name)

    op = {
        "id": seq.next_id(OPERATORS, (o["id"] for o in operators)),
        "name": payload.name.strip(),
        "role": payload.role,
        "status": payload.status,
    }
    operators.append(op)
    store.write(OPERATORS, operators)
    logger.info("Created operator %s", op["id"])
    return op


@router.put("/{operator_id}", response_model=s.OperatorOut)
def update_operator(
    operator_id: int, payload: s.OperatorUpdate, store: JsonStore = Depends(get_store)
):
    operators = store.read(OPERATORS)
    op = find_by_id(operators, operator_id)
    if not op:
        raise HTTPException(404, "Operator not found")

    old_name = op["name"]
    if payload.name and _normalize(payload.name) != _normalize(old_name):
        ensure_unique_name(operators, payload.name, exclude_id=operator_id)

    op["name"] = payload.name.strip() if payload.name else old_name
    op["role"] = payload.role or op.get("role", "Operator")
    op["status"] = payload.status or op.get("status", "Inactive")
    store.write(OPERATORS, operators)

    # 이름이 바뀌면 해당 운영사 패드의 작업들에도 반영
    if op["name"] != old_name:
        pad_ids = {p["id"] for p in store.read(PADS) if p.get("operator_id") == operator_id}
        jobs = store.read(JOBS)
        touched = 0
        for job in jobs:
            if job.get("pad_id") in pad_ids:
                job["operator_name"] = op["name"]
                touched += 1
        if touched:
            store.write(JOBS, jobs)
            logger.info("Renamed operator %s on %d jobs", operator_id, touched)
    return op


@router.delete("/{operator_id}", response_model=s.OperatorDeleteOut)
def delete_operator(operator_id: int, store: JsonStore = Depends(get_store)):
    pads, jobs = store.read(PADS), store.read(JOBS)
    pad_ids = {p["id"] for p in pads if p.get("operator_id") == operator_id}

    if any(j.get("pad_id") in pad_ids and is_active(j) for j in jobs):
        raise HTTPException(
            400,
            "Cannot delete operator with active jobs. Please complete or reassign all jobs first.",
        )

    operators = store.read(OPERATORS)
    if not find_by_id(operators, operator_id):
        raise HTTPException(404, "Operator not found")

    if pad_ids:
        store.write(PADS, [p for p in pads if p["id"] not in pad_ids])
    store.write(OPERATORS, [o for o in operators if o["id"] != operator_id])
    logger.info("Deleted operator %s and %d pads", operator_id, len(pad_ids))
    return {"message": "Operator deleted successfully", "deletedPads": len(pad_ids)}
