# backend/padops/fault_categories/router.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from ..deps import get_sequences, get_store
from ..jobs.utils import find_by_id, now_iso
from ..locks.guard import resource_lock
from ..shared.sequence import SequenceGenerator
from ..shared.store import FAULT_CATEGORIES, JsonStore
from . import schemas as s

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/fault-categories",
    tags=["fault-categories"],
    dependencies=[Depends(resource_lock("fault-category", id_param="category_id"))],
)


@router.get("", response_model=List[s.FaultCategoryOut])
def list_fault_categories(store: JsonStore = Depends(get_store)):
    return store.read(FAULT_CATEGORIES)


@router.get("/{category_id}", response_model=s.FaultCategoryOut)
def get_fault_category(category_id: int, store: JsonStore = Depends(get_store)):
    category = find_by_id(store.read(FAULT_CATEGORIES), category_id)
    if not category:
        raise HTTPException(404, "Fault category not found")
    return category


@router.post("", response_model=s.FaultCategoryOut, status_code=201)
def create_fault_category(
    payload: s.FaultCategoryCreate,
    store: JsonStore = Depends(get_store),
    seq: SequenceGenerator = Depends(get_sequences),
):
    categories = store.read(FAULT_CATEGORIES)
    category = {
        "id": seq.next_id(FAULT_CATEGORIES, (c["id"] for c in categories)),
        **payload.model_dump(),
        "created_at": now_iso(),
    }
    categories.append(category)
    store.write(FAULT_CATEGORIES, categories)
    logger.info("Created fault category %s", category["id"])
    return category


@router.put("/{category_id}", response_model=s.FaultCategoryOut)
def update_fault_category(
    category_id: int, payload: s.FaultCategoryUpdate, store: JsonStore = Depends(get_store)
):
    categories = store.read(FAULT_CATEGORIES)
    category = find_by_id(categories, category_id)
    if not category:
        raise HTTPException(404, "Fault category not found")

    category.update(payload.model_dump(exclude_none=True))
    category["updated_at"] = now_iso()
    store.write(FAULT_CATEGORIES, categories)
    return category


@router.delete("/{category_id}", status_code=204)
def delete_fault_category(category_id: int, store: JsonStore = Depends(get_store)):
    categories = store.read(FAULT_CATEGORIES)
    remaining = [c for c in categories if c["id"] != category_id]
    if len(remaining) == len(categories):
        raise HTTPException(404, "Fault category not found")

    store.write(FAULT_CATEGORIES, remaining)
    logger.info("Deleted fault category %s", category_id)
    return Response(status_code=204)
