# backend/padops/locks/router.py
from typing import List

from fastapi import APIRouter, Depends

from ..deps import get_lock_manager
from .manager import LockEntry, ResourceLockManager
from .schemas import LockOut, LockStatusOut, ReleaseOut, SweepOut

router = APIRouter(prefix="/api/locks", tags=["locks"])

# handlers are async so the lock table is only touched from the event loop


def _to_out(locks: ResourceLockManager, entry: LockEntry) -> LockOut:
    return LockOut(
        resource_type=entry.key.resource_type,
        resource_id=entry.key.resource_id,
        acquired_at=entry.acquired_wall,
        age_seconds=round(max(locks.age(entry), 0.0), 3),
    )


@router.get("", response_model=List[LockOut])
async def list_locks(locks: ResourceLockManager = Depends(get_lock_manager)):
    return [_to_out(locks, e) for e in locks.entries()]


@router.get("/{resource_type}/{resource_id}", response_model=LockStatusOut)
async def get_lock(
    resource_type: str, resource_id: str, locks: ResourceLockManager = Depends(get_lock_manager)
):
    return LockStatusOut(
        resource_type=resource_type,
        resource_id=resource_id,
        locked=locks.is_locked(resource_type, resource_id),
    )


@router.post("/sweep", response_model=SweepOut)
async def sweep(locks: ResourceLockManager = Depends(get_lock_manager)):
    return SweepOut(reclaimed=[str(k) for k in locks.sweep_stale()])


@router.post("/{resource_type}/{resource_id}/release", response_model=ReleaseOut)
async def force_release(
    resource_type: str, resource_id: str, locks: ResourceLockManager = Depends(get_lock_manager)
):
    return ReleaseOut(released=locks.release(resource_type, resource_id))
