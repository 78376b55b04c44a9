# backend/padops/locks/guard.py
import asyncio
import logging

from fastapi import Depends, HTTPException, Request

from ..deps import get_lock_manager
from .manager import LockEntry, LockTimeoutError, ResourceLockManager

logger = logging.getLogger(__name__)

MUTATING_METHODS = frozenset({"PUT", "PATCH", "DELETE"})
CONFLICT_DETAIL = "Resource is currently being modified by another request"
# nginx's "client closed request"; nobody is left to read it
CLIENT_GONE_STATUS = 499


async def _wait_for_disconnect(request: Request, interval: float) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(interval)


async def acquire_while_connected(
    request: Request, locks: ResourceLockManager, resource_type: str, resource_id
) -> LockEntry:
    """``locks.acquire`` that gives up as soon as the client disconnects.

    Raises ``LockTimeoutError`` like ``acquire``, or a 499 ``HTTPException``
    when the connection went away first. Either way nothing stays locked.
    """
    acquiring = asyncio.ensure_future(locks.acquire(resource_type, resource_id))
    watching = asyncio.ensure_future(_wait_for_disconnect(request, locks.poll_interval))

    async def _abandon():
        watching.cancel()
        acquiring.cancel()
        (outcome,) = await asyncio.gather(acquiring, return_exceptions=True)
        # acquire may have won right before the cancel landed
        if isinstance(outcome, LockEntry):
            locks.release(resource_type, resource_id, entry=outcome)

    try:
        await asyncio.wait({acquiring, watching}, return_when=asyncio.FIRST_COMPLETED)
    except BaseException:
        await _abandon()
        raise

    if acquiring.done():
        watching.cancel()
        return acquiring.result()

    await _abandon()
    watching.result()  # re-raise a failed disconnect check
    logger.info("Client left while waiting for %s:%s", resource_type, resource_id)
    raise HTTPException(status_code=CLIENT_GONE_STATUS, detail="Client closed request")


def resource_lock(resource_type: str, id_param: str = "id"):
    """Router dependency serializing mutating requests per resource id.

    Reads go straight through. For PUT/PATCH/DELETE with the ``id_param``
    path parameter present, the lock is held until the request finishes on
    any exit path; a timed-out wait becomes a 409 and the handler never runs.
    A client that disconnects while waiting stops the wait.
    """

    async def _dep(request: Request, locks: ResourceLockManager = Depends(get_lock_manager)):
        resource_id = request.path_params.get(id_param)
        if request.method not in MUTATING_METHODS or resource_id in (None, ""):
            yield None
            return

        try:
            entry = await acquire_while_connected(request, locks, resource_type, resource_id)
        except LockTimeoutError:
            raise HTTPException(status_code=409, detail=CONFLICT_DETAIL)

        # fastapi>=0.118 runs this exit after the response has been sent
        try:
            yield entry
        finally:
            locks.release(resource_type, resource_id, entry=entry)

    return _dep
