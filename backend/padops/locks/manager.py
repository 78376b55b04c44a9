"""In-process mutual exclusion keyed by ``(resource_type, resource_id)``.

The JSON tables have no transactions, so every read-modify-write of a single
record is wrapped in a lock from this module. Waiters poll instead of being
woken on release and no queue is kept, so there is no FIFO guarantee among
them. Entries that outlive ``stale_after`` are reclaimed by the sweeper; a
holder that is reclaimed and later calls ``release`` gets ``False`` back.
"""

from __future__ import annotations
import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Dict, List, Optional

DEFAULT_MAX_WAIT = 5.0
DEFAULT_POLL_INTERVAL = 0.1
DEFAULT_STALE_AFTER = 30.0
DEFAULT_SWEEP_INTERVAL = 60.0


@dataclass(frozen=True)
class LockKey:
    resource_type: str
    resource_id: str

    def __str__(self) -> str:
        return f"{self.resource_type}:{self.resource_id}"


@dataclass
class LockEntry:
    key: LockKey
    acquired_at: float  # monotonic, drives staleness
    acquired_wall: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class LockTimeoutError(Exception):
    def __init__(self, key: LockKey, waited: float):
        super().__init__(f"Lock acquisition timeout for {key} after {waited:.3f}s")
        self.key = key
        self.waited = waited


class ResourceLockManager:
    """Table of held locks for one process.

    Must only be used from a single event loop. ``acquire`` does its
    membership check and insert without an ``await`` in between, which is
    what makes check-and-insert atomic.
    """

    def __init__(
        self,
        *,
        max_wait: float = DEFAULT_MAX_WAIT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        stale_after: float = DEFAULT_STALE_AFTER,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.max_wait = max_wait
        self.poll_interval = poll_interval
        self.stale_after = stale_after
        self._clock = clock
        self._log = logger or logging.getLogger(__name__)
        self._locks: Dict[str, LockEntry] = {}

    @staticmethod
    def key_for(resource_type: str, resource_id) -> LockKey:
        return LockKey(str(resource_type), str(resource_id))

    async def acquire(
        self, resource_type: str, resource_id, max_wait: Optional[float] = None
    ) -> LockEntry:
        """Wait until the key is free, then take it.

        Raises ``LockTimeoutError`` once ``max_wait`` seconds have passed
        without the key becoming free. Cancellation while waiting leaves
        nothing behind.
        """
        key = self.key_for(resource_type, resource_id)
        name = str(key)
        limit = self.max_wait if max_wait is None else max_wait
        start = self._clock()

        while name in self._locks:
            waited = self._clock() - start
            remaining = limit - waited
            if remaining <= 0:
                self._log.warning("Lock acquisition timeout for %s", name)
                raise LockTimeoutError(key, waited)
            await asyncio.sleep(min(self.poll_interval, remaining))

        entry = LockEntry(key=key, acquired_at=self._clock())
        self._locks[name] = entry
        self._log.info("Lock acquired for %s", name)
        return entry

    def release(
        self, resource_type: str, resource_id, entry: Optional[LockEntry] = None
    ) -> bool:
        """Drop the lock for the key. With ``entry``, only while that entry is the holder."""
        name = str(self.key_for(resource_type, resource_id))
        current = self._locks.get(name)
        if current is None or (entry is not None and current is not entry):
            return False
        del self._locks[name]
        self._log.info("Lock released for %s", name)
        return True

    def is_locked(self, resource_type: str, resource_id) -> bool:
        return str(self.key_for(resource_type, resource_id)) in self._locks

    def entries(self) -> List[LockEntry]:
        return list(self._locks.values())

    def age(self, entry: LockEntry) -> float:
        return self._clock() - entry.acquired_at

    def sweep_stale(self, max_age: Optional[float] = None) -> List[LockKey]:
        """Drop every entry older than ``max_age`` seconds and return their keys."""
        limit = self.stale_after if max_age is None else max_age
        now = self._clock()
        reclaimed: List[LockKey] = []
        for name, entry in list(self._locks.items()):
            if now - entry.acquired_at <= limit:
                continue
            try:
                # only drop the entry we inspected, not a fresh one under the same key
                if self._locks.get(name) is entry:
                    del self._locks[name]
                    reclaimed.append(entry.key)
                    self._log.warning("Cleaned up stale lock for %s", name)
            except Exception:
                self._log.exception("Failed to reclaim stale lock for %s", name)
        return reclaimed

    async def run_sweeper(self, interval: float = DEFAULT_SWEEP_INTERVAL) -> None:
        """Call ``sweep_stale`` every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            try:
                self.sweep_stale()
            except Exception:
                self._log.exception("Stale lock sweep failed")

    @asynccontextmanager
    async def hold(
        self, resource_type: str, resource_id, max_wait: Optional[float] = None
    ) -> AsyncIterator[LockEntry]:
        """Acquire for the duration of the ``async with`` block."""
        entry = await self.acquire(resource_type, resource_id, max_wait=max_wait)
        try:
            yield entry
        finally:
            self.release(resource_type, resource_id, entry=entry)
