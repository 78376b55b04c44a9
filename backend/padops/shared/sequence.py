from __future__ import annotations
import logging
import threading
from typing import Iterable

from .store import SEQUENCES, JsonStore

logger = logging.getLogger(__name__)


class SequenceGenerator:
    """Monotonic per-table id counters kept in ``sequences.json``."""

    def __init__(self, store: JsonStore):
        self.store = store
        self._mutex = threading.Lock()

    def next_id(self, name: str, existing_ids: Iterable[int] = ()) -> int:
        with self._mutex:
            sequences = self.store.read(SEQUENCES, default=dict)
            highest = max(existing_ids, default=0)
            value = max(int(sequences.get(name, 0)), highest) + 1
            sequences[name] = value
            self.store.write(SEQUENCES, sequences)
        return value

    def reset(self, name: str) -> None:
        with self._mutex:
            sequences = self.store.read(SEQUENCES, default=dict)
            sequences[name] = 0
            self.store.write(SEQUENCES, sequences)
        logger.info("Sequence %s reset", name)
