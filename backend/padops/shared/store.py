"""Flat JSON file tables.

Each table is one ``<name>.json`` file under the data directory holding a
JSON array (or, for ``sequences``, an object). Writes go through a temp file
and ``os.replace`` so readers never observe a half-written table.
"""

from __future__ import annotations
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable

logger = logging.getLogger(__name__)

PADS = "pads"
JOBS = "jobs"
OPERATORS = "operators"
INCIDENTS = "incidents"
INCIDENT_TYPES = "incident-types"
FAULT_CATEGORIES = "fault_categories"
SEQUENCES = "sequences"

TABLES = (PADS, JOBS, OPERATORS, INCIDENTS, INCIDENT_TYPES, FAULT_CATEGORIES, SEQUENCES)


class StoreError(Exception):
    """A table file exists but cannot be parsed."""


class JsonStore:
    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def path(self, table: str) -> Path:
        return self.data_dir / f"{table}.json"

    def table_lock(self, table: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(table, threading.Lock())

    def read(self, table: str, default: Callable[[], Any] = list) -> Any:
        path = self.path(table)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning("File not found: %s, returning empty %s", path.name, default.__name__)
            return default()
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreError(f"{path.name} is not valid JSON: {e}") from e

    def write(self, table: str, data: Any) -> None:
        path = self.path(table)
        with self.table_lock(table):
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=f".{table}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, indent=2, ensure_ascii=False)
                os.replace(tmp, path)
            except Exception:
                logger.exception("Error writing %s", path.name)
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
