"""Timestamped copies of table files, pruned to the newest ``keep``."""

from __future__ import annotations
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .store import JsonStore

logger = logging.getLogger(__name__)


class BackupManager:
    def __init__(self, store: JsonStore, backup_dir: Path, keep: int = 5):
        self.store = store
        self.backup_dir = Path(backup_dir)
        self.keep = keep

    def _stamp(self) -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")

    def list_backups(self, table: str) -> List[Path]:
        if not self.backup_dir.exists():
            return []
        return sorted(self.backup_dir.glob(f"{table}_*.json"), reverse=True)

    def backup_file(self, table: str) -> Optional[Path]:
        source = self.store.path(table)
        if not source.exists():
            logger.debug("Nothing to back up for %s", table)
            return None

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        target = self.backup_dir / f"{table}_{self._stamp()}.json"
        with self.store.table_lock(table):
            shutil.copyfile(source, target)
        logger.info("Backup created: %s", target.name)

        for old in self.list_backups(table)[self.keep :]:
            old.unlink(missing_ok=True)
            logger.info("Deleted old backup: %s", old.name)
        return target

    def restore_backup(self, table: str, stamp: str) -> Path:
        match = next((p for p in self.list_backups(table) if stamp in p.name), None)
        if match is None:
            raise FileNotFoundError(f"Backup not found for {table} at {stamp}")
        with self.store.table_lock(table):
            shutil.copyfile(match, self.store.path(table))
        logger.info("Restored %s from backup %s", table, match.name)
        return match
