from fastapi import Request

from .locks.manager import ResourceLockManager
from .shared.backup import BackupManager
from .shared.sequence import SequenceGenerator
from .shared.store import JsonStore


def get_store(request: Request) -> JsonStore:
    return request.app.state.store


def get_sequences(request: Request) -> SequenceGenerator:
    return request.app.state.sequences


def get_backups(request: Request) -> BackupManager:
    return request.app.state.backups


def get_lock_manager(request: Request) -> ResourceLockManager:
    return request.app.state.lock_manager
