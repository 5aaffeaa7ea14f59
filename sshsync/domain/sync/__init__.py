"""
Sync domain module
"""
from .models import TaskKind, SymlinkPolicy, TransferTask, SyncConfig, SyncReport
from .walker import TreeWalker
from .synchronizer import DirectorySynchronizer, sync_directory
from .service import SyncService

__all__ = [
    "TaskKind",
    "SymlinkPolicy",
    "TransferTask",
    "SyncConfig",
    "SyncReport",
    "TreeWalker",
    "DirectorySynchronizer",
    "sync_directory",
    "SyncService",
]
