"""
Sync domain models
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Tuple

from ...core.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_WORKERS,
)
from ...core.exceptions import ConfigError


class TaskKind(str, Enum):
    """Kind of transfer task"""
    DIRECTORY = "mkdir"
    FILE = "copy"


class SymlinkPolicy(str, Enum):
    """
    What the tree walk does with symbolic links.

    - skip: leave the link out and log a warning
    - follow: treat the link target as a regular file or directory
    """
    SKIP = "skip"
    FOLLOW = "follow"


@dataclass(frozen=True)
class TransferTask:
    """
    One unit of sync work.

    Attributes:
        kind: Directory create or file copy
        local_path: Local entry
        remote_path: Remote destination derived from the remote root
        relative_path: POSIX path relative to the local root ("" for the root)
        ancestors: (device, inode) of this directory and every directory above
            it on the walk path; empty for files
    """
    kind: TaskKind
    local_path: Path
    remote_path: str
    relative_path: str = ""
    ancestors: FrozenSet[Tuple[int, int]] = field(default=frozenset(), compare=False, repr=False)

    @property
    def is_directory(self) -> bool:
        return self.kind is TaskKind.DIRECTORY


@dataclass
class SyncConfig:
    """Directory sync configuration"""
    workers: int = DEFAULT_WORKERS
    symlink_policy: SymlinkPolicy = SymlinkPolicy.SKIP
    chunk_size: int = DEFAULT_CHUNK_SIZE
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        if self.workers <= 0:
            raise ConfigError(f"workers must be greater than 0, got {self.workers}")
        if self.chunk_size <= 0:
            raise ConfigError(f"chunk_size must be greater than 0, got {self.chunk_size}")
        try:
            self.symlink_policy = SymlinkPolicy(self.symlink_policy)
        except ValueError as e:
            raise ConfigError(f"Unknown symlink policy: {self.symlink_policy}") from e

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyncConfig":
        """Create from dictionary, ignoring unknown keys"""
        valid_fields = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**valid_fields)


@dataclass
class SyncReport:
    """Summary of a completed sync"""
    directories_created: int = 0
    files_copied: int = 0
    bytes_copied: int = 0
    skipped: List[Path] = field(default_factory=list)
