"""
sshsync - SSH command execution and directory upload

Provides:
- An authenticated SSH connection with explicit host key policy
  (known_hosts, pinned fingerprint, or opt-in insecure mode)
- Remote command execution with captured output and exit status
- Directory tree upload with ordered directory creation and a bounded
  worker pool for file transfers
"""

__version__ = "0.1.0"

# Export core components
from .core import (
    RemoteClient,
    ClientConfig,
    HostKeyPolicy,
    SessionProvider,
    load_ssh_config,
    quote_remote_path,
    join_remote,
)
from .core.exceptions import (
    RemoteError,
    ConfigError,
    ConnectionError,
    AuthError,
    NetworkError,
    TransportError,
    CommandFailed,
    TransferError,
    LocalIOError,
    RemoteIOError,
    SyncError,
    TaskError,
    Cancelled,
)

# Export domain operations
from .domain.command import CommandResult, run_command, mkdir_command
from .domain.transfer import copy_file
from .domain.sync import (
    TaskKind,
    SymlinkPolicy,
    TransferTask,
    SyncConfig,
    SyncReport,
    DirectorySynchronizer,
    sync_directory,
    SyncService,
)

__all__ = [
    # Version
    "__version__",
    # Client
    "RemoteClient",
    "ClientConfig",
    "HostKeyPolicy",
    "SessionProvider",
    # Utilities
    "load_ssh_config",
    "quote_remote_path",
    "join_remote",
    # Errors
    "RemoteError",
    "ConfigError",
    "ConnectionError",
    "AuthError",
    "NetworkError",
    "TransportError",
    "CommandFailed",
    "TransferError",
    "LocalIOError",
    "RemoteIOError",
    "SyncError",
    "TaskError",
    "Cancelled",
    # Operations
    "CommandResult",
    "run_command",
    "mkdir_command",
    "copy_file",
    # Sync
    "TaskKind",
    "SymlinkPolicy",
    "TransferTask",
    "SyncConfig",
    "SyncReport",
    "DirectorySynchronizer",
    "sync_directory",
    "SyncService",
]
