"""
Core infrastructure layer
"""
from .client import RemoteClient, ClientConfig, HostKeyPolicy, host_key_fingerprint
from .constants import *
from .exceptions import *
from .logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .interfaces import SessionProvider, ConnectionFactory, PromptProvider
from .utils import (
    load_ssh_config,
    quote_remote_path,
    normalize_remote_root,
    join_remote,
)

__all__ = [
    "RemoteClient",
    "ClientConfig",
    "HostKeyPolicy",
    "host_key_fingerprint",
    "setup_logging",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "SessionProvider",
    "ConnectionFactory",
    "PromptProvider",
    "load_ssh_config",
    "quote_remote_path",
    "normalize_remote_root",
    "join_remote",
]
