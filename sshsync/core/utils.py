"""
Core utility functions
"""
import re
import paramiko
from pathlib import Path
from typing import Dict, Any

from .constants import SSH_CONFIG_PATH, DEFAULT_SSH_PORT
from .exceptions import ConfigError


# ============================================================
# SSH Config Management
# ============================================================

def load_ssh_config(hostname: str) -> Dict[str, Any]:
    """
    Load configuration for specified Host from ~/.ssh/config.

    Args:
        hostname: Host name in SSH configuration

    Returns:
        Dictionary containing host, user, port, key_file

    Raises:
        ConfigError: If ~/.ssh/config doesn't exist
    """
    config_path = Path(SSH_CONFIG_PATH).expanduser()
    if not config_path.exists():
        raise ConfigError(f"{SSH_CONFIG_PATH} does not exist")

    ssh_config = paramiko.SSHConfig.from_path(str(config_path))
    entry = ssh_config.lookup(hostname)

    return {
        "host": entry.get("hostname", hostname),
        "user": entry.get("user", None),
        "port": int(entry.get("port", DEFAULT_SSH_PORT)),
        "key_file": entry.get("identityfile", [None])[0],
    }


# ============================================================
# Remote Path Utilities
# ============================================================

def quote_remote_path(path: str) -> str:
    """
    Quote a path for a POSIX remote shell.

    Always wraps in single quotes; an embedded quote becomes '"'"'.
    """
    return "'" + path.replace("'", "'\"'\"'") + "'"


def normalize_remote_root(root: str) -> str:
    """Collapse repeated slashes and drop trailing ones, keeping a bare '/'"""
    if not root:
        raise ConfigError("Remote root must not be empty")
    collapsed = re.sub(r"/+", "/", root)
    if collapsed == "/":
        return collapsed
    return collapsed.rstrip("/")


def join_remote(root: str, relative: str = "") -> str:
    """
    Join a relative path onto a remote root with POSIX separators.

    Only '/' separates segments; a backslash is an ordinary filename
    character on POSIX and is kept. Empty or '.' segments are dropped, so the
    result never has doubled or missing slashes.
    """
    base = normalize_remote_root(root)
    parts = [p for p in relative.split("/") if p and p != "."]
    if not parts:
        return base
    if base == "/":
        return "/" + "/".join(parts)
    return base + "/" + "/".join(parts)
