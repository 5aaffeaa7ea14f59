"""
Configuration parsing: merged config dict -> connection params and SyncConfig
"""
from typing import Dict, Any, Optional

from ...core.client import ClientConfig, HostKeyPolicy
from ...core.constants import DEFAULT_SSH_PORT, DEFAULT_SSH_TIMEOUT, DEFAULT_HOST_KEY_POLICY
from ...core.exceptions import ConfigError
from ...core.interfaces import PromptProvider
from ...core.utils import load_ssh_config
from ...domain.sync import SyncConfig


# ============================================================
# Connection Parameters
# ============================================================

def resolve_connection_params(
    cfg: Dict[str, Any],
    prompt_provider: Optional[PromptProvider] = None,
) -> Dict[str, Any]:
    """
    Resolve remote connection parameters from the merged configuration.

    Supports:
    - ssh_config: Load host/user/port/key from ~/.ssh/config
    - host/user/port/password/key: Direct configuration
    - Missing host, user and credential are prompted for when a prompt
      provider is given

    Args:
        cfg: Merged configuration dictionary
        prompt_provider: Interactive prompt source (optional)

    Returns:
        Connection parameters dictionary

    Raises:
        ConfigError: Required values missing or invalid
    """
    params: Dict[str, Any] = {}

    # Load from ssh_config if specified
    if cfg.get("ssh_config"):
        entry = load_ssh_config(cfg["ssh_config"])
        params["host"] = entry["host"]
        params["port"] = entry["port"]
        if entry.get("user"):
            params["user"] = entry["user"]
        if entry.get("key_file"):
            params["key"] = entry["key_file"]

    for name in ("host", "user", "port", "password"):
        if cfg.get(name) is not None:
            params[name] = cfg[name]
    if cfg.get("key"):
        params["key"] = cfg["key"]
    elif cfg.get("key_file"):
        params["key"] = cfg["key_file"]

    params["timeout"] = _as_number(cfg.get("timeout", DEFAULT_SSH_TIMEOUT), "timeout")
    params["host_key_policy"] = _parse_host_key_policy(
        cfg.get("host_key_policy", DEFAULT_HOST_KEY_POLICY)
    )
    params["known_hosts"] = cfg.get("known_hosts")
    params["host_key_fingerprint"] = cfg.get("host_key_fingerprint")
    if (
        params["host_key_policy"] is HostKeyPolicy.PINNED
        and not params["host_key_fingerprint"]
    ):
        raise ConfigError("host_key_policy 'pinned' requires host_key_fingerprint")

    # Prompt user for missing fields with defaults
    if not params.get("host"):
        if prompt_provider is None:
            raise ConfigError("Remote host is required")
        params["host"] = prompt_provider.prompt("Enter remote host address")
    if not params.get("user"):
        if prompt_provider is None:
            raise ConfigError("SSH user is required")
        params["user"] = prompt_provider.prompt("Enter SSH username", default="root")

    try:
        params["port"] = int(params.get("port", DEFAULT_SSH_PORT))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid SSH port: {params.get('port')!r}") from e

    # Prompt for password if neither password nor key is provided
    if not params.get("password") and not params.get("key") and prompt_provider is not None:
        password_input = prompt_provider.prompt(
            "Enter SSH password",
            password=True,
            default="",
        )
        params["password"] = password_input if password_input else None

    return params


def build_client_config(params: Dict[str, Any]) -> ClientConfig:
    """Turn resolved connection parameters into a ClientConfig"""
    return ClientConfig(
        host=params["host"],
        user=params["user"],
        port=params.get("port", DEFAULT_SSH_PORT),
        auth_method="key" if params.get("key") else "password",
        password=params.get("password"),
        key_path=params.get("key"),
        timeout=params.get("timeout", DEFAULT_SSH_TIMEOUT),
        host_key_policy=_parse_host_key_policy(
            params.get("host_key_policy", DEFAULT_HOST_KEY_POLICY)
        ),
        known_hosts_file=params.get("known_hosts"),
        host_key_fingerprint=params.get("host_key_fingerprint"),
    )


# ============================================================
# Sync Configuration
# ============================================================

def parse_sync_config(cfg: Dict[str, Any]) -> SyncConfig:
    """Parse the [sync] table"""
    section = cfg.get("sync", {})
    if not isinstance(section, dict):
        raise ConfigError("[sync] must be a table")
    for name in ("workers", "chunk_size"):
        if name in section and not isinstance(section[name], int):
            raise ConfigError(f"sync.{name} must be an integer, got {section[name]!r}")
    return SyncConfig.from_dict(section)


def _parse_host_key_policy(value: Any) -> HostKeyPolicy:
    try:
        return HostKeyPolicy(value)
    except ValueError as e:
        choices = ", ".join(p.value for p in HostKeyPolicy)
        raise ConfigError(f"Unknown host_key_policy {value!r} (expected one of: {choices})") from e


def _as_number(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid {name}: {value!r}") from e
