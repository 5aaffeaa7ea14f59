"""
Helpers shared by the CLI commands
"""
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ...core.exceptions import ConfigError
from ..config.loader import ConfigLoader
from ..config.parser import resolve_connection_params
from .prompts import RichPromptProvider


def load_settings(
    config_path: Optional[str],
    cli_overrides: Dict[str, Any],
    interactive: bool = True,
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Merge TOML, CLI options and environment, then resolve connection params.

    Returns:
        (merged configuration, connection parameters)
    """
    toml_path = None
    if config_path:
        toml_path = Path(config_path).expanduser()
        if not toml_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

    cfg = ConfigLoader().load(toml_path=toml_path, cli_overrides=cli_overrides)
    prompt_provider = RichPromptProvider() if interactive else None
    params = resolve_connection_params(cfg, prompt_provider)
    return cfg, params


def connection_overrides(
    host: Optional[str],
    user: Optional[str],
    port: Optional[int],
    password: Optional[str],
    key: Optional[str],
    ssh_config: Optional[str],
    timeout: Optional[float],
    host_key_policy: Optional[str],
    known_hosts: Optional[str],
    fingerprint: Optional[str],
) -> Dict[str, Any]:
    """CLI connection options as a config dict"""
    return {
        "host": host,
        "user": user,
        "port": port,
        "password": password,
        "key": key,
        "ssh_config": ssh_config,
        "timeout": timeout,
        "host_key_policy": host_key_policy,
        "known_hosts": known_hosts,
        "host_key_fingerprint": fingerprint,
    }
