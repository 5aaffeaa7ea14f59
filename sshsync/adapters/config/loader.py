"""
Layered configuration: TOML file, then CLI options, then SSHSYNC_* environment
"""
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from ...core.constants import ENV_PREFIX
from ...core.exceptions import ConfigError

_TRUE = frozenset({"true", "yes", "on"})
_FALSE = frozenset({"false", "no", "off"})

# kept as the raw string even when it looks like a number
_VERBATIM_KEYS = frozenset({"password", "host_key_fingerprint", "user", "key"})


class ConfigLoader:
    """
    Build one configuration dict from every source.

    Later layers win: TOML < CLI options < environment. Dotted keys such as
    ``sync.workers`` address a TOML table.
    """

    # environment variable suffix -> config key
    ENV_MAPPINGS = {
        "HOST": "host",
        "USER": "user",
        "PORT": "port",
        "KEY": "key",
        "PASSWORD": "password",
        "TIMEOUT": "timeout",
        "HOST_KEY_POLICY": "host_key_policy",
        "KNOWN_HOSTS": "known_hosts",
        "HOST_KEY_FINGERPRINT": "host_key_fingerprint",
        "WORKERS": "sync.workers",
        "SYMLINK_POLICY": "sync.symlink_policy",
    }

    def __init__(self, env_prefix: str = ENV_PREFIX):
        self._env_prefix = env_prefix

    def load_toml(self, path: Path) -> Dict[str, Any]:
        """
        Parse a TOML file.

        Raises:
            ConfigError: File missing or not valid TOML
        """
        try:
            with open(path, "rb") as f:
                return tomllib.load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"Configuration file not found: {path}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    def load_env(self) -> Dict[str, Any]:
        """Collect SSHSYNC_* variables that are set and non-empty"""
        config: Dict[str, Any] = {}
        for suffix, dotted in self.ENV_MAPPINGS.items():
            raw = os.environ.get(self._env_prefix + suffix)
            if not raw:
                continue
            value = raw if dotted in _VERBATIM_KEYS else self._convert_value(raw)
            *sections, key = dotted.split(".")
            target = config
            for section in sections:
                target = target.setdefault(section, {})
            target[key] = value
        return config

    def _convert_value(self, value: str) -> Any:
        """Interpret an environment string as bool, int or float when it is one"""
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        for cast in (int, float):
            try:
                return cast(value)
            except ValueError:
                continue
        return value

    def merge_configs(self, *configs: Dict[str, Any]) -> Dict[str, Any]:
        """Deep-merge left to right; tables merge key by key"""
        merged: Dict[str, Any] = {}
        for config in configs:
            merged = self._deep_merge(merged, config)
        return merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        merged = dict(base)
        for key, value in override.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = self._deep_merge(current, value)
            else:
                merged[key] = value
        return merged

    def load(
        self,
        toml_path: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        use_env: bool = True,
    ) -> Dict[str, Any]:
        """
        Merge all sources into one dict.

        Args:
            toml_path: TOML configuration file, if any
            cli_overrides: Values from command line options; None means unset
            use_env: Apply SSHSYNC_* environment variables on top

        Returns:
            Merged configuration dictionary
        """
        layers = []
        if toml_path:
            layers.append(self.load_toml(toml_path))
        if cli_overrides:
            layers.append(self._drop_none(cli_overrides))
        if use_env:
            layers.append(self.load_env())
        return self.merge_configs(*layers)

    def _drop_none(self, data: Dict[str, Any]) -> Dict[str, Any]:
        cleaned: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, dict):
                nested = self._drop_none(value)
                if nested:
                    cleaned[key] = nested
            elif value is not None:
                cleaned[key] = value
        return cleaned
