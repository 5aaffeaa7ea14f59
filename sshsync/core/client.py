from __future__ import annotations

import base64
import hashlib
import socket
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Literal, Optional

import paramiko

from .constants import DEFAULT_SSH_PORT, DEFAULT_SSH_TIMEOUT, KNOWN_HOSTS_PATH
from .exceptions import (
    AuthError,
    ConfigError,
    NetworkError,
    RemoteIOError,
    TransportError,
)
from .interfaces import SessionProvider
from .logging import get_logger

logger = get_logger(__name__)


class HostKeyPolicy(str, Enum):
    """How the server's host key is verified"""
    KNOWN_HOSTS = "known_hosts"
    PINNED = "pinned"
    INSECURE_IGNORE = "insecure_ignore"


@dataclass
class ClientConfig:
    host: str
    user: str
    port: int = DEFAULT_SSH_PORT
    auth_method: Literal["password", "key"] = "password"
    password: Optional[str] = None
    key_path: Optional[str] = None
    timeout: float = DEFAULT_SSH_TIMEOUT
    host_key_policy: HostKeyPolicy = HostKeyPolicy.KNOWN_HOSTS
    known_hosts_file: Optional[str] = None
    host_key_fingerprint: Optional[str] = None


class HostKeyRejected(paramiko.SSHException):
    """Raised by the host key policies when a server key is not trusted"""
    pass


def host_key_fingerprint(key: paramiko.PKey) -> str:
    """OpenSSH style SHA256 fingerprint, e.g. ``SHA256:nThbg6kX...``"""
    digest = hashlib.sha256(key.asbytes()).digest()
    return "SHA256:" + base64.b64encode(digest).decode("ascii").rstrip("=")


def normalize_fingerprint(fingerprint: str) -> str:
    value = fingerprint.strip()
    if value.upper().startswith("SHA256:"):
        value = value[len("SHA256:"):]
    return "SHA256:" + value.rstrip("=")


class RejectUnknownHostPolicy(paramiko.MissingHostKeyPolicy):
    """Refuse any host that is not already in the loaded known_hosts"""

    def missing_host_key(self, client, hostname, key):
        raise HostKeyRejected(
            f"Host key for {hostname} not found in known_hosts "
            f"({key.get_name()} {host_key_fingerprint(key)})"
        )


class PinnedHostKeyPolicy(paramiko.MissingHostKeyPolicy):
    """Accept only the host key matching a pinned SHA256 fingerprint"""

    def __init__(self, fingerprint: str):
        self.fingerprint = normalize_fingerprint(fingerprint)

    def missing_host_key(self, client, hostname, key):
        actual = host_key_fingerprint(key)
        if actual != self.fingerprint:
            raise HostKeyRejected(
                f"Host key for {hostname} does not match pinned fingerprint "
                f"(expected {self.fingerprint}, got {actual})"
            )
        logger.debug(f"Host key for {hostname} matches pinned fingerprint")


class IgnoreHostKeyPolicy(paramiko.MissingHostKeyPolicy):
    """Accept every host key without recording it"""

    def missing_host_key(self, client, hostname, key):
        logger.warning(
            f"Accepting unverified host key for {hostname} "
            f"({key.get_name()} {host_key_fingerprint(key)})"
        )


class RemoteClient(SessionProvider):
    """
    Paramiko SSHClient wrapper acting as the session provider.

    - keeps host / user / port explicitly
    - password or key login (Ed25519, RSA and ECDSA keys are probed)
    - host key verification is an explicit policy, known_hosts by default
    - every command and every remote file gets its own channel, so the
      client can be shared between worker threads
    - usable as a context manager
    """
    def __init__(
        self,
        host: str,
        user: str,
        port: int = DEFAULT_SSH_PORT,
        auth_method: Literal["password", "key"] = "password",
        password: Optional[str] = None,
        key_path: Optional[str] = None,
        timeout: float = DEFAULT_SSH_TIMEOUT,
        host_key_policy: HostKeyPolicy = HostKeyPolicy.KNOWN_HOSTS,
        known_hosts_file: Optional[str] = None,
        host_key_fingerprint: Optional[str] = None,
    ) -> None:
        self.config = ClientConfig(
            host=host,
            user=user,
            port=port,
            auth_method=auth_method,
            password=password,
            key_path=key_path,
            timeout=timeout,
            host_key_policy=HostKeyPolicy(host_key_policy),
            known_hosts_file=known_hosts_file,
            host_key_fingerprint=host_key_fingerprint,
        )
        self.client = paramiko.SSHClient()
        self._configure_host_keys()

    @classmethod
    def from_config(cls, config: ClientConfig) -> RemoteClient:
        return cls(
            host=config.host,
            user=config.user,
            port=config.port,
            auth_method=config.auth_method,
            password=config.password,
            key_path=config.key_path,
            timeout=config.timeout,
            host_key_policy=config.host_key_policy,
            known_hosts_file=config.known_hosts_file,
            host_key_fingerprint=config.host_key_fingerprint,
        )

    # --------------------
    # Host key policy
    # --------------------
    def _configure_host_keys(self) -> None:
        cfg = self.config

        if cfg.host_key_policy is HostKeyPolicy.KNOWN_HOSTS:
            self.client.load_system_host_keys()
            known_hosts = Path(cfg.known_hosts_file or KNOWN_HOSTS_PATH).expanduser()
            if known_hosts.exists():
                self.client.load_host_keys(str(known_hosts))
            elif cfg.known_hosts_file:
                raise ConfigError(f"Known hosts file not found: {known_hosts}")
            self.client.set_missing_host_key_policy(RejectUnknownHostPolicy())

        elif cfg.host_key_policy is HostKeyPolicy.PINNED:
            if not cfg.host_key_fingerprint:
                raise ConfigError("Pinned host key policy requires a host key fingerprint")
            self.client.set_missing_host_key_policy(
                PinnedHostKeyPolicy(cfg.host_key_fingerprint)
            )

        elif cfg.host_key_policy is HostKeyPolicy.INSECURE_IGNORE:
            self.client.set_missing_host_key_policy(IgnoreHostKeyPolicy())

    # --------------------
    # Connection management
    # --------------------
    def connect(self) -> None:
        cfg = self.config
        kwargs = {
            "hostname": cfg.host,
            "port": cfg.port,
            "username": cfg.user,
            "timeout": cfg.timeout,
            "banner_timeout": cfg.timeout,
            "auth_timeout": cfg.timeout,
            "allow_agent": False,
            "look_for_keys": False,
        }

        if cfg.auth_method == "password":
            kwargs["password"] = cfg.password
        elif cfg.auth_method == "key":
            kwargs["pkey"] = self._load_private_key(cfg.key_path)
        else:
            raise ConfigError(f"Unsupported auth method: {cfg.auth_method}")

        if cfg.host_key_policy is HostKeyPolicy.INSECURE_IGNORE:
            logger.warning(f"Host key verification disabled for {cfg.host}:{cfg.port}")

        target = f"{cfg.user}@{cfg.host}:{cfg.port}"
        try:
            self.client.connect(**kwargs)
        except paramiko.AuthenticationException as e:
            raise AuthError(f"Authentication failed for {target}: {e}") from e
        except (paramiko.BadHostKeyException, HostKeyRejected) as e:
            raise AuthError(f"Host key rejected for {target}: {e}") from e
        except (socket.timeout, OSError) as e:
            raise NetworkError(f"Failed to reach {target}: {e}") from e
        except paramiko.SSHException as e:
            raise NetworkError(f"SSH negotiation with {target} failed: {e}") from e

        logger.debug(f"Connected to {target}")

    @property
    def is_connected(self) -> bool:
        transport = self.client.get_transport()
        return transport is not None and transport.is_active()

    # --------------------
    # Load private key
    # --------------------
    def _load_private_key(self, path: Optional[str]) -> paramiko.PKey:
        """Probe Ed25519, RSA and ECDSA in turn"""
        if not path:
            raise ConfigError("Key authentication requires a key path")
        p = Path(path).expanduser()
        if not p.exists():
            raise ConfigError(f"Private key not found: {p}")

        for key_class in (paramiko.Ed25519Key, paramiko.RSAKey, paramiko.ECDSAKey):
            try:
                return key_class.from_private_key_file(str(p))
            except (paramiko.SSHException, ValueError):
                continue
        raise ConfigError(f"Failed to load private key at {p}")

    # --------------------
    # Sessions
    # --------------------
    def _active_transport(self) -> paramiko.Transport:
        transport = self.client.get_transport()
        if transport is None or not transport.is_active():
            raise TransportError(f"Connection to {self.config.host} is not open")
        return transport

    def new_session(self) -> paramiko.Channel:
        """Open a fresh channel; the caller owns and closes it"""
        transport = self._active_transport()
        try:
            channel = transport.open_session(timeout=self.config.timeout)
        except (paramiko.SSHException, EOFError, OSError) as e:
            raise TransportError(f"Failed to open session on {self.config.host}: {e}") from e
        logger.debug(f"Opened channel {channel.get_id()}")
        return channel

    @contextmanager
    def open_file_for_write(self, remote_path: str) -> Iterator[paramiko.SFTPFile]:
        """
        Create or truncate ``remote_path`` and yield it for writing.

        A dedicated SFTP session backs each call; file and session are closed
        when the block exits, whether it succeeds or raises.
        """
        transport = self._active_transport()
        try:
            sftp = paramiko.SFTPClient.from_transport(transport)
        except (paramiko.SSHException, EOFError, OSError) as e:
            raise TransportError(f"Failed to open SFTP session on {self.config.host}: {e}") from e
        if sftp is None:
            raise TransportError(f"Failed to open SFTP session on {self.config.host}")

        try:
            try:
                remote_file = sftp.open(remote_path, "wb")
            except IOError as e:
                raise RemoteIOError(f"Cannot create remote file {remote_path}: {e}") from e
            try:
                yield remote_file
            finally:
                remote_file.close()
        finally:
            sftp.close()

    # --------------------
    # Context manager
    # --------------------
    def close(self) -> None:
        self.client.close()
        logger.debug(f"Closed connection to {self.config.host}")

    def __enter__(self) -> RemoteClient:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
