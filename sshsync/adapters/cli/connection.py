"""
ConnectionFactory over paramiko
"""
from typing import Any, Dict

from ...core.client import RemoteClient
from ...core.interfaces import ConnectionFactory
from ...core.logging import get_logger
from ..config.parser import build_client_config

logger = get_logger(__name__)


class RemoteConnectionFactory(ConnectionFactory):
    """Builds a RemoteClient from resolved params and connects it"""

    def create(self, params: Dict[str, Any]) -> RemoteClient:
        """
        Raises:
            ConfigError: Params cannot form a valid client (bad key, missing
                known_hosts file, pinned policy without fingerprint)
            AuthError: Credentials or host key rejected
            NetworkError: Host unreachable or handshake timed out
        """
        config = build_client_config(params)
        logger.debug(
            f"Connecting to {config.user}@{config.host}:{config.port} "
            f"({config.auth_method} auth, host keys: {config.host_key_policy.value})"
        )
        client = RemoteClient.from_config(config)
        try:
            client.connect()
        except BaseException:
            client.close()
            raise
        return client
