"""
Sync domain service - business logic
"""
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from ...core.exceptions import AuthError, ConfigError
from ...core.interfaces import ConnectionFactory, SessionProvider
from ...core.logging import get_logger
from ..command import CommandResult, resolve_remote_home, run_command
from .models import SyncConfig, SyncReport, TransferTask
from .synchronizer import DirectorySynchronizer

logger = get_logger(__name__)


class SyncService:
    """
    Sync service - pure business logic.

    Owns the connection for one logical job: connect, run the sync or the
    command, always close. No direct dependency on CLI, Typer, or Rich.
    """

    def __init__(
        self,
        connection_factory: ConnectionFactory,
        on_connected: Optional[Callable[[str, int], None]] = None,
        on_task_done: Optional[Callable[[TransferTask], None]] = None,
        on_complete: Optional[Callable[[SyncReport], None]] = None,
    ):
        """
        Initialize sync service.

        Args:
            connection_factory: SSH connection factory
            on_connected: Callback when connected (host, port)
            on_task_done: Callback for every finished transfer task
            on_complete: Callback when sync completes (report)
        """
        self.connection_factory = connection_factory
        self.on_connected = on_connected
        self.on_task_done = on_task_done
        self.on_complete = on_complete

    def sync(
        self,
        connection_params: Dict[str, Any],
        local_root: Union[str, Path],
        remote_root: str,
        config: Optional[SyncConfig] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SyncReport:
        """
        Connect, sync local_root to remote_root, disconnect.

        Raises:
            ConnectionError: Connection could not be established
            TaskError: A transfer task failed
            Cancelled: cancel_event was set
        """
        client = self._connect(connection_params)
        try:
            remote_root = resolve_remote_home(client, remote_root)
            synchronizer = DirectorySynchronizer(
                client,
                config=config,
                cancel_event=cancel_event,
                on_task_done=self.on_task_done,
            )
            report = synchronizer.sync(local_root, remote_root)
            if self.on_complete:
                self.on_complete(report)
            return report
        finally:
            client.close()

    def execute(
        self,
        connection_params: Dict[str, Any],
        command: str,
        merge_stderr: bool = False,
        check: bool = True,
    ) -> CommandResult:
        """Connect, run a single command, disconnect"""
        client = self._connect(connection_params)
        try:
            return run_command(client, command, merge_stderr=merge_stderr, check=check)
        finally:
            client.close()

    def _connect(self, connection_params: Dict[str, Any]) -> SessionProvider:
        """
        Key authentication first, falling back to password when one is given.

        The fallback covers a rejected key (AuthError) and a key file that is
        missing or cannot be parsed (ConfigError).
        """
        if connection_params.get("key") and connection_params.get("password"):
            try:
                client = self.connection_factory.create(connection_params)
            except (AuthError, ConfigError) as e:
                logger.warning(f"Key authentication failed ({e}), trying password...")
                params_without_key = connection_params.copy()
                params_without_key.pop("key", None)
                client = self.connection_factory.create(params_without_key)
        else:
            client = self.connection_factory.create(connection_params)

        if self.on_connected:
            self.on_connected(
                connection_params["host"],
                connection_params.get("port", 22),
            )
        return client
