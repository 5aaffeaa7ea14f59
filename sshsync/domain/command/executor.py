"""
Remote command execution over a single-use session
"""
import socket
import threading
import time
from dataclasses import dataclass
from typing import Optional

import paramiko

from ...core.constants import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REMOTE_HOME,
    RECV_BUFFER_SIZE,
)
from ...core.exceptions import Cancelled, CommandFailed, TransportError
from ...core.interfaces import SessionProvider
from ...core.logging import get_logger
from ...core.utils import quote_remote_path

logger = get_logger(__name__)

_CHANNEL_ERRORS = (paramiko.SSHException, EOFError, socket.error)


@dataclass
class CommandResult:
    """Captured outcome of one remote command"""
    command: str
    exit_code: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def output(self) -> bytes:
        return self.stdout

    def text(self, encoding: str = "utf-8") -> str:
        return self.stdout.decode(encoding, errors="replace")


def run_command(
    client: SessionProvider,
    command: str,
    merge_stderr: bool = False,
    check: bool = True,
    cancel_event: Optional[threading.Event] = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> CommandResult:
    """
    Run one command on its own session and wait for the remote process.

    The command string is sent as-is; callers quote their arguments.

    Args:
        client: Connected session provider
        command: Remote shell command
        merge_stderr: Fold stderr into stdout instead of capturing it apart
        check: Raise CommandFailed on a non-zero exit status
        cancel_event: When set, the session is closed and Cancelled raised
        poll_interval: Sleep between polls while the channel is idle

    Returns:
        CommandResult with captured output and exit status

    Raises:
        CommandFailed: Non-zero exit status and check is True
        TransportError: Channel failure or no exit status reported
        Cancelled: cancel_event was set before the process finished
    """
    channel = client.new_session()
    try:
        try:
            if merge_stderr:
                channel.set_combine_stderr(True)
            channel.exec_command(command)
            logger.debug(f"[exec] {command}")

            out_buf = []
            err_buf = []

            while True:
                if cancel_event is not None and cancel_event.is_set():
                    raise Cancelled(f"Cancelled while running: {command}")

                has_output = False
                if channel.recv_ready():
                    data = channel.recv(RECV_BUFFER_SIZE)
                    if data:
                        out_buf.append(data)
                        has_output = True
                if channel.recv_stderr_ready():
                    data = channel.recv_stderr(RECV_BUFFER_SIZE)
                    if data:
                        err_buf.append(data)
                        has_output = True

                if (
                    channel.exit_status_ready()
                    and not channel.recv_ready()
                    and not channel.recv_stderr_ready()
                ):
                    break

                # idle channel
                if not has_output:
                    time.sleep(poll_interval)

            exit_code = channel.recv_exit_status()
        except _CHANNEL_ERRORS as e:
            raise TransportError(f"Transport failed while running {command!r}: {e}") from e
    finally:
        channel.close()

    if exit_code == -1:
        raise TransportError(f"No exit status received for {command!r}")

    result = CommandResult(
        command=command,
        exit_code=exit_code,
        stdout=b"".join(out_buf),
        stderr=b"".join(err_buf),
    )
    if check and not result.ok:
        raise CommandFailed(command, exit_code, result.stdout, result.stderr)
    return result


def mkdir_command(remote_path: str) -> str:
    """Build an idempotent directory-create command with the path quoted"""
    return f"mkdir -p {quote_remote_path(remote_path)}"


def resolve_remote_home(client: SessionProvider, path: str) -> str:
    """
    Expand a leading ~ to the remote $HOME.

    Quoted paths are never tilde-expanded by the remote shell, so this runs
    before any path is embedded in a command.
    """
    if path != "~" and not path.startswith("~/"):
        return path
    result = run_command(client, 'printf %s "$HOME"')
    home = result.text().strip() or DEFAULT_REMOTE_HOME
    return home + path[1:]
