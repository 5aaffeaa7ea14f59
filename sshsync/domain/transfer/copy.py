"""
Single file upload engine
"""
import socket
import threading
from pathlib import Path
from typing import Callable, Optional, Union

import paramiko

from ...core.constants import DEFAULT_CHUNK_SIZE
from ...core.exceptions import Cancelled, LocalIOError, RemoteIOError, TransportError
from ...core.interfaces import SessionProvider
from ...core.logging import get_logger

logger = get_logger(__name__)

# dropped connection; any other OSError is an SFTP status error
_TRANSPORT_ERRORS = (paramiko.SSHException, EOFError, socket.timeout, ConnectionError)


def copy_file(
    client: SessionProvider,
    local_path: Union[str, Path],
    remote_path: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[Callable[[int], None]] = None,
) -> int:
    """
    Stream a local file into a newly created (or truncated) remote file.

    The remote parent directory must already exist. Nothing is retried or
    verified; a failure part way through can leave a truncated remote file.

    Args:
        client: Connected session provider
        local_path: Local source file
        remote_path: Remote destination file
        chunk_size: Bytes read per iteration
        cancel_event: Checked between chunks
        progress_callback: Called with the size of every chunk written

    Returns:
        Number of bytes copied

    Raises:
        LocalIOError: Source missing or unreadable
        RemoteIOError: Destination cannot be created or written
        TransportError: Connection dropped during the transfer
        Cancelled: cancel_event was set mid-transfer
    """
    local_path = Path(local_path)
    try:
        src = open(local_path, "rb")
    except OSError as e:
        raise LocalIOError(f"Cannot open {local_path}: {e}") from e

    copied = 0
    with src:
        try:
            with client.open_file_for_write(remote_path) as dst:
                while True:
                    if cancel_event is not None and cancel_event.is_set():
                        raise Cancelled(f"Cancelled while copying {local_path}")
                    try:
                        data = src.read(chunk_size)
                    except OSError as e:
                        raise LocalIOError(f"Failed to read {local_path}: {e}") from e
                    if not data:
                        break
                    dst.write(data)
                    copied += len(data)
                    if progress_callback:
                        progress_callback(len(data))
        except _TRANSPORT_ERRORS as e:
            raise TransportError(f"Transport failed while copying to {remote_path}: {e}") from e
        except OSError as e:
            raise RemoteIOError(f"Failed to write {remote_path}: {e}") from e

    logger.debug(f"[push] {local_path} → {remote_path} ({copied} bytes)")
    return copied
