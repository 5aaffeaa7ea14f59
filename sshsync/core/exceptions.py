"""
Unified exception definitions
"""


class RemoteError(Exception):
    """Base exception class"""
    pass


class ConfigError(RemoteError):
    """Configuration error"""
    pass


class ConnectionError(RemoteError):
    """Connection error"""
    pass


class AuthError(ConnectionError):
    """Credential or host key rejected"""
    pass


class NetworkError(ConnectionError):
    """Dial failure or connect timeout"""
    pass


class TransportError(ConnectionError):
    """Channel or transport failure in the middle of an operation"""
    pass


class CommandFailed(RemoteError):
    """Remote command ran but exited with a non-zero status"""

    def __init__(self, command: str, exit_code: int, output: bytes = b"", stderr: bytes = b""):
        self.command = command
        self.exit_code = exit_code
        self.output = output
        self.stderr = stderr
        detail = stderr.decode("utf-8", errors="replace").strip()
        message = f"Command exited with status {exit_code}: {command}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class TransferError(RemoteError):
    """Transfer error"""
    pass


class LocalIOError(TransferError):
    """Local file could not be read"""
    pass


class RemoteIOError(TransferError):
    """Remote file could not be created or written"""
    pass


class SyncError(RemoteError):
    """Sync error"""
    pass


class TaskError(SyncError):
    """
    A single transfer task failed.

    Carries the task (local and remote path) and the typed error that caused it.
    """

    def __init__(self, task, cause: BaseException):
        self.task = task
        self.cause = cause
        super().__init__(
            f"{task.kind.value} {task.local_path} -> {task.remote_path} failed: {cause}"
        )


class Cancelled(RemoteError):
    """Operation aborted by the caller's cancellation signal"""
    pass
