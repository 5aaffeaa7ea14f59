"""
Logging and console output for sshsync

Diagnostics go to stderr through Rich; anything the user asked for (command
output, sync summaries) goes to the stdout console.
"""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


# Consoles look up sys.stdout / sys.stderr on every write, so redirected
# streams (pipes, test runners) are honoured.
_stdout_console = Console()
_stderr_console = Console(stderr=True)

# third-party loggers that are chatty below WARNING
_NOISY_LOGGERS = ("paramiko", "paramiko.transport", "paramiko.sftp")

_FILE_FORMAT = "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s"


def _parse_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def _file_handler(path: Path, level: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    rich_tracebacks: bool = True,
) -> None:
    """
    Configure the root logger for an sshsync process.

    Replaces any handlers already installed. Worker thread names appear in the
    file log so interleaved transfers can be told apart.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Also append plain-text records to this file
        rich_tracebacks: Render exceptions with Rich
    """
    log_level = _parse_level(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)

    console_handler = RichHandler(
        console=_stderr_console,
        level=log_level,
        show_path=False,
        markup=False,
        rich_tracebacks=rich_tracebacks,
    )
    root.addHandler(console_handler)

    if log_file:
        root.addHandler(_file_handler(Path(log_file), log_level))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Module logger, e.g. ``get_logger(__name__)``"""
    return logging.getLogger(name)


def get_stdout_console() -> Console:
    """Console for user-facing output"""
    return _stdout_console


def get_stderr_console() -> Console:
    """Console for errors and warnings shown to the user"""
    return _stderr_console
