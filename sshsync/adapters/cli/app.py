"""
sshsync command line entry point
"""
import typer
from pathlib import Path
from typing import Optional

from ... import __version__
from ...core.logging import get_stdout_console, setup_logging
from .exec import register_exec_command
from .sync import register_sync_command

app = typer.Typer(
    name="sshsync",
    help="Run commands and upload directory trees over SSH",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

register_sync_command(app)
register_exec_command(app)


def _print_version(value: bool) -> None:
    if value:
        get_stdout_console().print(f"sshsync {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="DEBUG shows every command and file transfer",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Append log records to this file",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show the version and exit",
    ),
):
    """
    Upload directory trees and run commands on a remote host over SSH.

    [bold]sync[/bold] mirrors a local directory onto a remote path;
    [bold]exec[/bold] runs one command and relays its output and exit status.
    """
    setup_logging(level=log_level, log_file=log_file)


def run():
    """Console script entry point"""
    app()


if __name__ == "__main__":
    run()
