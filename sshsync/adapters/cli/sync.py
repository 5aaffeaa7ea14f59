"""
Sync CLI command
"""
import signal
import threading
import typer
from typing import Optional

from rich.progress import Progress, SpinnerColumn, TextColumn

from ...core.logging import get_logger, get_stdout_console, get_stderr_console
from ...core.exceptions import (
    AuthError,
    Cancelled,
    ConfigError,
    ConnectionError,
    LocalIOError,
    RemoteError,
    TaskError,
)
from ...domain.sync import SyncService, SymlinkPolicy, TransferTask
from ..config.parser import parse_sync_config
from .common import connection_overrides, load_settings
from .connection import RemoteConnectionFactory

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()


def register_sync_command(app: typer.Typer) -> None:
    """Register sync command directly on the main app"""
    app.command(name="sync")(sync_run)


def sync_run(
    local: str = typer.Argument(..., help="Local directory to upload"),
    remote: str = typer.Argument(..., help="Remote destination directory"),
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file (TOML)"
    ),
    host: Optional[str] = typer.Option(None, "--host", "-H", help="Remote host"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="SSH user"),
    port: Optional[int] = typer.Option(None, "--port", "-P", help="SSH port (default: 22)"),
    password: Optional[str] = typer.Option(None, "--password", help="SSH password"),
    key: Optional[str] = typer.Option(None, "--key", "-i", help="Private key file"),
    ssh_config: Optional[str] = typer.Option(
        None, "--ssh-config", help="Host alias from ~/.ssh/config"
    ),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Connect timeout in seconds"),
    host_key_policy: Optional[str] = typer.Option(
        None,
        "--host-key-policy",
        help="known_hosts (default), pinned or insecure_ignore",
    ),
    known_hosts: Optional[str] = typer.Option(
        None, "--known-hosts", help="Extra known_hosts file"
    ),
    fingerprint: Optional[str] = typer.Option(
        None, "--fingerprint", help="Pinned host key fingerprint (SHA256:...)"
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Parallel transfer workers (default: 4)"
    ),
    follow_symlinks: bool = typer.Option(
        False, "--follow-symlinks", help="Follow symbolic links instead of skipping them"
    ),
):
    """
    Upload a local directory tree to a remote path

    Examples:
        sshsync sync ./site /var/www/site --host web1 --user deploy --key ~/.ssh/id_ed25519
        sshsync sync ./data '~/data' --ssh-config gpu-box --workers 8
        sshsync sync ./conf /etc/app -c deploy.toml --host-key-policy pinned --fingerprint SHA256:...
    """
    overrides = connection_overrides(
        host, user, port, password, key, ssh_config,
        timeout, host_key_policy, known_hosts, fingerprint,
    )
    overrides["sync"] = {
        "workers": workers,
        "symlink_policy": SymlinkPolicy.FOLLOW.value if follow_symlinks else None,
    }

    cancel_event = threading.Event()

    def _on_interrupt(signum, frame) -> None:
        if cancel_event.is_set():
            raise KeyboardInterrupt
        stderr_console.print("[yellow]⚠[/yellow] Cancelling, waiting for running transfers...")
        cancel_event.set()

    try:
        cfg, params = load_settings(config_path, overrides)
        sync_config = parse_sync_config(cfg)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TextColumn("{task.completed} done"),
            console=stdout_console,
            transient=True,
            disable=not stdout_console.is_terminal,
        ) as progress:
            progress_task = progress.add_task("Connecting...", total=None)

            def on_task_done(task: TransferTask) -> None:
                progress.update(
                    progress_task,
                    advance=1,
                    description=task.relative_path or task.remote_path,
                )

            service = SyncService(
                connection_factory=RemoteConnectionFactory(),
                on_connected=lambda h, p: stdout_console.print(
                    f"[green]✓[/green] Connected to [cyan]{params['user']}@{h}:{p}[/cyan]"
                ),
                on_task_done=on_task_done,
            )

            previous_handler = signal.signal(signal.SIGINT, _on_interrupt)
            try:
                report = service.sync(
                    connection_params=params,
                    local_root=local,
                    remote_root=remote,
                    config=sync_config,
                    cancel_event=cancel_event,
                )
            finally:
                signal.signal(signal.SIGINT, previous_handler)

        stdout_console.print(
            f"[green]✓[/green] Synced {report.directories_created} directories, "
            f"{report.files_copied} files ({report.bytes_copied} bytes)"
        )
        if report.skipped:
            stdout_console.print(
                f"[yellow]⊘[/yellow] Skipped {len(report.skipped)} entries (see log)"
            )

    except Cancelled as e:
        stderr_console.print(f"[yellow]Cancelled:[/yellow] {e}")
        raise typer.Exit(130)
    except TaskError as e:
        stderr_console.print(f"[red]Sync Error:[/red] {e}")
        raise typer.Exit(1)
    except LocalIOError as e:
        stderr_console.print(f"[red]Local Error:[/red] {e}")
        raise typer.Exit(1)
    except AuthError as e:
        stderr_console.print(f"[red]Authentication Error:[/red] {e}")
        raise typer.Exit(1)
    except ConnectionError as e:
        stderr_console.print(f"[red]Connection Error:[/red] {e}")
        raise typer.Exit(1)
    except ConfigError as e:
        stderr_console.print(f"[red]Config Error:[/red] {e}")
        raise typer.Exit(1)
    except RemoteError as e:
        logger.exception("Sync failed")
        stderr_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
