"""
Exec CLI command
"""
import typer
from typing import Optional

from ...core.logging import get_logger, get_stdout_console, get_stderr_console
from ...core.exceptions import (
    AuthError,
    CommandFailed,
    ConfigError,
    ConnectionError,
)
from ...domain.sync import SyncService
from .common import connection_overrides, load_settings
from .connection import RemoteConnectionFactory

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()


def register_exec_command(app: typer.Typer) -> None:
    """Register exec command directly on the main app"""
    app.command(name="exec")(exec_run)


def exec_run(
    command: str = typer.Argument(..., help="Command line to run remotely (quote it yourself)"),
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
    merge_stderr: bool = typer.Option(
        False, "--merge-stderr", help="Merge remote stderr into stdout"
    ),
):
    """
    Run one command on the remote host and print its output

    Examples:
        sshsync exec 'uname -a' --host web1 --user deploy
        sshsync exec 'ls -la /var/www' --ssh-config web1 --merge-stderr
    """
    overrides = connection_overrides(
        host, user, port, password, key, ssh_config,
        timeout, host_key_policy, known_hosts, fingerprint,
    )

    try:
        _, params = load_settings(config_path, overrides)
        service = SyncService(connection_factory=RemoteConnectionFactory())
        result = service.execute(params, command, merge_stderr=merge_stderr)
        stdout_console.out(result.text(), end="", highlight=False)
        if result.stderr:
            stderr_console.out(result.stderr.decode("utf-8", errors="replace"), end="", highlight=False)

    except CommandFailed as e:
        if e.output:
            stdout_console.out(e.output.decode("utf-8", errors="replace"), end="", highlight=False)
        if e.stderr:
            stderr_console.out(e.stderr.decode("utf-8", errors="replace"), end="", highlight=False)
        logger.debug(f"Remote command exited with {e.exit_code}")
        raise typer.Exit(e.exit_code)
    except AuthError as e:
        stderr_console.print(f"[red]Authentication Error:[/red] {e}")
        raise typer.Exit(1)
    except ConnectionError as e:
        stderr_console.print(f"[red]Connection Error:[/red] {e}")
        raise typer.Exit(1)
    except ConfigError as e:
        stderr_console.print(f"[red]Config Error:[/red] {e}")
        raise typer.Exit(1)
