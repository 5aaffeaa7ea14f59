"""
Interactive prompts for connection fields missing from the configuration
"""
from typing import Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt

from ...core.interfaces import PromptProvider
from ...core.logging import get_stderr_console


class RichPromptProvider(PromptProvider):
    """
    PromptProvider backed by rich.prompt.

    Prompts are written to stderr so that stdout stays clean for command
    output when ``sshsync exec`` is piped.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_stderr_console()

    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        return Prompt.ask(
            message,
            console=self.console,
            default=default,
            password=password,
            show_default=not password,
        )

    def confirm(self, message: str, default: bool = False) -> bool:
        return Confirm.ask(message, console=self.console, default=default)
