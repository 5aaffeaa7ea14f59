"""
Core interfaces for dependency injection
"""
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, BinaryIO, Dict, Optional


class SessionProvider(ABC):
    """
    Authenticated connection that hands out single-use sessions.

    ``new_session`` and ``open_file_for_write`` may be called from several
    threads at once; each call yields an independent session that the caller
    must close.
    """

    @abstractmethod
    def new_session(self) -> Any:
        """Open a channel able to run exactly one command"""
        pass

    @abstractmethod
    def open_file_for_write(self, remote_path: str) -> AbstractContextManager[BinaryIO]:
        """Create or truncate a remote file, closing it when the block exits"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the connection and every session derived from it"""
        pass


class ConnectionFactory(ABC):
    """SSH connection factory interface"""

    @abstractmethod
    def create(self, params: Dict[str, Any]) -> SessionProvider:
        """Create and connect SSH client"""
        pass


class PromptProvider(ABC):
    """User prompt interface"""

    @abstractmethod
    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input"""
        pass

    @abstractmethod
    def confirm(self, message: str, default: bool = False) -> bool:
        """Prompt user for confirmation"""
        pass
