"""
Command domain module
"""
from .executor import CommandResult, run_command, mkdir_command, resolve_remote_home

__all__ = [
    "CommandResult",
    "run_command",
    "mkdir_command",
    "resolve_remote_home",
]
