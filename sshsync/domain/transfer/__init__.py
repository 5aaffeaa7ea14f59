"""
Transfer domain module
"""
from .copy import copy_file

__all__ = [
    "copy_file",
]
