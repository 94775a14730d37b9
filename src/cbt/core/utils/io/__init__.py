"""File I/O helpers.

- Atomic text writes (temp file + fsync + rename)
- Directory management
- YAML reads with consistent error handling
"""
from __future__ import annotations

from .core import (
    PathLike,
    atomic_write,
    ensure_directory,
    ensure_parent_dir,
    read_text,
    write_text,
)
from .yaml import read_yaml

__all__ = [
    "PathLike",
    "atomic_write",
    "ensure_directory",
    "ensure_parent_dir",
    "read_text",
    "write_text",
    "read_yaml",
]
