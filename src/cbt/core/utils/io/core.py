"""File writes and directory helpers.

Generated fragments are always written through :func:`write_text`, so a
reader never sees a half-written file.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Callable, Optional, TextIO, Union

PathLike = Union[str, Path]


def ensure_parent_dir(path: Path) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def ensure_directory(path: Path, create: bool = True) -> Path:
    """Return ``path`` as an existing directory.

    Raises:
        FileNotFoundError: If it is missing and ``create`` is False
        NotADirectoryError: If it exists as something else
    """
    path = Path(path)
    if path.is_dir():
        return path
    if path.exists():
        raise NotADirectoryError(f"Path exists but is not a directory: {path}")
    if not create:
        raise FileNotFoundError(f"Directory does not exist: {path}")
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(
    path: Path,
    write_fn: Callable[[TextIO], None],
    *,
    encoding: str = "utf-8",
) -> None:
    """Replace ``path`` with whatever ``write_fn`` writes.

    Content goes to a hidden sibling temp file that is fsync'd and then
    renamed over ``path``. The temp file never outlives the call.
    """
    path = Path(path)
    ensure_parent_dir(path)

    tmp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=encoding,
            dir=str(path.parent),
            prefix=f".{path.name}.",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            write_fn(f)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path is not None and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                # Keep the original error
                pass


def read_text(path: PathLike, *, encoding: str = "utf-8") -> str:
    return Path(path).read_text(encoding=encoding)


def write_text(path: PathLike, content: str) -> None:
    """Atomically write ``content`` to ``path`` as UTF-8."""
    atomic_write(Path(path), lambda f: f.write(content))


__all__ = [
    "PathLike",
    "ensure_parent_dir",
    "ensure_directory",
    "atomic_write",
    "read_text",
    "write_text",
]
