"""YAML file reads."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def read_yaml(path: Path, default: Any = None, raise_on_error: bool = False) -> Any:
    """Load ``path`` with ``yaml.safe_load``.

    A missing, unreadable, invalid or empty file yields ``default``. With
    ``raise_on_error`` the first three raise instead (``FileNotFoundError``,
    ``OSError``, ``yaml.YAMLError``).
    """
    path = Path(path)
    if not path.exists():
        if raise_on_error:
            raise FileNotFoundError(f"File not found: {path}")
        return default

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        if raise_on_error:
            raise
        return default
    return default if data is None else data


__all__ = ["read_yaml"]
