"""Process-wide stdlib logging configuration for the CLI."""
from __future__ import annotations

import logging
import sys
from pathlib import Path

from cbt.core.utils.io import ensure_directory

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_CONFIGURED_KEY: tuple[str, str] | None = None
_CBT_HANDLER: logging.Handler | None = None


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_stdlib_logging(*, level: str = "WARNING", log_path: Path | None = None) -> None:
    """Configure the root logger with a single cbt-owned handler.

    Writes to ``log_path`` when given, otherwise to stderr. Stdout is never used
    so ``--json`` output stays machine-readable.

    Idempotent per-process: if already configured for the same target and level, no-op.
    """
    global _CONFIGURED_KEY, _CBT_HANDLER

    target = str(Path(log_path).resolve()) if log_path is not None else "<stderr>"
    key = (target, str(level).upper())
    if _CONFIGURED_KEY == key and _CBT_HANDLER is not None:
        return

    root = logging.getLogger()
    root.setLevel(_level_from_name(level))

    # Replace the handler installed by a previous call.
    if _CBT_HANDLER is not None:
        root.removeHandler(_CBT_HANDLER)
        _CBT_HANDLER.close()
        _CBT_HANDLER = None

    handler: logging.Handler
    if log_path is not None:
        ensure_directory(Path(target).parent)
        handler = logging.FileHandler(target, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level_from_name(level))
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(handler)

    _CBT_HANDLER = handler
    _CONFIGURED_KEY = key


def reset_stdlib_logging_for_tests() -> None:
    """Test-only: remove the cbt-owned handler."""
    global _CONFIGURED_KEY, _CBT_HANDLER
    if _CBT_HANDLER is not None:
        logging.getLogger().removeHandler(_CBT_HANDLER)
        _CBT_HANDLER.close()
    _CONFIGURED_KEY = None
    _CBT_HANDLER = None


__all__ = ["configure_stdlib_logging", "reset_stdlib_logging_for_tests"]
