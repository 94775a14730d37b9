"""Module generation exceptions.

Construction-time and parse-time errors abort a generation run. Skipped
manifest entries and per-module extension scan failures are logged, not raised.
"""
from __future__ import annotations

from typing import Any, Mapping

from cbt.core.exceptions import CBTError


class ModuleError(CBTError):
    """Base exception for module generation errors."""


class InvalidArgumentError(ModuleError, ValueError):
    """Raised when a required input is missing, blank, or not recognised."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ModuleError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class PackagesDirectoryNotFoundError(ModuleError, FileNotFoundError):
    """Raised when the packages root does not exist on disk."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ModuleError.__init__(self, message, context=context)
        FileNotFoundError.__init__(self, message)


class ManifestParseError(ModuleError, ValueError):
    """Raised when a dependency manifest is not well-formed."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ModuleError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class FragmentWriteError(ModuleError, OSError):
    """Raised when one or more generated fragments could not be written."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ModuleError.__init__(self, message, context=context)
        OSError.__init__(self, message)


class ModuleSettingsError(ModuleError):
    """Raised when module settings fail schema validation."""


__all__ = [
    "ModuleError",
    "InvalidArgumentError",
    "PackagesDirectoryNotFoundError",
    "ManifestParseError",
    "FragmentWriteError",
    "ModuleSettingsError",
]
