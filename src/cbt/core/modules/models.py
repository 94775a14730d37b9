"""Module data models.

Provides immutable dataclasses for resolved packages and generation results.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class PackageIdentity:
    """A module package resolved to its location under the packages root.

    Attributes:
        id: Package identifier as written in the manifest
        version: Package version as written in the manifest
        relative_path: ``"{id}.{version}"``, relative to the packages root
        absolute_path: ``packages_root / relative_path``
    """

    id: str
    version: str
    relative_path: str
    absolute_path: Path

    @classmethod
    def create(cls, packages_root: Path, package_id: str, version: str) -> PackageIdentity:
        """Build an identity for ``package_id``/``version`` under ``packages_root``."""
        relative_path = f"{package_id}.{version}"
        return cls(
            id=package_id,
            version=version,
            relative_path=relative_path,
            absolute_path=Path(packages_root) / relative_path,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "version": self.version,
            "relative_path": self.relative_path,
            "absolute_path": str(self.absolute_path),
        }


@dataclass(frozen=True, slots=True)
class ExtensionImportEntry:
    """An extension import point and the module that declared it."""

    extension_name: str
    owning_package_id: str


@dataclass(frozen=True, slots=True)
class GenerationResult:
    """Summary of a completed generation run.

    Attributes:
        imports_file: Path of the primary fragment
        module_count: Number of modules written to the primary fragment
        extensions: Extension entries a fragment was written for
        extension_files: Paths of the written extension fragments
    """

    imports_file: Path
    module_count: int
    extensions: tuple[ExtensionImportEntry, ...] = ()
    extension_files: tuple[Path, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "imports_file": str(self.imports_file),
            "module_count": self.module_count,
            "extensions": {e.extension_name: e.owning_package_id for e in self.extensions},
            "extension_files": [str(p) for p in self.extension_files],
        }


__all__ = [
    "PackageIdentity",
    "ExtensionImportEntry",
    "GenerationResult",
]
