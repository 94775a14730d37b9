"""Dependency manifest parsers.

Each parser reads one manifest format and yields the packages it declares,
resolved under the packages root. Parsers ignore files that are not in their
format, so the registry can run every parser over every manifest.

Supported formats:
- ``packages.config``: ``<packages><package id=".." version=".." /></packages>``
- ``project.json``: ``{"dependencies": {...}, "frameworks": {"<tfm>": {"dependencies": {...}}}}``
"""
from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from cbt.core.modules.exceptions import ManifestParseError
from cbt.core.modules.fragment import local_name
from cbt.core.modules.models import PackageIdentity
from cbt.core.utils.io import read_text

logger = logging.getLogger(__name__)


@runtime_checkable
class ManifestParser(Protocol):
    """Protocol for manifest parsers."""

    format_name: str

    def parse(self, packages_root: Path, manifest_path: Path) -> list[PackageIdentity]:
        """Return the packages declared by ``manifest_path``."""
        ...


class BaseManifestParser(ABC):
    """Shared entry validation and path resolution for manifest parsers."""

    format_name: str = ""
    suffixes: tuple[str, ...] = ()

    def handles(self, manifest_path: Path) -> bool:
        """Whether ``manifest_path`` looks like this parser's format."""
        return Path(manifest_path).suffix.lower() in self.suffixes

    def parse(self, packages_root: Path, manifest_path: Path) -> list[PackageIdentity]:
        """Parse ``manifest_path`` into resolved package identities.

        Args:
            packages_root: Directory module packages are restored into
            manifest_path: Manifest to read

        Returns:
            Packages in declaration order; empty if the file is missing or
            not in this parser's format

        Raises:
            ManifestParseError: If the manifest is not well-formed
        """
        path = Path(manifest_path)
        if not self.handles(path) or not path.is_file():
            return []

        packages: list[PackageIdentity] = []
        for raw_id, raw_version in self._iter_entries(path):
            package_id = _clean(raw_id)
            version = _clean(raw_version)
            if not package_id or not version:
                logger.debug(
                    "Skipping %s entry without id or version in %s (id=%r, version=%r)",
                    self.format_name,
                    path,
                    raw_id,
                    raw_version,
                )
                continue
            packages.append(PackageIdentity.create(Path(packages_root), package_id, version))

        logger.debug("Parsed %d package(s) from %s", len(packages), path)
        return packages

    @abstractmethod
    def _iter_entries(self, manifest_path: Path) -> Iterator[tuple[Any, Any]]:
        """Yield raw ``(id, version)`` pairs in declaration order."""
        ...


class PackagesConfigParser(BaseManifestParser):
    """Parser for flat ``<package id=".." version=".." />`` lists."""

    format_name = "packages.config"
    suffixes = (".config", ".xml")

    def _iter_entries(self, manifest_path: Path) -> Iterator[tuple[Any, Any]]:
        try:
            root = ET.parse(manifest_path).getroot()
        except (ET.ParseError, LookupError, ValueError) as exc:
            raise ManifestParseError(
                f"Manifest '{manifest_path}' is not well-formed XML: {exc}",
                context={"manifest": str(manifest_path), "format": self.format_name},
            ) from exc

        for element in root:
            if not isinstance(element.tag, str) or local_name(element.tag) != "package":
                continue
            yield element.get("id"), element.get("version")


class ProjectJsonParser(BaseManifestParser):
    """Parser for nested ``project.json`` dependency objects.

    Reads the top-level ``dependencies`` object, then the ``dependencies`` of
    every entry under ``frameworks``. A dependency value is either a version
    string or an object with a ``version`` key.
    """

    format_name = "project.json"
    suffixes = (".json",)

    def _iter_entries(self, manifest_path: Path) -> Iterator[tuple[Any, Any]]:
        try:
            document = json.loads(read_text(manifest_path, encoding="utf-8-sig"))
        except ValueError as exc:
            raise ManifestParseError(
                f"Manifest '{manifest_path}' is not valid JSON: {exc}",
                context={"manifest": str(manifest_path), "format": self.format_name},
            ) from exc

        if not isinstance(document, dict):
            raise ManifestParseError(
                f"Manifest '{manifest_path}' must contain a JSON object",
                context={"manifest": str(manifest_path), "format": self.format_name},
            )

        yield from self._iter_dependencies(manifest_path, document.get("dependencies"))

        frameworks = document.get("frameworks") or {}
        if not isinstance(frameworks, dict):
            raise ManifestParseError(
                f"Manifest '{manifest_path}' has a 'frameworks' value that is not an object",
                context={"manifest": str(manifest_path), "format": self.format_name},
            )
        for framework in frameworks.values():
            if isinstance(framework, dict):
                yield from self._iter_dependencies(manifest_path, framework.get("dependencies"))

    def _iter_dependencies(self, manifest_path: Path, dependencies: Any) -> Iterator[tuple[Any, Any]]:
        if dependencies is None:
            return
        if not isinstance(dependencies, dict):
            raise ManifestParseError(
                f"Manifest '{manifest_path}' has a 'dependencies' value that is not an object",
                context={"manifest": str(manifest_path), "format": self.format_name},
            )
        for package_id, spec in dependencies.items():
            if isinstance(spec, dict):
                yield package_id, spec.get("version")
            else:
                yield package_id, spec


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


DEFAULT_PARSERS: tuple[ManifestParser, ...] = (PackagesConfigParser(), ProjectJsonParser())


__all__ = [
    "ManifestParser",
    "BaseManifestParser",
    "PackagesConfigParser",
    "ProjectJsonParser",
    "DEFAULT_PARSERS",
]
