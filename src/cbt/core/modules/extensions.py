"""Extension import discovery.

A module can declare extra import points in its own config file::

    <configuration>
      <extensionImports>
        <add name="Custom.targets" />
      </extensionImports>
    </configuration>

Every module's config is scanned on a worker thread and the declared names are
merged into one shared name -> owner map. When several modules declare the
same name (case-insensitive), the module registered first keeps it, no matter
which scan finishes first.
"""
from __future__ import annotations

import logging
import threading
import xml.etree.ElementTree as ET
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath, PureWindowsPath

from cbt.core.modules.fragment import local_name
from cbt.core.modules.models import ExtensionImportEntry, PackageIdentity
from cbt.core.modules.registry import PackageRegistry

logger = logging.getLogger(__name__)


EXTENSION_IMPORTS_ELEMENT = "extensionImports"
ADD_ELEMENT = "add"
NAME_ATTRIBUTE = "name"


class ExtensionImportMap:
    """Thread-safe insert-if-absent map of extension name to owning module.

    ``rank`` orders competing claims on the same name: the lowest rank is kept.
    Claims with equal rank keep the first writer.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[int, ExtensionImportEntry]] = {}

    def try_add(self, name: str, owner: str, *, rank: int = 0) -> bool:
        """Record ``name -> owner`` unless an equal or earlier claim exists.

        Returns:
            True if the entry was recorded
        """
        key = name.casefold()
        entry = ExtensionImportEntry(extension_name=name, owning_package_id=owner)
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None and existing[0] <= rank:
                return False
            self._entries[key] = (rank, entry)
            return True

    def entries(self) -> list[ExtensionImportEntry]:
        """Recorded entries sorted by extension name."""
        with self._lock:
            values = [entry for _, entry in self._entries.values()]
        return sorted(values, key=lambda e: (e.extension_name.casefold(), e.extension_name))

    def to_dict(self) -> dict[str, str]:
        return {e.extension_name: e.owning_package_id for e in self.entries()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def is_safe_extension_name(name: str) -> bool:
    """Whether ``name`` stays inside the extensions directory when joined to it."""
    for flavour in (PurePosixPath, PureWindowsPath):
        path = flavour(name)
        if path.is_absolute() or path.anchor or ".." in path.parts:
            return False
    return True


def read_extension_names(config_path: Path) -> list[str]:
    """Return the extension names declared in a module config file.

    A missing or malformed file yields an empty list.
    """
    if not config_path.is_file():
        logger.debug("No module config at %s", config_path)
        return []

    try:
        root = ET.parse(config_path).getroot()
    except (ET.ParseError, OSError, LookupError, ValueError) as exc:
        logger.warning("Ignoring unreadable module config %s: %s", config_path, exc)
        return []

    section = next(
        (child for child in root if isinstance(child.tag, str) and local_name(child.tag) == EXTENSION_IMPORTS_ELEMENT),
        None,
    )
    if section is None:
        return []

    names: list[str] = []
    for element in section:
        if not isinstance(element.tag, str) or local_name(element.tag) != ADD_ELEMENT:
            continue
        name = (element.get(NAME_ATTRIBUTE) or "").strip()
        if not name:
            continue
        if not is_safe_extension_name(name):
            logger.warning("Ignoring extension import '%s' in %s: path escapes the extensions directory", name, config_path)
            continue
        names.append(name)
    return names


def _scan_module(
    extension_map: ExtensionImportMap,
    rank: int,
    package: PackageIdentity,
    module_config_relative_path: str,
) -> int:
    names = read_extension_names(package.absolute_path / module_config_relative_path)
    for name in names:
        if not extension_map.try_add(name, package.id, rank=rank):
            logger.debug("Extension import '%s' from %s is already owned by another module", name, package.id)
    return len(names)


def discover_extensions(
    registry: PackageRegistry,
    module_config_relative_path: str,
    *,
    max_workers: int | None = None,
) -> dict[str, str]:
    """Scan every module's config for extension imports.

    Blocks until every module has been scanned.

    Args:
        registry: Resolved module packages
        module_config_relative_path: Config file path relative to each module root
        max_workers: Thread pool size (default: ThreadPoolExecutor's default)

    Returns:
        Mapping of extension name to owning package id, sorted by name
    """
    entries = discover_extension_entries(registry, module_config_relative_path, max_workers=max_workers)
    return {e.extension_name: e.owning_package_id for e in entries}


def discover_extension_entries(
    registry: PackageRegistry,
    module_config_relative_path: str,
    *,
    max_workers: int | None = None,
) -> list[ExtensionImportEntry]:
    """Same as :func:`discover_extensions`, returning entry objects."""
    relative = (module_config_relative_path or "").strip()
    extension_map = ExtensionImportMap()
    if not relative or len(registry) == 0:
        return extension_map.entries()

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="cbt-extensions") as executor:
        futures = [
            executor.submit(_scan_module, extension_map, rank, package, relative)
            for rank, package in enumerate(registry.values())
        ]
        for future in futures:
            # Re-raises unexpected scan failures; expected ones are logged in the worker.
            future.result()

    entries = extension_map.entries()
    logger.info("Discovered %d extension import(s) across %d module(s)", len(entries), len(registry))
    return entries


__all__ = [
    "ExtensionImportMap",
    "is_safe_extension_name",
    "read_extension_names",
    "discover_extensions",
    "discover_extension_entries",
]
