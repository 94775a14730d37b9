"""Package registry.

Folds the packages declared by every manifest into a single immutable,
case-insensitively keyed collection. Manifests are folded in the order given,
then parsers in order, then entries in declaration order; a later entry with
the same key replaces the earlier one but keeps its position.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from functools import reduce
from pathlib import Path
from types import MappingProxyType

from cbt.core.modules.exceptions import InvalidArgumentError, PackagesDirectoryNotFoundError
from cbt.core.modules.manifests import DEFAULT_PARSERS, ManifestParser
from cbt.core.modules.models import PackageIdentity

logger = logging.getLogger(__name__)

KEY_MODE_ID = "id"
KEY_MODE_ID_VERSION = "id_version"
KEY_MODES = (KEY_MODE_ID, KEY_MODE_ID_VERSION)


def package_key(package: PackageIdentity, key_mode: str = KEY_MODE_ID) -> str:
    """Return the display form of the registry key for ``package``."""
    if key_mode == KEY_MODE_ID_VERSION:
        return package.relative_path
    return package.id


class PackageRegistry:
    """Read-only mapping of registry key to resolved package.

    Lookups are case-insensitive; iteration follows insertion order.
    """

    __slots__ = ("_packages_root", "_key_mode", "_entries", "_keys")

    def __init__(
        self,
        packages_root: Path,
        entries: Mapping[str, PackageIdentity] | None = None,
        *,
        key_mode: str = KEY_MODE_ID,
    ) -> None:
        self._packages_root = Path(packages_root)
        self._key_mode = key_mode
        folded = {k.casefold(): v for k, v in (entries or {}).items()}
        self._entries: Mapping[str, PackageIdentity] = MappingProxyType(folded)
        self._keys: tuple[str, ...] = tuple(package_key(p, key_mode) for p in folded.values())

    @property
    def packages_root(self) -> Path:
        return self._packages_root

    @property
    def key_mode(self) -> str:
        return self._key_mode

    def get(self, key: str) -> PackageIdentity | None:
        return self._entries.get(str(key).casefold())

    def keys(self) -> tuple[str, ...]:
        return self._keys

    def values(self) -> tuple[PackageIdentity, ...]:
        return tuple(self._entries.values())

    def items(self) -> tuple[tuple[str, PackageIdentity], ...]:
        return tuple(zip(self._keys, self._entries.values()))

    def __getitem__(self, key: str) -> PackageIdentity:
        return self._entries[str(key).casefold()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.casefold() in self._entries

    def __iter__(self) -> Iterator[PackageIdentity]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PackageRegistry({list(self._keys)!r}, key_mode={self._key_mode!r})"


def validate_packages_root(packages_root: Path | str | None) -> Path:
    """Return ``packages_root`` as a Path, or raise if it is blank or missing.

    Raises:
        InvalidArgumentError: If the path is empty or whitespace
        PackagesDirectoryNotFoundError: If the directory does not exist
    """
    if packages_root is None or not str(packages_root).strip():
        raise InvalidArgumentError("packages_root is required", context={"argument": "packages_root"})

    root = Path(str(packages_root).strip())
    if not root.is_dir():
        raise PackagesDirectoryNotFoundError(
            f"Could not find part of the path '{root}'",
            context={"packages_root": str(root)},
        )
    return root


def build_registry(
    packages_root: Path | str,
    manifest_paths: Iterable[Path | str] | None,
    parsers: Sequence[ManifestParser] | None = None,
    *,
    key_mode: str = KEY_MODE_ID,
) -> PackageRegistry:
    """Build the package registry from ``manifest_paths``.

    Args:
        packages_root: Directory module packages are restored into
        manifest_paths: Manifests to fold, in order; blank entries are ignored
        parsers: Parsers to run over every manifest (default: all known formats)
        key_mode: ``"id"`` (default) or ``"id_version"``

    Returns:
        PackageRegistry

    Raises:
        InvalidArgumentError: If packages_root is blank or key_mode is unknown
        PackagesDirectoryNotFoundError: If packages_root does not exist
        ManifestParseError: If any manifest is not well-formed
    """
    root = validate_packages_root(packages_root)
    if key_mode not in KEY_MODES:
        raise InvalidArgumentError(
            f"Unknown key mode '{key_mode}' (expected one of: {', '.join(KEY_MODES)})",
            context={"argument": "key_mode", "value": key_mode},
        )

    active_parsers = tuple(DEFAULT_PARSERS if parsers is None else parsers)
    manifests = [Path(str(p).strip()) for p in (manifest_paths or []) if str(p).strip()]

    def fold_entry(entries: dict[str, PackageIdentity], package: PackageIdentity) -> dict[str, PackageIdentity]:
        key = package_key(package, key_mode).casefold()
        previous = entries.get(key)
        if previous is not None and previous != package:
            logger.debug(
                "Package %s %s replaces %s %s",
                package.id,
                package.version,
                previous.id,
                previous.version,
            )
        # Reassigning an existing key keeps its original position.
        entries[key] = package
        return entries

    def fold_manifest(entries: dict[str, PackageIdentity], manifest: Path) -> dict[str, PackageIdentity]:
        for parser in active_parsers:
            entries = reduce(fold_entry, parser.parse(root, manifest), entries)
        return entries

    folded = reduce(fold_manifest, manifests, {})
    logger.info("Resolved %d module package(s) from %d manifest(s)", len(folded), len(manifests))
    return PackageRegistry(root, folded, key_mode=key_mode)


__all__ = [
    "KEY_MODE_ID",
    "KEY_MODE_ID_VERSION",
    "KEY_MODES",
    "PackageRegistry",
    "package_key",
    "validate_packages_root",
    "build_registry",
]
