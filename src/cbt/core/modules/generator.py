"""Module property generator.

Builds the MSBuild fragments that expose every resolved module package to the
build:

- The primary fragment holds one property per module plus an aggregate
  listing, followed by existence-guarded imports of each module's build logic
  (wrapped by the before/after imports).
- One extension fragment per extension import name declared by any module,
  holding the same guarded import list without properties.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from cbt.core.modules.config import ModuleSettings, default_property_value_prefix
from cbt.core.modules.exceptions import FragmentWriteError, InvalidArgumentError
from cbt.core.modules.extensions import discover_extension_entries
from cbt.core.modules.fragment import ProjectFragment
from cbt.core.modules.manifests import ManifestParser
from cbt.core.modules.models import GenerationResult
from cbt.core.modules.registry import KEY_MODE_ID, PackageRegistry, build_registry, package_key

logger = logging.getLogger(__name__)

TRACKING_PROPERTY_NAME = "MSBuildAllProjects"
TRACKING_PROPERTY_VALUE = "$(MSBuildAllProjects);$(MSBuildThisFileFullPath)"
AGGREGATE_PROPERTY_NAME = "CBTAllModulePaths"

DEFAULT_PROPERTY_NAME_PREFIX = "CBTModule_"
DEFAULT_MODULE_CONFIG_PATH = "CBT/Module/module.config"
DEFAULT_IMPORT_RELATIVE_PATHS = ("CBT/Module/$(MSBuildThisFile)",)

_SEPARATORS = "/\\"

_ILLEGAL_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_property_name(value: str) -> str:
    """Turn a package key into a legal MSBuild property name suffix."""
    return _ILLEGAL_NAME_CHARS.sub("_", value)


def module_property_name(property_name_prefix: str, key: str) -> str:
    """Full property name for a module; never starts with a digit or hyphen."""
    name = f"{property_name_prefix}{sanitize_property_name(key)}"
    first = name[:1]
    if first != "_" and not (first.isascii() and first.isalpha()):
        name = f"_{name}"
    return name


def join_module_path(module_path: str, relative_path: str) -> str:
    """Join a module root and a path relative to it with ``/``."""
    relative = relative_path.strip().lstrip(_SEPARATORS)
    if not module_path:
        return relative
    return f"{module_path.rstrip(_SEPARATORS)}/{relative}"


def _non_blank(values: Iterable[str] | None) -> list[str]:
    return [v.strip() for v in (values or []) if v and v.strip()]


class ModulePropertyGenerator:
    """Generates module fragments from a set of dependency manifests.

    The package registry is built once, at construction, so invalid inputs
    fail before anything is written.
    """

    def __init__(
        self,
        packages_root: Path | str,
        manifest_paths: Sequence[Path | str] | None,
        parsers: Sequence[ManifestParser] | None = None,
        *,
        key_mode: str = KEY_MODE_ID,
        max_workers: int | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            packages_root: Directory module packages are restored into
            manifest_paths: Manifests declaring module packages, in priority order
            parsers: Manifest parsers (default: all supported formats)
            key_mode: ``"id"`` or ``"id_version"``
            max_workers: Thread pool size for extension discovery

        Raises:
            InvalidArgumentError: If packages_root is blank or manifest_paths is None
            PackagesDirectoryNotFoundError: If packages_root does not exist
            ManifestParseError: If a manifest is not well-formed
        """
        if manifest_paths is None:
            raise InvalidArgumentError("manifest_paths is required", context={"argument": "manifest_paths"})
        self.registry: PackageRegistry = build_registry(
            packages_root, manifest_paths, parsers, key_mode=key_mode
        )
        self.max_workers = max_workers
        self.last_result: GenerationResult | None = None

    @classmethod
    def from_settings(
        cls, settings: ModuleSettings, parsers: Sequence[ManifestParser] | None = None
    ) -> ModulePropertyGenerator:
        """Create a generator from resolved settings."""
        return cls(
            settings.packages_path or "",
            list(settings.package_configs),
            parsers,
            key_mode=settings.key_mode,
            max_workers=settings.max_workers,
        )

    def generate(
        self,
        output_path: Path | str,
        extensions_path: Path | str | None,
        module_config_path: str = DEFAULT_MODULE_CONFIG_PATH,
        property_name_prefix: str = DEFAULT_PROPERTY_NAME_PREFIX,
        property_value_prefix: str | None = None,
        import_relative_paths: Sequence[str] = DEFAULT_IMPORT_RELATIVE_PATHS,
        before_imports: Sequence[str] | None = None,
        after_imports: Sequence[str] | None = None,
    ) -> bool:
        """Write the primary fragment and one fragment per extension import.

        Extension fragments are written independently: a failed write does not
        stop the others, but any failure fails the run once all were attempted.

        Args:
            output_path: Primary fragment path
            extensions_path: Existing directory for extension fragments
            module_config_path: Module config path relative to each module root
            property_name_prefix: Prefix of each per-module property name
            property_value_prefix: Prefix of each module path (default: packages root + "/")
            import_relative_paths: Import paths relative to each module root
            before_imports: Imports placed before the module imports
            after_imports: Imports placed after the module imports

        Returns:
            True

        Raises:
            InvalidArgumentError: If output_path is blank, or extensions were
                found but extensions_path is blank
            FragmentWriteError: If any fragment could not be written
        """
        if output_path is None or not str(output_path).strip():
            raise InvalidArgumentError("output_path is required", context={"argument": "output_path"})
        if property_value_prefix is None:
            property_value_prefix = default_property_value_prefix(self.registry.packages_root)

        module_paths = self.module_paths(property_value_prefix)
        import_paths = self.module_import_paths(module_paths, import_relative_paths)

        project = self.create_properties_fragment(property_name_prefix, property_value_prefix)
        self._add_imports(project, import_paths, before_imports, after_imports)
        imports_file = Path(str(output_path).strip())
        self._save(project, imports_file)
        logger.info("Wrote %d module(s) to %s", len(self.registry), imports_file)

        entries = discover_extension_entries(
            self.registry, module_config_path, max_workers=self.max_workers
        )
        if entries and (extensions_path is None or not str(extensions_path).strip()):
            raise InvalidArgumentError(
                "extensions_path is required when modules declare extension imports",
                context={"argument": "extensions_path", "extensions": [e.extension_name for e in entries]},
            )

        written: list[Path] = []
        failures: list[FragmentWriteError] = []
        for entry in entries:
            extension_project = ProjectFragment()
            self._add_imports(extension_project, import_paths, before_imports, after_imports)
            target = Path(str(extensions_path).strip()) / entry.extension_name.strip()
            try:
                self._save(extension_project, target)
            except FragmentWriteError as exc:
                logger.error("%s", exc)
                failures.append(exc)
                continue
            logger.debug("Wrote extension import '%s' (owner %s) to %s", entry.extension_name, entry.owning_package_id, target)
            written.append(target)

        if failures:
            raise FragmentWriteError(
                f"Failed to write {len(failures)} of {len(entries)} extension fragment(s): "
                + "; ".join(str(f) for f in failures),
                context={"paths": [f.context.get("path") for f in failures]},
            )

        self.last_result = GenerationResult(
            imports_file=imports_file,
            module_count=len(self.registry),
            extensions=tuple(entries),
            extension_files=tuple(written),
        )
        return True

    def module_paths(self, property_value_prefix: str) -> list[str]:
        """Module root paths as written into the fragment, in registry order."""
        return [f"{property_value_prefix}{p.relative_path}" for p in self.registry.values()]

    def module_import_paths(self, module_paths: Sequence[str], import_relative_paths: Iterable[str]) -> list[str]:
        """Every module path joined with every relative import path, module-major."""
        relative_paths = _non_blank(import_relative_paths)
        return [
            join_module_path(module_path, relative_path)
            for module_path in module_paths
            for relative_path in relative_paths
        ]

    def create_properties_fragment(self, property_name_prefix: str, property_value_prefix: str) -> ProjectFragment:
        """Fragment holding the tracking, per-module and aggregate properties."""
        project = ProjectFragment()
        project.set_property(TRACKING_PROPERTY_NAME, TRACKING_PROPERTY_VALUE)

        listing: list[str] = []
        for package in self.registry.values():
            value = f"{property_value_prefix}{package.relative_path}"
            name = module_property_name(property_name_prefix, package_key(package, self.registry.key_mode))
            project.set_property(name, value)
            listing.append(f"{package.id}={value}")

        project.set_property(AGGREGATE_PROPERTY_NAME, ";".join(listing))
        return project

    def _add_imports(
        self,
        project: ProjectFragment,
        module_import_paths: Sequence[str],
        before_imports: Sequence[str] | None,
        after_imports: Sequence[str] | None,
    ) -> None:
        project.add_guarded_imports(_non_blank(before_imports))
        project.add_guarded_imports(module_import_paths)
        project.add_guarded_imports(_non_blank(after_imports))

    def _save(self, project: ProjectFragment, path: Path) -> None:
        try:
            project.save(path)
        except OSError as exc:
            raise FragmentWriteError(
                f"Failed to write '{path}': {exc}",
                context={"path": str(path)},
            ) from exc


__all__ = [
    "TRACKING_PROPERTY_NAME",
    "TRACKING_PROPERTY_VALUE",
    "AGGREGATE_PROPERTY_NAME",
    "DEFAULT_PROPERTY_NAME_PREFIX",
    "DEFAULT_MODULE_CONFIG_PATH",
    "DEFAULT_IMPORT_RELATIVE_PATHS",
    "ModulePropertyGenerator",
    "sanitize_property_name",
    "module_property_name",
    "join_module_path",
]
