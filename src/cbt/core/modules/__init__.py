"""Module property generation.

Resolves module packages declared in dependency manifests and writes the
MSBuild fragments that import their build logic.

Key components:
- ManifestParser: Read packages.config / project.json manifests
- PackageRegistry: Immutable, case-insensitive package collection
- discover_extensions: Concurrent scan for declared extension imports
- ModulePropertyGenerator: Write the primary and extension fragments
- load_module_settings: Layered YAML + env settings
"""
from __future__ import annotations

from cbt.core.modules.config import ModuleSettings, load_module_settings
from cbt.core.modules.exceptions import (
    FragmentWriteError,
    InvalidArgumentError,
    ManifestParseError,
    ModuleError,
    ModuleSettingsError,
    PackagesDirectoryNotFoundError,
)
from cbt.core.modules.extensions import ExtensionImportMap, discover_extensions
from cbt.core.modules.fragment import ImportDirective, ProjectFragment
from cbt.core.modules.generator import ModulePropertyGenerator
from cbt.core.modules.manifests import (
    DEFAULT_PARSERS,
    ManifestParser,
    PackagesConfigParser,
    ProjectJsonParser,
)
from cbt.core.modules.models import ExtensionImportEntry, GenerationResult, PackageIdentity
from cbt.core.modules.registry import PackageRegistry, build_registry

__all__ = [
    # Settings
    "ModuleSettings",
    "load_module_settings",
    # Parsers
    "ManifestParser",
    "PackagesConfigParser",
    "ProjectJsonParser",
    "DEFAULT_PARSERS",
    # Registry
    "PackageRegistry",
    "build_registry",
    # Extensions
    "ExtensionImportMap",
    "discover_extensions",
    # Generation
    "ModulePropertyGenerator",
    "ProjectFragment",
    "ImportDirective",
    # Models
    "PackageIdentity",
    "ExtensionImportEntry",
    "GenerationResult",
    # Exceptions
    "ModuleError",
    "InvalidArgumentError",
    "PackagesDirectoryNotFoundError",
    "ManifestParseError",
    "FragmentWriteError",
    "ModuleSettingsError",
]
