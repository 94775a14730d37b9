"""Module generation settings.

Settings sources (highest to lowest priority):
1. Explicit overrides (CLI flags)
2. Environment variables: ``CBT_modules__<key>``
3. Project settings: ``<repo-root>/.cbt/config/modules.yaml``
4. Bundled defaults: ``cbt.data/config/modules.yaml``

The merged ``modules`` section is validated against
``cbt.data/schemas/modules.schema.yaml`` before use.
"""
from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from jsonschema import Draft202012Validator

from cbt.core.modules.exceptions import ModuleSettingsError
from cbt.core.utils.io import read_yaml
from cbt.core.utils.merge import deep_merge
from cbt.data import get_data_path
from cbt.data import read_yaml as read_data_yaml

logger = logging.getLogger(__name__)

SECTION = "modules"
ENV_PREFIX = "CBT_"
PROJECT_SETTINGS_PATH = Path(".cbt") / "config" / "modules.yaml"

_LIST_KEYS = ("package_configs", "import_relative_paths", "before_imports", "after_imports")


@dataclass(frozen=True)
class ModuleSettings:
    """Resolved inputs for one generation run.

    Path-valued settings are absolute (resolved against the repo root).
    """

    packages_path: Optional[Path]
    package_configs: tuple[Path, ...]
    config_path: str
    imports_file: Optional[Path]
    extensions_path: Optional[Path]
    property_name_prefix: str
    property_value_prefix: Optional[str]
    import_relative_paths: tuple[str, ...]
    before_imports: tuple[str, ...]
    after_imports: tuple[str, ...]
    key_mode: str = "id"
    max_workers: Optional[int] = None

    @property
    def resolved_property_value_prefix(self) -> str:
        """Configured value prefix, or the packages root followed by ``/``."""
        if self.property_value_prefix is not None:
            return self.property_value_prefix
        if self.packages_path is None:
            return ""
        return default_property_value_prefix(self.packages_path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "packages_path": str(self.packages_path) if self.packages_path else None,
            "package_configs": [str(p) for p in self.package_configs],
            "config_path": self.config_path,
            "imports_file": str(self.imports_file) if self.imports_file else None,
            "extensions_path": str(self.extensions_path) if self.extensions_path else None,
            "property_name_prefix": self.property_name_prefix,
            "property_value_prefix": self.resolved_property_value_prefix,
            "import_relative_paths": list(self.import_relative_paths),
            "before_imports": list(self.before_imports),
            "after_imports": list(self.after_imports),
            "key_mode": self.key_mode,
            "max_workers": self.max_workers,
        }


def default_property_value_prefix(packages_root: Path) -> str:
    return Path(packages_root).as_posix().rstrip("/") + "/"


def _as_bool(v: str) -> Optional[bool]:
    low = v.strip().lower()
    if low in {"true", "false"}:
        return low == "true"
    return None


def _as_int(v: str) -> Optional[int]:
    if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
        return int(v)
    return None


def _as_json(v: str) -> Optional[Any]:
    s = v.strip()
    if s.startswith("[") and s.endswith("]"):
        try:
            return json.loads(s)
        except ValueError:
            return None
    return None


def _coerce_env_value(key: str, value: str) -> Any:
    if value.strip().lower() == "null":
        return None
    if key in _LIST_KEYS:
        parsed = _as_json(value)
        if isinstance(parsed, list):
            return parsed
        # MSBuild-style item lists
        return [part.strip() for part in value.split(";") if part.strip()]
    for caster in (_as_bool, _as_int):
        result = caster(value)
        if result is not None:
            return result
    return value.strip()


def env_overrides(environ: Mapping[str, str] | None = None) -> Dict[str, Any]:
    """Collect ``CBT_modules__<key>`` overrides from the environment.

    Keys are case-insensitive; list settings accept JSON arrays or
    ``;``-separated values.
    """
    env = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}
    for raw_key in sorted(env.keys()):
        if not raw_key.startswith(ENV_PREFIX):
            continue
        parts = raw_key[len(ENV_PREFIX):].split("__")
        if len(parts) != 2 or parts[0].lower() != SECTION or not parts[1]:
            continue
        key = parts[1].lower()
        overrides[key] = _coerce_env_value(key, env[raw_key])
    return overrides


def validate_settings(section: Dict[str, Any]) -> None:
    """Validate a merged ``modules`` section.

    Raises:
        ModuleSettingsError: Listing every violation found
    """
    schema = read_data_yaml("schemas", "modules.schema.yaml")
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(section), key=lambda e: list(e.path))
    if errors:
        details: List[str] = []
        for err in errors:
            where = ".".join(str(p) for p in err.path) or SECTION
            details.append(f"{where}: {err.message}")
        raise ModuleSettingsError(
            "Invalid module settings: " + "; ".join(details),
            context={"errors": details, "schema": str(get_data_path("schemas", "modules.schema.yaml"))},
        )


def load_module_settings(
    repo_root: Path,
    overrides: Mapping[str, Any] | None = None,
    *,
    settings_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ModuleSettings:
    """Load, merge and validate module settings.

    Args:
        repo_root: Root that relative paths and the project settings file resolve against
        overrides: Highest-priority values; ``None`` values are ignored
        settings_file: Project settings file (default: ``.cbt/config/modules.yaml``)
        environ: Environment mapping (default: ``os.environ``)

    Returns:
        ModuleSettings

    Raises:
        ModuleSettingsError: If the merged settings fail validation
    """
    repo_root = Path(repo_root)
    defaults = read_data_yaml("config", "modules.yaml") or {}
    merged: Dict[str, Any] = dict(defaults.get(SECTION) or {})

    project_file = Path(settings_file) if settings_file is not None else repo_root / PROJECT_SETTINGS_PATH
    if not project_file.is_absolute():
        project_file = repo_root / project_file
    project_data: Any = {}
    if settings_file is not None or project_file.exists():
        # Fail closed: an unreadable or invalid settings file is never ignored.
        try:
            project_data = read_yaml(project_file, default={}, raise_on_error=True)
        except (OSError, yaml.YAMLError) as exc:
            raise ModuleSettingsError(
                f"Cannot read settings file '{project_file}': {exc}",
                context={"settings_file": str(project_file)},
            ) from exc
    if not isinstance(project_data, dict) or not isinstance(project_data.get(SECTION) or {}, dict):
        raise ModuleSettingsError(
            f"Settings file '{project_file}' must contain a '{SECTION}' mapping",
            context={"settings_file": str(project_file)},
        )
    if project_data:
        logger.debug("Applying module settings from %s", project_file)
        merged = deep_merge(merged, project_data.get(SECTION) or {})

    merged = deep_merge(merged, env_overrides(environ))
    merged = deep_merge(merged, {k: v for k, v in (overrides or {}).items() if v is not None})

    validate_settings(merged)
    return _to_settings(repo_root, merged)


def _resolve(repo_root: Path, value: Optional[str]) -> Optional[Path]:
    if value is None or not str(value).strip():
        return None
    path = Path(str(value).strip()).expanduser()
    return path if path.is_absolute() else repo_root / path


def _to_settings(repo_root: Path, section: Dict[str, Any]) -> ModuleSettings:
    package_configs = tuple(
        p for p in (_resolve(repo_root, c) for c in section.get("package_configs") or []) if p is not None
    )
    return ModuleSettings(
        packages_path=_resolve(repo_root, section.get("packages_path")),
        package_configs=package_configs,
        config_path=str(section["config_path"]),
        imports_file=_resolve(repo_root, section.get("imports_file")),
        extensions_path=_resolve(repo_root, section.get("extensions_path")),
        property_name_prefix=str(section.get("property_name_prefix") or ""),
        property_value_prefix=section.get("property_value_prefix"),
        import_relative_paths=tuple(section.get("import_relative_paths") or ()),
        before_imports=tuple(section.get("before_imports") or ()),
        after_imports=tuple(section.get("after_imports") or ()),
        key_mode=str(section.get("key_mode") or "id"),
        max_workers=section.get("max_workers"),
    )


__all__ = [
    "ModuleSettings",
    "PROJECT_SETTINGS_PATH",
    "default_property_value_prefix",
    "env_overrides",
    "validate_settings",
    "load_module_settings",
]
