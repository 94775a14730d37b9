"""Shared CLI utilities."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from cbt.core.modules.config import ModuleSettings, load_module_settings

_SETTING_ARGS = (
    "packages_path",
    "package_configs",
    "config_path",
    "imports_file",
    "extensions_path",
    "property_name_prefix",
    "property_value_prefix",
    "import_relative_paths",
    "before_imports",
    "after_imports",
    "key_mode",
    "max_workers",
)


def get_repo_root(args: argparse.Namespace) -> Path:
    """Get repository root from args, falling back to the current directory."""
    if getattr(args, "repo_root", None):
        return Path(args.repo_root).resolve()
    return Path.cwd()


def get_module_settings(args: argparse.Namespace) -> ModuleSettings:
    """Resolve module settings with the command's flags as highest priority."""
    overrides: dict[str, Any] = {key: getattr(args, key, None) for key in _SETTING_ARGS}
    settings_file = getattr(args, "settings_file", None)
    return load_module_settings(
        get_repo_root(args),
        overrides,
        settings_file=Path(settings_file) if settings_file else None,
    )


__all__ = ["get_repo_root", "get_module_settings"]
