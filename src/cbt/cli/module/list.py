"""
cbt module list command.

SUMMARY: List resolved module packages
"""
from __future__ import annotations

import argparse

from cbt.cli import (
    OutputFormatter,
    add_json_flag,
    add_registry_args,
    add_repo_root_flag,
    get_module_settings,
)

SUMMARY = "List resolved module packages"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_registry_args(parser)
    add_json_flag(parser)
    add_repo_root_flag(parser)


def main(args: argparse.Namespace) -> int:
    """List module packages in registry order."""
    from cbt.core.modules.registry import build_registry

    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        settings = get_module_settings(args)
        registry = build_registry(
            settings.packages_path or "",
            settings.package_configs,
            key_mode=settings.key_mode,
        )

        if formatter.json_mode:
            formatter.json_output(
                {
                    "packages_path": str(registry.packages_root),
                    "modules": [
                        {**package.to_dict(), "key": key, "exists": package.absolute_path.is_dir()}
                        for key, package in registry.items()
                    ],
                }
            )
            return 0

        if not len(registry):
            formatter.text("No module packages declared.")
            return 0

        formatter.text(f"Module packages ({len(registry)}):")
        for package in registry.values():
            missing = "" if package.absolute_path.is_dir() else " (not restored)"
            formatter.text(f"  {package.id} {package.version}{missing}")
            formatter.text_kv("Path", package.absolute_path, prefix="    ")
        return 0

    except Exception as e:
        formatter.error(e, error_code="module_list_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    parsed = parser.parse_args()
    raise SystemExit(main(parsed))
