"""
cbt module extensions command.

SUMMARY: List extension imports declared by modules
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

SUMMARY = "List extension imports declared by modules"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_registry_args(parser)
    add_json_flag(parser)
    add_repo_root_flag(parser)


def main(args: argparse.Namespace) -> int:
    """Show extension name -> owning module."""
    from cbt.core.modules.extensions import discover_extensions
    from cbt.core.modules.registry import build_registry

    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        settings = get_module_settings(args)
        registry = build_registry(
            settings.packages_path or "",
            settings.package_configs,
            key_mode=settings.key_mode,
        )
        extensions = discover_extensions(registry, settings.config_path, max_workers=settings.max_workers)

        if formatter.json_mode:
            formatter.json_output({"extensions": extensions})
            return 0

        if not extensions:
            formatter.text("No extension imports declared.")
            return 0

        formatter.text(f"Extension imports ({len(extensions)}):")
        for name, owner in extensions.items():
            formatter.text_kv(name, owner)
        return 0

    except Exception as e:
        formatter.error(e, error_code="module_extensions_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    parsed = parser.parse_args()
    raise SystemExit(main(parsed))
