"""
cbt module generate command.

SUMMARY: Write the module imports file and extension fragments
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

SUMMARY = "Write the module imports file and extension fragments"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_registry_args(parser)
    parser.add_argument(
        "--imports-file",
        dest="imports_file",
        help="Primary fragment to write",
    )
    parser.add_argument(
        "--extensions-path",
        dest="extensions_path",
        help="Existing directory extension fragments are written into",
    )
    parser.add_argument(
        "--property-name-prefix",
        dest="property_name_prefix",
        help="Prefix of each module property name (default: CBTModule_)",
    )
    parser.add_argument(
        "--property-value-prefix",
        dest="property_value_prefix",
        help="Prefix of each module path (default: packages path + '/')",
    )
    parser.add_argument(
        "--import-relative-path",
        dest="import_relative_paths",
        action="append",
        metavar="PATH",
        help="Import path relative to each module root; repeatable",
    )
    parser.add_argument(
        "--before-import",
        dest="before_imports",
        action="append",
        metavar="PATH",
        help="Import placed before the module imports; repeatable",
    )
    parser.add_argument(
        "--after-import",
        dest="after_imports",
        action="append",
        metavar="PATH",
        help="Import placed after the module imports; repeatable",
    )
    add_json_flag(parser)
    add_repo_root_flag(parser)


def main(args: argparse.Namespace) -> int:
    """Generate module fragments."""
    from cbt.core.modules.exceptions import InvalidArgumentError
    from cbt.core.modules.generator import ModulePropertyGenerator

    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        settings = get_module_settings(args)
        if settings.imports_file is None:
            raise InvalidArgumentError("--imports-file is required", context={"argument": "imports_file"})

        generator = ModulePropertyGenerator.from_settings(settings)
        generator.generate(
            settings.imports_file,
            settings.extensions_path,
            settings.config_path,
            settings.property_name_prefix,
            settings.resolved_property_value_prefix,
            settings.import_relative_paths,
            settings.before_imports,
            settings.after_imports,
        )
        result = generator.last_result
        assert result is not None

        formatter.success(
            result.to_dict(),
            f"Generated {result.imports_file} ({result.module_count} module(s), "
            f"{len(result.extension_files)} extension import(s))",
        )
        return 0

    except Exception as e:
        formatter.error(e, error_code="module_generate_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    parsed = parser.parse_args()
    raise SystemExit(main(parsed))
