"""
Entry point for the ``cbt`` command.

Commands are found on disk: every public ``.py`` file in a public subpackage
of ``cbt.cli`` becomes ``cbt <subpackage> <file>``. A command module exposes
``SUMMARY``, ``register_args(parser)`` and ``main(args) -> int``.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_CLI_DIR = Path(__file__).parent


def _is_public_module(path: Path) -> bool:
    return path.suffix == ".py" and not path.name.startswith("_")


@lru_cache(maxsize=1)
def discover_domains() -> dict[str, Path]:
    """Map each command domain (``module``, ...) to its directory."""
    return {
        item.name: item
        for item in sorted(_CLI_DIR.iterdir())
        if item.is_dir()
        and not item.name.startswith("_")
        and any(_is_public_module(f) for f in item.iterdir())
    }


@lru_cache(maxsize=32)
def discover_commands(domain: str) -> dict[str, dict[str, Any]]:
    """Import every command module of ``domain``.

    Returns:
        Command name -> ``{"module", "summary", "register_args", "main"}``
    """
    commands: dict[str, dict[str, Any]] = {}
    for path in sorted((_CLI_DIR / domain).glob("*.py")):
        if not _is_public_module(path):
            continue
        try:
            module = importlib.import_module(f"cbt.cli.{domain}.{path.stem}")
        except ImportError as e:
            print(f"Warning: Could not import {domain}.{path.stem}: {e}", file=sys.stderr)
            continue
        commands[path.stem] = {
            "module": module,
            "summary": getattr(module, "SUMMARY", f"{domain} {path.stem}"),
            "register_args": getattr(module, "register_args", None),
            "main": getattr(module, "main", None),
        }
    return commands


def build_parser() -> argparse.ArgumentParser:
    from cbt import __version__

    parser = argparse.ArgumentParser(
        prog="cbt",
        description="Generate MSBuild module import fragments from dependency manifests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output to stderr (or --log-file)")
    parser.add_argument("--log-file", metavar="PATH", help="Write logs to this file instead of stderr")

    domains = parser.add_subparsers(dest="domain", title="domains", metavar="<domain>")
    for domain_name in discover_domains():
        commands = discover_commands(domain_name)
        if not commands:
            continue

        domain_parser = domains.add_parser(domain_name, help=f"{domain_name.title()} commands")
        domain_parser.set_defaults(_domain_parser=domain_parser)
        subcommands = domain_parser.add_subparsers(dest="command", title="commands", metavar="<command>")

        for cmd_name, info in commands.items():
            cmd_parser = subcommands.add_parser(cmd_name.replace("_", "-"), help=info["summary"])
            if info["register_args"]:
                info["register_args"](cmd_parser)
            if info["main"]:
                cmd_parser.set_defaults(_func=info["main"])

    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse ``argv`` (default: ``sys.argv[1:]``) and run the selected command.

    Returns:
        The command's exit code; 0 when only help was printed
    """
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    handler = getattr(args, "_func", None)
    if handler is None:
        getattr(args, "_domain_parser", parser).print_help()
        return 0

    from cbt.core.logging_setup import configure_stdlib_logging

    configure_stdlib_logging(
        level="DEBUG" if args.verbose else "WARNING",
        log_path=Path(args.log_file) if args.log_file else None,
    )
    logger.debug("Running cbt %s %s", args.domain, args.command)

    return int(handler(args) or 0)


if __name__ == "__main__":
    sys.exit(main())
