"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_repo_root_flag(parser: argparse.ArgumentParser) -> None:
    """Add --repo-root flag for repository root override."""
    parser.add_argument(
        "--repo-root",
        type=str,
        help="Root that relative paths and .cbt/config resolve against (default: current directory)",
    )


def add_registry_args(parser: argparse.ArgumentParser) -> None:
    """Add the arguments needed to build the package registry.

    Every flag defaults to None so unset flags fall through to the layered settings.
    """
    parser.add_argument(
        "--packages-path",
        dest="packages_path",
        help="Directory module packages are restored into",
    )
    parser.add_argument(
        "--package-config",
        dest="package_configs",
        action="append",
        metavar="PATH",
        help="Dependency manifest (packages.config or project.json); repeatable, later wins",
    )
    parser.add_argument(
        "--config-path",
        dest="config_path",
        help="Module config path relative to each module root",
    )
    parser.add_argument(
        "--key-mode",
        dest="key_mode",
        choices=["id", "id_version"],
        help="Registry key: package id, or id and version",
    )
    parser.add_argument(
        "--max-workers",
        dest="max_workers",
        type=int,
        help="Thread pool size for extension discovery",
    )
    parser.add_argument(
        "--settings",
        dest="settings_file",
        metavar="PATH",
        help="Settings file (default: .cbt/config/modules.yaml under the repo root)",
    )


__all__ = ["add_json_flag", "add_repo_root_flag", "add_registry_args"]
