"""
cbt CLI package.

Provides the command-line interface with auto-discovery of commands
from domain subfolders (module/, ...).

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._output import OutputFormatter
from ._args import add_json_flag, add_registry_args, add_repo_root_flag
from ._utils import get_module_settings, get_repo_root

__all__ = [
    "OutputFormatter",
    "add_json_flag",
    "add_repo_root_flag",
    "add_registry_args",
    "get_repo_root",
    "get_module_settings",
]
