"""Module generation commands.

- generate: Write the module imports file and extension fragments
- list: List resolved module packages
- extensions: List extension imports declared by modules
"""
from __future__ import annotations

SUBCOMMANDS = {
    "generate": "cbt.cli.module.generate",
    "list": "cbt.cli.module.list",
    "extensions": "cbt.cli.module.extensions",
}

__all__ = ["SUBCOMMANDS"]
