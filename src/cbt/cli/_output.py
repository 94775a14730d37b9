"""Command output in text or ``--json`` form.

Results go to stdout; errors go to stderr in both modes.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

from cbt.core.exceptions import CBTError


class OutputFormatter:
    """Prints command results as plain text or as indented JSON."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def _dump(self, data: Any, *, stream=None) -> None:
        print(json.dumps(data, indent=self.indent, default=str), file=stream or sys.stdout)

    def success(self, data: Dict[str, Any], message: str, *, status: str = "success") -> None:
        """Print ``message``, or ``data`` tagged with ``status`` in JSON mode."""
        if self.json_mode:
            self._dump({"status": status, **data})
        else:
            print(message)

    def error(self, error: Exception, message: Optional[str] = None, *, error_code: str = "error") -> None:
        """Report ``error`` on stderr.

        In JSON mode cbt errors also carry their class name and context.
        """
        msg = message or str(error)
        if not self.json_mode:
            print(f"Error: {msg}", file=sys.stderr)
            return

        payload: Dict[str, Any] = {"error": error_code, "message": msg}
        if isinstance(error, CBTError):
            details = error.to_json_error()
            payload["code"] = details["code"]
            payload["context"] = details["context"]
        self._dump(payload, stream=sys.stderr)

    def json_output(self, data: Any) -> None:
        self._dump(data)

    def text(self, message: str) -> None:
        print(message)

    def text_kv(self, key: str, value: Any, prefix: str = "  ") -> None:
        """Print ``key: value``; silent in JSON mode."""
        if not self.json_mode:
            print(f"{prefix}{key}: {value}")


__all__ = ["OutputFormatter"]
