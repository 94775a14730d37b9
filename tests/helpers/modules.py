"""Builders and readers for module manifests, packages and generated fragments."""
from __future__ import annotations

import json
import textwrap
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from pathlib import Path
from typing import Any
from xml.sax.saxutils import quoteattr

MSBUILD_NS = "{http://schemas.microsoft.com/developer/msbuild/2003}"
MODULE_CONFIG = "CBT/Module/module.config"


def write_text(path: Path, content: str) -> Path:
    """Write dedented text, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def write_packages_config(path: Path, packages: Iterable[tuple[str | None, str | None]]) -> Path:
    """Write a packages.config; a None id or version omits that attribute."""
    lines = ['<?xml version="1.0" encoding="utf-8"?>', "<packages>"]
    for package_id, version in packages:
        attrs = ""
        if package_id is not None:
            attrs += f" id={quoteattr(package_id)}"
        if version is not None:
            attrs += f" version={quoteattr(version)}"
        lines.append(f"  <package{attrs} />")
    lines.append("</packages>")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def write_project_json(path: Path, data: dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def make_module(
    packages_root: Path,
    package_id: str,
    version: str,
    *,
    extensions: Iterable[str] | None = None,
    config_relative_path: str = MODULE_CONFIG,
) -> Path:
    """Create a restored module directory, optionally declaring extension imports."""
    module_dir = packages_root / f"{package_id}.{version}"
    module_dir.mkdir(parents=True, exist_ok=True)
    if extensions is not None:
        adds = "\n".join(f"    <add name={quoteattr(name)} />" for name in extensions)
        write_text(
            module_dir / config_relative_path,
            f'<?xml version="1.0" encoding="utf-8"?>\n<configuration>\n  <extensionImports>\n{adds}\n  </extensionImports>\n</configuration>\n',
        )
    return module_dir


def read_imports(path: Path) -> list[tuple[str, str]]:
    """(Project, Condition) of every Import in a generated fragment, in order."""
    root = ET.parse(path).getroot()
    return [(e.get("Project", ""), e.get("Condition", "")) for e in root.findall(f"{MSBUILD_NS}Import")]


def read_properties(path: Path) -> list[tuple[str, str]]:
    """(name, value) of every property in a generated fragment, in order."""
    root = ET.parse(path).getroot()
    props: list[tuple[str, str]] = []
    for group in root.findall(f"{MSBUILD_NS}PropertyGroup"):
        for element in group:
            props.append((element.tag.replace(MSBUILD_NS, ""), element.text or ""))
    return props
