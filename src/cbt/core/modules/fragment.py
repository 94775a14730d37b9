"""In-memory MSBuild project fragments.

A fragment is an ordered property group plus an ordered list of imports,
serialized deterministically so identical inputs give byte-identical files.
"""
from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from cbt.core.utils.io import write_text

MSBUILD_NAMESPACE = "http://schemas.microsoft.com/developer/msbuild/2003"
DEFAULT_TOOLS_VERSION = "14.0"
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'


def exists_condition(project: str) -> str:
    """Condition that is true only when ``project`` exists on disk."""
    return f"Exists('{project}')"


def local_name(tag: str) -> str:
    """Strip any ``{namespace}`` prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


@dataclass(frozen=True, slots=True)
class ImportDirective:
    """An ``<Import Project=".." Condition=".." />`` element."""

    project: str
    condition: str = ""

    @classmethod
    def guarded(cls, project: str) -> ImportDirective:
        return cls(project=project, condition=exists_condition(project))


@dataclass
class ProjectFragment:
    """An MSBuild project document under construction.

    Attributes:
        properties: Ordered (name, value) pairs; None means no property group
        imports: Ordered import directives
        tools_version: Value of the root ``ToolsVersion`` attribute
    """

    properties: list[tuple[str, str]] | None = None
    imports: list[ImportDirective] = field(default_factory=list)
    tools_version: str = DEFAULT_TOOLS_VERSION

    def set_property(self, name: str, value: str) -> None:
        """Set ``name`` in the property group, replacing an existing value in place."""
        if self.properties is None:
            self.properties = []
        for index, (existing, _) in enumerate(self.properties):
            if existing == name:
                self.properties[index] = (name, value)
                return
        self.properties.append((name, value))

    def add_guarded_imports(self, projects: Iterable[str]) -> None:
        """Append one existence-guarded import per non-blank project path."""
        for project in projects:
            if project and project.strip():
                self.imports.append(ImportDirective.guarded(project))

    def to_element(self) -> ET.Element:
        root = ET.Element("Project", {"ToolsVersion": self.tools_version, "xmlns": MSBUILD_NAMESPACE})
        if self.properties is not None:
            group = ET.SubElement(root, "PropertyGroup")
            for name, value in self.properties:
                ET.SubElement(group, name).text = value
        for directive in self.imports:
            attrs = {"Project": directive.project}
            if directive.condition:
                attrs["Condition"] = directive.condition
            ET.SubElement(root, "Import", attrs)
        return root

    def to_xml(self) -> str:
        root = self.to_element()
        ET.indent(root, space="  ")
        return f"{XML_DECLARATION}\n{ET.tostring(root, encoding='unicode')}\n"

    def save(self, path: Path) -> None:
        """Atomically write the serialized fragment to ``path``."""
        write_text(Path(path), self.to_xml())


__all__ = [
    "MSBUILD_NAMESPACE",
    "DEFAULT_TOOLS_VERSION",
    "exists_condition",
    "local_name",
    "ImportDirective",
    "ProjectFragment",
]
