"""Tests for packages.config and project.json manifest parsing."""
from __future__ import annotations

import logging
from pathlib import Path

import pytest

from helpers.modules import write_packages_config, write_project_json, write_text


class TestPackagesConfigParser:
    def test_parses_packages_in_declaration_order(self, tmp_path: Path, packages_root: Path) -> None:
        """Each <package> becomes an identity resolved under the packages root."""
        from cbt.core.modules.manifests import PackagesConfigParser

        manifest = write_packages_config(
            tmp_path / "packages.config",
            [("PackageB", "2.0.0"), ("PackageA", "1.0.0")],
        )

        packages = PackagesConfigParser().parse(packages_root, manifest)

        assert [(p.id, p.version) for p in packages] == [("PackageB", "2.0.0"), ("PackageA", "1.0.0")]
        assert packages[1].relative_path == "PackageA.1.0.0"
        assert packages[1].absolute_path == packages_root / "PackageA.1.0.0"

    def test_skips_entries_without_id_or_version(
        self, tmp_path: Path, packages_root: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Entries missing a version, or with a blank id, are skipped and logged."""
        from cbt.core.modules.manifests import PackagesConfigParser

        manifest = write_packages_config(
            tmp_path / "packages.config",
            [("PackageA", None), ("   ", "1.0.0"), (None, "1.0.0"), ("PackageB", "1.0.0")],
        )

        with caplog.at_level(logging.DEBUG, logger="cbt.core.modules.manifests"):
            packages = PackagesConfigParser().parse(packages_root, manifest)

        assert [p.id for p in packages] == ["PackageB"]
        assert "Skipping" in caplog.text

    def test_trims_surrounding_whitespace(self, tmp_path: Path, packages_root: Path) -> None:
        from cbt.core.modules.manifests import PackagesConfigParser

        manifest = write_packages_config(tmp_path / "packages.config", [(" PackageA ", " 1.0.0\t")])

        packages = PackagesConfigParser().parse(packages_root, manifest)

        assert packages[0].relative_path == "PackageA.1.0.0"

    def test_missing_manifest_yields_nothing(self, tmp_path: Path, packages_root: Path) -> None:
        from cbt.core.modules.manifests import PackagesConfigParser

        assert PackagesConfigParser().parse(packages_root, tmp_path / "missing.config") == []

    def test_other_formats_are_ignored(self, tmp_path: Path, packages_root: Path) -> None:
        """A project.json is not this parser's format."""
        from cbt.core.modules.manifests import PackagesConfigParser

        manifest = write_project_json(tmp_path / "project.json", {"dependencies": {"PackageA": "1.0.0"}})

        assert PackagesConfigParser().parse(packages_root, manifest) == []

    def test_malformed_xml_raises(self, tmp_path: Path, packages_root: Path) -> None:
        from cbt.core.modules.exceptions import ManifestParseError
        from cbt.core.modules.manifests import PackagesConfigParser

        manifest = write_text(tmp_path / "packages.config", "<packages><package id='A'</packages>")

        with pytest.raises(ManifestParseError) as excinfo:
            PackagesConfigParser().parse(packages_root, manifest)

        assert excinfo.value.context["manifest"] == str(manifest)
        assert isinstance(excinfo.value, ValueError)

    def test_unknown_encoding_raises_parse_error(self, tmp_path: Path, packages_root: Path) -> None:
        from cbt.core.modules.exceptions import ManifestParseError
        from cbt.core.modules.manifests import PackagesConfigParser

        manifest = write_text(
            tmp_path / "packages.config",
            '<?xml version="1.0" encoding="bogus-enc"?>\n<packages><package id="A" version="1.0" /></packages>\n',
        )

        with pytest.raises(ManifestParseError) as excinfo:
            PackagesConfigParser().parse(packages_root, manifest)

        assert excinfo.value.context["format"] == "packages.config"

    def test_non_package_elements_are_ignored(self, tmp_path: Path, packages_root: Path) -> None:
        from cbt.core.modules.manifests import PackagesConfigParser

        manifest = write_text(
            tmp_path / "packages.config",
            """\
            <packages>
              <!-- tooling -->
              <metadata id="Ignored" version="1.0.0" />
              <package id="PackageA" version="1.0.0" />
            </packages>
            """,
        )

        packages = PackagesConfigParser().parse(packages_root, manifest)

        assert [p.id for p in packages] == ["PackageA"]


class TestProjectJsonParser:
    def test_reads_top_level_then_framework_dependencies(self, tmp_path: Path, packages_root: Path) -> None:
        from cbt.core.modules.manifests import ProjectJsonParser

        manifest = write_project_json(
            tmp_path / "project.json",
            {
                "dependencies": {"PackageA": "1.0.0", "PackageB": {"version": "2.0.0", "type": "build"}},
                "frameworks": {"net46": {"dependencies": {"PackageC": "3.0.0"}}},
            },
        )

        packages = ProjectJsonParser().parse(packages_root, manifest)

        assert [(p.id, p.version) for p in packages] == [
            ("PackageA", "1.0.0"),
            ("PackageB", "2.0.0"),
            ("PackageC", "3.0.0"),
        ]

    def test_skips_dependencies_without_version(self, tmp_path: Path, packages_root: Path) -> None:
        from cbt.core.modules.manifests import ProjectJsonParser

        manifest = write_project_json(
            tmp_path / "project.json",
            {"dependencies": {"PackageA": {"type": "build"}, "PackageB": "", "PackageC": "1.0.0"}},
        )

        packages = ProjectJsonParser().parse(packages_root, manifest)

        assert [p.id for p in packages] == ["PackageC"]

    def test_reads_file_with_byte_order_mark(self, tmp_path: Path, packages_root: Path) -> None:
        """Visual Studio saves project.json with a UTF-8 BOM."""
        from cbt.core.modules.manifests import ProjectJsonParser

        manifest = tmp_path / "project.json"
        manifest.write_bytes(b"\xef\xbb\xbf" + b'{"dependencies": {"PackageA": "1.0.0"}}')

        packages = ProjectJsonParser().parse(packages_root, manifest)

        assert [(p.id, p.version) for p in packages] == [("PackageA", "1.0.0")]

    def test_invalid_json_raises(self, tmp_path: Path, packages_root: Path) -> None:
        from cbt.core.modules.exceptions import ManifestParseError
        from cbt.core.modules.manifests import ProjectJsonParser

        manifest = write_text(tmp_path / "project.json", "{ not json")

        with pytest.raises(ManifestParseError):
            ProjectJsonParser().parse(packages_root, manifest)

    def test_non_object_root_raises(self, tmp_path: Path, packages_root: Path) -> None:
        from cbt.core.modules.exceptions import ManifestParseError
        from cbt.core.modules.manifests import ProjectJsonParser

        manifest = write_text(tmp_path / "project.json", '["PackageA"]')

        with pytest.raises(ManifestParseError, match="JSON object"):
            ProjectJsonParser().parse(packages_root, manifest)

    def test_non_object_dependencies_raise(self, tmp_path: Path, packages_root: Path) -> None:
        from cbt.core.modules.exceptions import ManifestParseError
        from cbt.core.modules.manifests import ProjectJsonParser

        manifest = write_project_json(tmp_path / "project.json", {"dependencies": ["PackageA"]})

        with pytest.raises(ManifestParseError, match="dependencies"):
            ProjectJsonParser().parse(packages_root, manifest)


class TestParserProtocol:
    def test_builtin_parsers_satisfy_protocol(self) -> None:
        from cbt.core.modules.manifests import DEFAULT_PARSERS, ManifestParser

        assert [p.format_name for p in DEFAULT_PARSERS] == ["packages.config", "project.json"]
        assert all(isinstance(p, ManifestParser) for p in DEFAULT_PARSERS)
