"""Tests for the `cbt module` commands."""
from __future__ import annotations

import argparse
import json
from pathlib import Path

import pytest

from helpers.modules import make_module, read_imports, write_packages_config, write_text


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A repository with two restored modules, one declaring an extension import."""
    packages = tmp_path / "packages"
    make_module(packages, "PackageA", "1.0.0", extensions=["Custom.targets"])
    make_module(packages, "PackageB", "2.0.0")
    write_packages_config(
        tmp_path / "src" / "packages.config",
        [("PackageA", "1.0.0"), ("PackageB", "2.0.0"), ("PackageC", "3.0.0")],
    )
    write_text(
        tmp_path / ".cbt" / "config" / "modules.yaml",
        """\
        modules:
          packages_path: packages
          package_configs:
            - src/packages.config
        """,
    )
    (tmp_path / "obj" / "ext").mkdir(parents=True)
    return tmp_path


def _parse(module, argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    module.register_args(parser)
    return parser.parse_args(argv)


class TestModuleGenerate:
    def test_generates_fragments(self, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from cbt.cli.module import generate as generate_cmd

        args = _parse(
            generate_cmd,
            [
                "--repo-root", str(repo),
                "--imports-file", "obj/Modules.props",
                "--extensions-path", "obj/ext",
                "--json",
            ],
        )

        assert generate_cmd.main(args) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["status"] == "success"
        assert payload["module_count"] == 3
        assert payload["extensions"] == {"Custom.targets": "PackageA"}
        imports = read_imports(repo / "obj" / "Modules.props")
        assert len(imports) == 3
        assert read_imports(repo / "obj" / "ext" / "Custom.targets") == imports

    def test_text_summary(self, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from cbt.cli.module import generate as generate_cmd

        args = _parse(
            generate_cmd,
            ["--repo-root", str(repo), "--imports-file", "obj/Modules.props", "--extensions-path", "obj/ext"],
        )

        assert generate_cmd.main(args) == 0
        out = capsys.readouterr().out
        assert "3 module(s)" in out
        assert "1 extension import(s)" in out

    def test_flags_override_settings(self, repo: Path) -> None:
        from cbt.cli.module import generate as generate_cmd

        args = _parse(
            generate_cmd,
            [
                "--repo-root", str(repo),
                "--imports-file", "obj/Modules.props",
                "--extensions-path", "obj/ext",
                "--property-value-prefix", "$(Pkgs)/",
                "--import-relative-path", "build/a.targets",
                "--before-import", "first.props",
                "--after-import", "last.targets",
            ],
        )

        assert generate_cmd.main(args) == 0

        assert [p for p, _ in read_imports(repo / "obj" / "Modules.props")] == [
            "first.props",
            "$(Pkgs)/PackageA.1.0.0/build/a.targets",
            "$(Pkgs)/PackageB.2.0.0/build/a.targets",
            "$(Pkgs)/PackageC.3.0.0/build/a.targets",
            "last.targets",
        ]

    def test_missing_imports_file(self, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from cbt.cli.module import generate as generate_cmd

        args = _parse(generate_cmd, ["--repo-root", str(repo), "--json"])

        assert generate_cmd.main(args) == 1

        error = json.loads(capsys.readouterr().err)
        assert error["error"] == "module_generate_error"
        assert error["code"] == "InvalidArgumentError"

    def test_missing_packages_path(self, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from cbt.cli.module import generate as generate_cmd

        args = _parse(
            generate_cmd,
            ["--repo-root", str(repo), "--packages-path", "nope", "--imports-file", "obj/Modules.props"],
        )

        assert generate_cmd.main(args) == 1
        assert "Could not find part of the path" in capsys.readouterr().err
        assert not (repo / "obj" / "Modules.props").exists()


class TestModuleList:
    def test_json_listing(self, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from cbt.cli.module import list as list_cmd

        args = _parse(list_cmd, ["--repo-root", str(repo), "--json"])

        assert list_cmd.main(args) == 0

        payload = json.loads(capsys.readouterr().out)
        assert [(m["key"], m["exists"]) for m in payload["modules"]] == [
            ("PackageA", True),
            ("PackageB", True),
            ("PackageC", False),
        ]

    def test_text_listing_marks_unrestored(self, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from cbt.cli.module import list as list_cmd

        args = _parse(list_cmd, ["--repo-root", str(repo)])

        assert list_cmd.main(args) == 0

        out = capsys.readouterr().out
        assert "Module packages (3):" in out
        assert "PackageC 3.0.0 (not restored)" in out

    def test_empty_listing(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from cbt.cli.module import list as list_cmd

        (tmp_path / "packages").mkdir()
        args = _parse(list_cmd, ["--repo-root", str(tmp_path), "--packages-path", "packages"])

        assert list_cmd.main(args) == 0
        assert "No module packages declared." in capsys.readouterr().out


class TestModuleExtensions:
    def test_lists_owners(self, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from cbt.cli.module import extensions as extensions_cmd

        args = _parse(extensions_cmd, ["--repo-root", str(repo)])

        assert extensions_cmd.main(args) == 0
        assert "Custom.targets: PackageA" in capsys.readouterr().out

    def test_json(self, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from cbt.cli.module import extensions as extensions_cmd

        args = _parse(extensions_cmd, ["--repo-root", str(repo), "--json"])

        assert extensions_cmd.main(args) == 0
        assert json.loads(capsys.readouterr().out) == {"extensions": {"Custom.targets": "PackageA"}}
