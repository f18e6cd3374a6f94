"""Tests for package.json parser."""

from __future__ import annotations

from pathlib import Path

import pytest

from wstree.core.errors import DescriptorError
from wstree.core.parser import (
    DEFAULT_VERSION,
    PackageDescriptor,
    parse_package_json,
)


class TestPackageDescriptor:
    """Tests for PackageDescriptor dataclass."""

    def test_location_is_manifest_directory(self) -> None:
        desc = PackageDescriptor(name="a", path=Path("/ws/a/package.json"))
        assert desc.location == Path("/ws/a")

    def test_all_dependencies_merges_categories(self) -> None:
        desc = PackageDescriptor(
            name="a",
            path=Path("/ws/a/package.json"),
            dependencies={"x": "1", "y": "1"},
            dev_dependencies={"y": "2", "z": "1"},
            peer_dependencies={"p": "1"},
            optional_dependencies={"o": "1"},
        )
        assert desc.all_dependencies() == ["x", "y", "z", "p", "o"]

    def test_defaults(self) -> None:
        desc = PackageDescriptor(name="a", path=Path("/p"))
        assert desc.version == DEFAULT_VERSION
        assert desc.description == ""
        assert desc.all_dependencies() == []


class TestParsePackageJson:
    """Tests for parse_package_json function."""

    def test_valid_package(self, write_package) -> None:
        path = write_package(
            "pkg",
            "my-pkg",
            version="1.2.3",
            description="A test package",
            dependencies={"left-pad": "^1.0.0"},
            devDependencies={"vitest": "^1.0.0"},
            peerDependencies={"react": "*"},
            optionalDependencies={"fsevents": "*"},
        )
        desc = parse_package_json(path)
        assert desc.name == "my-pkg"
        assert desc.version == "1.2.3"
        assert desc.description == "A test package"
        assert desc.path == path.resolve()
        assert desc.dependencies == {"left-pad": "^1.0.0"}
        assert desc.dev_dependencies == {"vitest": "^1.0.0"}
        assert desc.peer_dependencies == {"react": "*"}
        assert desc.optional_dependencies == {"fsevents": "*"}

    def test_missing_version_defaults(self, write_package) -> None:
        desc = parse_package_json(write_package("pkg", "no-version"))
        assert desc.version == "0.0.0"

    def test_empty_version_defaults(self, write_package) -> None:
        desc = parse_package_json(write_package("pkg", "empty-version", version=""))
        assert desc.version == "0.0.0"

    def test_scoped_name(self, write_package) -> None:
        desc = parse_package_json(write_package("pkg", "@scope/pkg"))
        assert desc.name == "@scope/pkg"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DescriptorError) as exc_info:
            parse_package_json(tmp_path / "nonexistent" / "package.json")
        assert "cannot read" in exc_info.value.reason

    def test_directory_instead_of_file(self, tmp_path: Path) -> None:
        with pytest.raises(DescriptorError):
            parse_package_json(tmp_path)

    def test_invalid_json(self, tmp_path: Path) -> None:
        pkg = tmp_path / "package.json"
        pkg.write_text("{ not json")
        with pytest.raises(DescriptorError) as exc_info:
            parse_package_json(pkg)
        assert "invalid JSON" in str(exc_info.value)
        assert exc_info.value.path == pkg

    def test_not_an_object(self, tmp_path: Path) -> None:
        pkg = tmp_path / "package.json"
        pkg.write_text("[1, 2, 3]")
        with pytest.raises(DescriptorError, match="object"):
            parse_package_json(pkg)

    def test_missing_name(self, write_package) -> None:
        with pytest.raises(DescriptorError, match="no name"):
            parse_package_json(write_package("pkg", None, version="1.0.0"))

    def test_blank_name(self, write_package) -> None:
        with pytest.raises(DescriptorError, match="no name"):
            parse_package_json(write_package("pkg", "   "))

    def test_name_kept_verbatim(self, write_package) -> None:
        desc = parse_package_json(write_package("pkg", " padded "))
        assert desc.name == " padded "

    def test_non_string_version(self, write_package) -> None:
        with pytest.raises(DescriptorError, match="version"):
            parse_package_json(write_package("pkg", "a", version=3))

    def test_dependencies_must_be_object(self, write_package) -> None:
        with pytest.raises(DescriptorError, match="devDependencies"):
            parse_package_json(write_package("pkg", "a", devDependencies=["x"]))

    def test_non_string_description_ignored(self, write_package) -> None:
        desc = parse_package_json(write_package("pkg", "a", description={"x": 1}))
        assert desc.description == ""
