"""Tests for wstree.core.finder module."""

from __future__ import annotations

import os
from pathlib import Path
from unittest import mock

import pytest

from wstree.core.errors import ScanError
from wstree.core.finder import (
    DEFAULT_SCAN_DEPTH,
    _glob_to_regex,
    _matches_pattern,
    default_excluded_patterns,
    default_scan_depth,
    scan_for_package_json_files,
    should_exclude,
)


class TestGlobToRegex:
    """Tests for the glob translation helpers."""

    def test_double_star_crosses_directories(self) -> None:
        assert _glob_to_regex("**/node_modules/**").match("/a/b/node_modules/x/package.json")

    def test_single_star_stays_in_segment(self) -> None:
        regex = _glob_to_regex("packages/*")
        assert regex.match("packages/foo")
        assert not regex.match("packages/foo/bar")

    def test_question_mark(self) -> None:
        regex = _glob_to_regex("pkg-?")
        assert regex.match("pkg-a")
        assert not regex.match("pkg-ab")

    def test_dots_are_literal(self) -> None:
        regex = _glob_to_regex("*.json")
        assert regex.match("package.json")
        assert not regex.match("packagexjson")

    def test_matches_basename(self) -> None:
        assert _matches_pattern("/work/ws/dist", "dist")
        assert not _matches_pattern("/work/ws/distribution", "dist")


class TestShouldExclude:
    """Tests for should_exclude."""

    def test_empty_patterns(self) -> None:
        assert should_exclude("/any/path/package.json", []) is False

    def test_non_matching_paths(self) -> None:
        assert should_exclude("/path/to/src/package.json", ["**/node_modules/**"]) is False
        assert should_exclude("/path/to/packages/my-pkg/package.json", ["**/dist/**"]) is False

    def test_absolute_path_match(self) -> None:
        assert should_exclude("/ws/node_modules/x/package.json", ["**/node_modules/**"]) is True

    def test_relative_path_match(self, tmp_path: Path) -> None:
        path = tmp_path / "packages" / "legacy" / "package.json"
        assert should_exclude(path, ["packages/legacy/package.json"], cwd=tmp_path) is True

    def test_directory_match(self, tmp_path: Path) -> None:
        path = tmp_path / "packages" / "legacy" / "package.json"
        assert should_exclude(path, ["packages/legacy"], cwd=tmp_path) is True

    def test_directory_name_match(self) -> None:
        assert should_exclude("/ws/examples/package.json", ["examples"]) is True
        assert should_exclude("/ws/examples-app/package.json", ["examples"]) is False

    def test_wildcard_directory_name(self) -> None:
        assert should_exclude("/ws/test-fixtures/package.json", ["test-*"]) is True

    def test_blank_patterns_ignored(self) -> None:
        assert should_exclude("/ws/a/package.json", ["", ""]) is False


class TestEnvironmentConfig:
    """Tests for WSTREE_EXCLUDE / WSTREE_SCAN_DEPTH."""

    def test_exclude_env_split(self) -> None:
        value = os.pathsep.join(["**/node_modules/**", " dist ", ""])
        with mock.patch.dict(os.environ, {"WSTREE_EXCLUDE": value}):
            assert default_excluded_patterns() == ["**/node_modules/**", "dist"]

    def test_exclude_env_unset(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            assert default_excluded_patterns() == []

    def test_scan_depth_env(self) -> None:
        with mock.patch.dict(os.environ, {"WSTREE_SCAN_DEPTH": "3"}):
            assert default_scan_depth() == 3

    def test_scan_depth_invalid(self) -> None:
        with mock.patch.dict(os.environ, {"WSTREE_SCAN_DEPTH": "deep"}):
            assert default_scan_depth() == DEFAULT_SCAN_DEPTH
        with mock.patch.dict(os.environ, {"WSTREE_SCAN_DEPTH": "-2"}):
            assert default_scan_depth() == DEFAULT_SCAN_DEPTH


class TestScanForPackageJsonFiles:
    """Tests for scan_for_package_json_files."""

    def test_finds_root_and_children(self, simple_workspace: Path) -> None:
        files = scan_for_package_json_files(simple_workspace)
        assert files[0] == simple_workspace / "package.json"
        assert [f.parent.name for f in files[1:]] == ["app", "lib", "utils"]

    def test_root_without_manifest(self, tmp_path: Path, write_package) -> None:
        write_package("b", "b")
        write_package("a", "a")
        files = scan_for_package_json_files(tmp_path)
        assert files == [tmp_path / "a" / "package.json", tmp_path / "b" / "package.json"]

    def test_default_depth_is_one_level(self, tmp_path: Path, write_package) -> None:
        write_package("packages/core", "core")
        assert scan_for_package_json_files(tmp_path) == []

    def test_deeper_scan(self, tmp_path: Path, write_package) -> None:
        write_package("packages/core", "core")
        write_package("packages/ui", "ui")
        files = scan_for_package_json_files(tmp_path, max_depth=2)
        assert [f.parent.name for f in files] == ["core", "ui"]

    def test_depth_zero_only_root(self, simple_workspace: Path) -> None:
        files = scan_for_package_json_files(simple_workspace, max_depth=0)
        assert files == [simple_workspace / "package.json"]

    def test_exclude_patterns(self, tmp_path: Path, write_package) -> None:
        write_package("node_modules", "dep-in-modules")
        write_package("real", "real")
        files = scan_for_package_json_files(tmp_path, ["**/node_modules/**"])
        assert all("node_modules" not in str(f) for f in files)
        assert [f.parent.name for f in files] == ["real"]

    def test_exclude_logged(self, tmp_path: Path, write_package, recording_logger) -> None:
        write_package("skip-me", "skip")
        logger = recording_logger
        scan_for_package_json_files(tmp_path, ["skip-me"], logger=logger)
        assert any(level == "verbose" and "Excluding" in msg for level, msg in logger.records)

    def test_ignores_files(self, tmp_path: Path) -> None:
        (tmp_path / "notes.txt").write_text("hello")
        assert scan_for_package_json_files(tmp_path) == []

    def test_nonexistent_directory(self, tmp_path: Path, recording_logger) -> None:
        logger = recording_logger
        with pytest.raises(ScanError) as exc_info:
            scan_for_package_json_files(tmp_path / "nonexistent", logger=logger)
        assert exc_info.value.directory == tmp_path / "nonexistent"
        assert any(
            level == "error" and "DEPENDENCY_GRAPH_SCAN_FAILED" in msg
            for level, msg in logger.records
        )

    def test_file_instead_of_directory(self, tmp_path: Path) -> None:
        f = tmp_path / "file.txt"
        f.write_text("x")
        with pytest.raises(ScanError):
            scan_for_package_json_files(f)
