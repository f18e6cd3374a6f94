"""Shared fixtures: in-memory graphs and on-disk workspaces."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

from wstree.core.graph import DependencyGraph, PackageNode, build_reverse_graph


def _make_graph(structure: dict[str, list[str]]) -> DependencyGraph:
    """Graph whose edges are exactly ``structure`` (targets need not exist)."""
    packages: dict[str, PackageNode] = {}
    edges: dict[str, set[str]] = {}
    for name, deps in structure.items():
        packages[name] = PackageNode(
            name=name,
            version="1.0.0",
            path=f"/fake/path/{name}",
            dependencies=set(deps),
            local_dependencies=set(deps),
        )
        edges[name] = set(deps)
    return DependencyGraph(packages=packages, edges=edges, reverse_edges=build_reverse_graph(edges))


@pytest.fixture
def make_graph() -> Callable[[dict[str, list[str]]], DependencyGraph]:
    return _make_graph


@pytest.fixture
def write_package(tmp_path: Path) -> Callable[..., Path]:
    """Write <tmp_path>/<subdir>/package.json and return its path."""

    def _write(subdir: str, name: str | None, **fields: object) -> Path:
        pkg_dir = tmp_path / subdir if subdir else tmp_path
        pkg_dir.mkdir(parents=True, exist_ok=True)
        data: dict[str, object] = {}
        if name is not None:
            data["name"] = name
        data.update(fields)
        pkg_json = pkg_dir / "package.json"
        pkg_json.write_text(json.dumps(data, indent=2))
        return pkg_json

    return _write


@pytest.fixture
def simple_workspace(tmp_path: Path, write_package: Callable[..., Path]) -> Path:
    """Root manifest plus three packages: app -> lib -> utils, app -> utils (dev)."""
    write_package("", "root-workspace", private=True)
    write_package("utils", "utils", version="1.0.0", dependencies={"lodash": "^4.0.0"})
    write_package("lib", "lib", version="2.0.0", dependencies={"utils": "^1.0.0"})
    write_package(
        "app",
        "app",
        version="3.0.0",
        dependencies={"lib": "^2.0.0", "react": "^18.0.0"},
        devDependencies={"utils": "^1.0.0", "vitest": "^1.0.0"},
    )
    return tmp_path


class RecordingLogger:
    """Logger that keeps (level, message) pairs for assertions."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def info(self, message: str, *args: object) -> None:
        self.records.append(("info", message))

    def warn(self, message: str, *args: object) -> None:
        self.records.append(("warn", message))

    def error(self, message: str, *args: object) -> None:
        self.records.append(("error", message))

    def verbose(self, message: str, *args: object) -> None:
        self.records.append(("verbose", message))

    def debug(self, message: str, *args: object) -> None:
        self.records.append(("debug", message))

    def messages(self, level: str) -> list[str]:
        return [msg for lvl, msg in self.records if lvl == level]


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()
