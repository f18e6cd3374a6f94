"""Save and restore a DependencyGraph as a JSON document."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, TypedDict

from wstree.core.errors import SnapshotError
from wstree.core.graph import DependencyGraph, PackageNode, build_reverse_graph
from wstree.core.parser import DEFAULT_VERSION


class SerializedPackage(TypedDict):
    name: str
    version: str
    path: str
    dependencies: list[str]


class SerializedGraph(TypedDict):
    packages: list[SerializedPackage]
    edges: list[tuple[str, list[str]]]


def serialize_graph(graph: DependencyGraph) -> SerializedGraph:
    """
    Flatten a graph into plain lists and dicts.

    Reverse edges, dev dependencies and local dependencies are not stored;
    dependency lists are sorted so the output is stable.
    """
    return {
        "packages": [
            {
                "name": pkg.name,
                "version": pkg.version,
                "path": pkg.path,
                "dependencies": sorted(pkg.dependencies),
            }
            for pkg in graph.packages.values()
        ],
        "edges": [(name, sorted(deps)) for name, deps in graph.edges.items()],
    }


def _string_list(value: Any, what: str) -> list[str]:
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise SnapshotError(f"{what} must be a list of strings")
    return list(value)


def _version(record: dict, name: str) -> str:
    version = record.get("version")
    if version is None:
        return DEFAULT_VERSION
    if not isinstance(version, str):
        raise SnapshotError(f"{name}.version must be a string")
    return version or DEFAULT_VERSION


def deserialize_graph(data: Any, *, resolve_local: bool = False) -> DependencyGraph:
    """
    Rebuild a graph from serialize_graph output.

    Edges are restored as stored and reverse edges are derived from them.
    Restored packages have empty ``dev_dependencies`` and, unless
    ``resolve_local`` is set, empty ``local_dependencies``.

    Raises SnapshotError if the document does not have the expected shape.
    """
    if not isinstance(data, dict):
        raise SnapshotError("snapshot must be an object with 'packages' and 'edges'")
    records = data.get("packages")
    pairs = data.get("edges")
    if not isinstance(records, list) or not isinstance(pairs, list):
        raise SnapshotError("snapshot must contain 'packages' and 'edges' lists")

    packages: dict[str, PackageNode] = {}
    for record in records:
        if not isinstance(record, dict) or not isinstance(record.get("name"), str):
            raise SnapshotError(f"package record without a name: {record!r}")
        name = record["name"]
        packages[name] = PackageNode(
            name=name,
            version=_version(record, name),
            path=str(record.get("path", "")),
            dependencies=set(_string_list(record.get("dependencies", []), f"{name}.dependencies")),
        )

    edges: dict[str, set[str]] = {}
    for pair in pairs:
        if not isinstance(pair, (list, tuple)) or len(pair) != 2 or not isinstance(pair[0], str):
            raise SnapshotError(f"edge entry must be [name, [dependencies]]: {pair!r}")
        edges[pair[0]] = set(_string_list(pair[1], f"edges of {pair[0]}"))

    if resolve_local:
        for node in packages.values():
            node.local_dependencies = {dep for dep in node.dependencies if dep in packages}

    return DependencyGraph(
        packages=packages,
        edges=edges,
        reverse_edges=build_reverse_graph(edges),
    )


def save_snapshot(graph: DependencyGraph, path: Path | str) -> Path:
    """Write the serialized graph to ``path`` as indented JSON."""
    path = Path(path)
    path.write_text(json.dumps(serialize_graph(graph), indent=2) + "\n", encoding="utf-8")
    return path


def load_snapshot(path: Path | str, *, resolve_local: bool = False) -> DependencyGraph:
    """Read a graph written by save_snapshot. Raises SnapshotError on bad input."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SnapshotError(f"cannot read snapshot {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(f"snapshot {path} is not valid JSON: {e.msg}") from e
    return deserialize_graph(data, resolve_local=resolve_local)
