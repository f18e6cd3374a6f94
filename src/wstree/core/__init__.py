"""Core library: manifest discovery, package.json parsing, graph building and analysis."""

from wstree.core.analysis import (
    find_all_dependencies,
    find_all_dependents,
    topological_sort,
    validate_graph,
    ValidationResult,
)
from wstree.core.codec import (
    deserialize_graph,
    load_snapshot,
    save_snapshot,
    serialize_graph,
    SerializedGraph,
)
from wstree.core.errors import (
    CycleError,
    DescriptorError,
    DuplicateNameError,
    GraphError,
    ScanError,
    SnapshotError,
)
from wstree.core.finder import scan_for_package_json_files, should_exclude
from wstree.core.graph import (
    build_dependency_graph,
    build_reverse_graph,
    DependencyGraph,
    PackageNode,
)
from wstree.core.parser import parse_package_json, PackageDescriptor
from wstree.core.tree import DependencyNode, build_dependency_tree

__all__ = [
    "find_all_dependencies",
    "find_all_dependents",
    "topological_sort",
    "validate_graph",
    "ValidationResult",
    "deserialize_graph",
    "load_snapshot",
    "save_snapshot",
    "serialize_graph",
    "SerializedGraph",
    "CycleError",
    "DescriptorError",
    "DuplicateNameError",
    "GraphError",
    "ScanError",
    "SnapshotError",
    "scan_for_package_json_files",
    "should_exclude",
    "build_dependency_graph",
    "build_reverse_graph",
    "DependencyGraph",
    "PackageNode",
    "parse_package_json",
    "PackageDescriptor",
    "DependencyNode",
    "build_dependency_tree",
]
