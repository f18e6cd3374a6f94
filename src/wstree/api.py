"""Public API: use wstree from Python or from other tools."""

from __future__ import annotations

from pathlib import Path

from wstree.core.analysis import (
    find_all_dependents,
    topological_sort,
    validate_graph,
    ValidationResult,
)
from wstree.core.finder import (
    default_excluded_patterns,
    default_scan_depth,
    scan_for_package_json_files,
)
from wstree.core.graph import DependencyGraph, build_dependency_graph
from wstree.core.tree import DependencyNode, build_dependency_tree
from wstree.log import Logger


def list_workspace_packages(
    root: Path | str = ".",
    *,
    excluded_patterns: list[str] | None = None,
    max_depth: int | None = None,
    logger: Logger | None = None,
) -> list[Path]:
    """
    List the package.json files of a workspace.

    excluded_patterns are combined with any from WSTREE_EXCLUDE; max_depth
    defaults to WSTREE_SCAN_DEPTH, or 1 (the root and its direct children).
    """
    patterns = list(excluded_patterns or []) + default_excluded_patterns()
    depth = default_scan_depth() if max_depth is None else max_depth
    return scan_for_package_json_files(root, patterns, max_depth=depth, logger=logger)


def build_graph(
    root: Path | str = ".",
    *,
    excluded_patterns: list[str] | None = None,
    max_depth: int | None = None,
    strict: bool = False,
    logger: Logger | None = None,
) -> DependencyGraph:
    """
    Scan a workspace and build its dependency graph.

    Raises ScanError, DescriptorError, or (with strict=True) DuplicateNameError.
    """
    paths = list_workspace_packages(
        root,
        excluded_patterns=excluded_patterns,
        max_depth=max_depth,
        logger=logger,
    )
    return build_dependency_graph(paths, logger=logger, strict=strict)


def build_order(
    root: Path | str = ".",
    *,
    excluded_patterns: list[str] | None = None,
    logger: Logger | None = None,
) -> list[str]:
    """Package names of a workspace, dependencies first. Raises CycleError on cycles."""
    graph = build_graph(root, excluded_patterns=excluded_patterns, logger=logger)
    return topological_sort(graph, logger=logger)


def affected_packages(
    package_name: str,
    root: Path | str = ".",
    *,
    excluded_patterns: list[str] | None = None,
    logger: Logger | None = None,
) -> list[str]:
    """
    Packages to rebuild after ``package_name`` changes, in build order.

    The changed package itself is not included.
    """
    graph = build_graph(root, excluded_patterns=excluded_patterns, logger=logger)
    dependents = find_all_dependents(package_name, graph)
    return [name for name in topological_sort(graph, logger=logger) if name in dependents]


def check_workspace(
    root: Path | str = ".",
    *,
    excluded_patterns: list[str] | None = None,
    logger: Logger | None = None,
) -> ValidationResult:
    """Build a workspace graph and validate it."""
    return validate_graph(build_graph(root, excluded_patterns=excluded_patterns, logger=logger))


def build_tree(
    root_package: str,
    root: Path | str = ".",
    *,
    reverse: bool = False,
    max_depth: int | None = None,
    excluded_patterns: list[str] | None = None,
) -> DependencyNode | None:
    """
    Dependency tree (or dependents tree with reverse=True) for one package.

    Returns None if the package is not part of the workspace.
    """
    graph = build_graph(root, excluded_patterns=excluded_patterns)
    if root_package not in graph:
        return None
    return build_dependency_tree(graph, root_package, max_depth=max_depth, reverse=reverse)
