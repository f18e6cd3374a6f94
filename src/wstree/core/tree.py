"""Expand a DependencyGraph into nested trees for display."""

from __future__ import annotations

from dataclasses import dataclass, field

from wstree.core.graph import DependencyGraph

CYCLE = "(cycle)"
NOT_FOUND = "(not found)"


@dataclass
class DependencyNode:
    """A node in a displayed tree: one package and its direct children."""

    name: str
    version: str
    path: str
    children: list[DependencyNode] = field(default_factory=list)
    # CYCLE or NOT_FOUND for placeholder nodes, empty otherwise.
    note: str = ""

    def to_dict(self) -> dict:
        """Serialize node to a JSON-friendly dict (for API/frontend)."""
        d = {
            "name": self.name,
            "version": self.version,
            "path": self.path,
            "children": [c.to_dict() for c in self.children],
        }
        if self.note:
            d["note"] = self.note
        return d


def build_dependency_tree(
    graph: DependencyGraph,
    root_package: str,
    *,
    max_depth: int | None = None,
    reverse: bool = False,
    _depth: int = 0,
    _ancestors: frozenset[str] = frozenset(),
) -> DependencyNode | None:
    """
    Build a tree rooted at ``root_package`` by following the graph's edges.

    Args:
        graph: A built (or restored) dependency graph.
        root_package: Name of the root package.
        max_depth: Optional maximum depth; None = unlimited.
        reverse: If True, children are dependents instead of dependencies.

    Returns:
        DependencyNode for the root, or None when past ``max_depth``. A
        package already on the current branch becomes a leaf marked CYCLE;
        an edge to an unknown package becomes a leaf marked NOT_FOUND.
    """
    if root_package in _ancestors:
        return DependencyNode(name=root_package, version="", path="", note=CYCLE)
    if max_depth is not None and _depth > max_depth:
        return None

    pkg = graph.packages.get(root_package)
    if pkg is None:
        return DependencyNode(name=root_package, version="", path="", note=NOT_FOUND)

    edges = graph.reverse_edges if reverse else graph.edges
    ancestors = _ancestors | {root_package}
    children: list[DependencyNode] = []
    for name in sorted(edges.get(root_package, ())):
        child = build_dependency_tree(
            graph,
            name,
            max_depth=max_depth,
            reverse=reverse,
            _depth=_depth + 1,
            _ancestors=ancestors,
        )
        if child is not None:
            children.append(child)

    return DependencyNode(
        name=pkg.name,
        version=pkg.version,
        path=pkg.path,
        children=children,
    )
