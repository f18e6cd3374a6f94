"""FastAPI app: serve build order, dependents and trees of a workspace as JSON."""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, HTTPException, Query

from wstree.api import build_graph
from wstree.core.analysis import find_all_dependents, topological_sort, validate_graph
from wstree.core.codec import serialize_graph
from wstree.core.errors import CycleError, GraphError
from wstree.core.graph import DependencyGraph
from wstree.core.tree import build_dependency_tree


def create_app(root: Path | str = ".", excluded_patterns: list[str] | None = None) -> FastAPI:
    """Build a FastAPI app that answers questions about the workspace at ``root``."""
    app = FastAPI(
        title="wstree API",
        description="Workspace package dependency graph backend",
        version="0.1.0",
    )
    patterns = list(excluded_patterns or [])

    def _graph() -> DependencyGraph:
        # Rescanned per request so edits to package.json files show up.
        try:
            return build_graph(root, excluded_patterns=patterns)
        except GraphError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e

    def _require(graph: DependencyGraph, package_name: str) -> None:
        if package_name not in graph:
            raise HTTPException(status_code=404, detail=f"Package not found: {package_name}")

    @app.get("/api/packages")
    def get_packages() -> dict:
        """All workspace packages with their dependencies."""
        graph = _graph()
        return {"packages": [pkg.to_dict() for pkg in graph.packages.values()]}

    @app.get("/api/order")
    def get_order() -> dict:
        """Build order, dependencies first. 422 if the graph has a cycle."""
        graph = _graph()
        try:
            return {"order": topological_sort(graph)}
        except CycleError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e

    @app.get("/api/dependents/{package_name}")
    def get_dependents(package_name: str) -> dict:
        """Packages affected by a change to package_name."""
        graph = _graph()
        _require(graph, package_name)
        return {"package": package_name, "dependents": sorted(find_all_dependents(package_name, graph))}

    @app.get("/api/tree/{package_name}")
    def get_tree(
        package_name: str,
        reverse: bool = False,
        max_depth: int | None = Query(None, ge=0, le=50),
    ) -> dict:
        """Dependency tree (dependents with reverse=true) for a package."""
        graph = _graph()
        _require(graph, package_name)
        tree = build_dependency_tree(graph, package_name, max_depth=max_depth, reverse=reverse)
        return tree.to_dict() if tree is not None else {}

    @app.get("/api/validate")
    def get_validate() -> dict:
        """Missing dependency targets and cycles."""
        return validate_graph(_graph()).to_dict()

    @app.get("/api/snapshot")
    def get_snapshot() -> dict:
        """The graph in the same format `wstree snapshot` writes."""
        return dict(serialize_graph(_graph()))

    return app
