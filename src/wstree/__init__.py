"""wstree: dependency graphs for multi-package workspaces (library, TUI, CLI)."""

from importlib.metadata import version, PackageNotFoundError

from wstree.api import (
    affected_packages,
    build_graph,
    build_order,
    build_tree,
    check_workspace,
    list_workspace_packages,
)
from wstree.core.errors import CycleError, DescriptorError, GraphError, ScanError

__all__ = [
    "affected_packages",
    "build_graph",
    "build_order",
    "build_tree",
    "check_workspace",
    "list_workspace_packages",
    "CycleError",
    "DescriptorError",
    "GraphError",
    "ScanError",
    "__version__",
]

try:
    __version__ = version("wstree")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed as package
