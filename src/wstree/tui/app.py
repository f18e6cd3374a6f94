"""Textual TUI for browsing a workspace dependency graph."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static, Tree
from textual.widgets.tree import TreeNode
from textual.worker import Worker, WorkerState

from wstree.api import build_graph
from wstree.core.analysis import find_all_dependents, topological_sort, validate_graph
from wstree.core.codec import load_snapshot
from wstree.core.errors import CycleError
from wstree.core.graph import DependencyGraph
from wstree.core.tree import DependencyNode, build_dependency_tree
from wstree.log import Logger

# Limits to avoid huge trees
MAX_TREE_DEPTH = 10
MAX_TREE_NODES = 800
EXPAND_DEPTH_DEFAULT = 2

COLOR_HEADER = "bold magenta"
COLOR_PKG = "white"
COLOR_NOTE = "yellow"


def _count_nodes(node: Any) -> int:
    """Number of nodes in the subtree rooted at node."""
    n = 1
    for c in getattr(node, "children", []):
        n += _count_nodes(c)
    return n


def _node_stats(node: Any) -> tuple[int, int, int]:
    """Return (direct_children, total_descendants, max_depth) for a node."""
    children = getattr(node, "children", []) or []
    direct = len(children)
    total = 0
    max_d = 0
    for c in children:
        _sub_direct, sub_total, sub_depth = _node_stats(c)
        total += 1 + sub_total
        max_d = max(max_d, 1 + sub_depth)
    return direct, total, max_d


def _node_label(node: DependencyNode) -> str:
    if node.note:
        return f"[{COLOR_PKG}]{node.name}[/] [{COLOR_NOTE}]{node.note}[/]"
    return f"[{COLOR_PKG}]{node.name}[/] [dim]v{node.version or '?'}[/]"


def _format_node(node: DependencyNode, graph: DependencyGraph | None, reverse: bool) -> str:
    """Details panel text for a tree node."""
    lines = [f"[bold]{node.name}[/]  [dim]v{node.version or '?'}[/]"]
    if node.note:
        lines += ["", f"[{COLOR_NOTE}]{node.note}[/]"]
        return "\n".join(lines)
    lines += ["", f"[dim]path: {node.path or '(n/a)'}[/]", ""]
    direct, total, depth = _node_stats(node)
    kind = "dependents" if reverse else "dependencies"
    lines.append(f"direct {kind}: {direct}  ·  in tree: {total}  ·  depth: {depth}")
    if graph is not None:
        affected = find_all_dependents(node.name, graph)
        lines.append(f"affected by a change: {len(affected)} package(s)")
    return "\n".join(lines)


def _populate_textual_tree(
    tn: TreeNode,
    node: DependencyNode,
    *,
    depth: int = 0,
    max_depth: int = MAX_TREE_DEPTH,
    max_nodes: int = MAX_TREE_NODES,
    node_count: list[int] | None = None,
) -> None:
    """Mirror a DependencyNode subtree into Textual, stopping at the depth and node caps."""
    if node_count is None:
        node_count = [0]
    for child in node.children:
        if node_count[0] >= max_nodes:
            tn.add_leaf(f"[dim]… truncated ({max_nodes} nodes max)[/]")
            return
        if depth >= max_depth:
            tn.add_leaf(f"[dim]{child.name} …[/]")
            continue
        node_count[0] += 1
        child_tn = tn.add(_node_label(child), expand=False)
        child_tn.data = child
        _populate_textual_tree(
            child_tn,
            child,
            depth=depth + 1,
            max_depth=max_depth,
            max_nodes=max_nodes,
            node_count=node_count,
        )


def _expand_to_depth(tn: TreeNode, depth: int, current: int = 0) -> None:
    """Open the first ``depth`` levels of a Textual tree."""
    if current >= depth:
        return
    tn.expand()
    for child in tn.children:
        _expand_to_depth(child, depth, current + 1)


class WorkspaceApp(App[None]):
    """Terminal UI to explore the packages of a workspace and how they depend on each other."""

    TITLE = "wstree"
    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("b", "back", "Packages"),
        Binding("d", "toggle_direction", "Dependents/Dependencies"),
        Binding("r", "refresh", "Rescan"),
        Binding("e", "expand_all", "Expand all"),
        Binding("c", "collapse_all", "Collapse"),
    ]

    def __init__(
        self,
        root: Path | str = ".",
        excluded_patterns: list[str] | None = None,
        root_package: str | None = None,
        snapshot: Path | str | None = None,
        max_depth: int | None = None,
        strict: bool = False,
        logger: Logger | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._root = Path(root)
        self._excluded_patterns = list(excluded_patterns or [])
        self._root_package = root_package
        self._snapshot = snapshot
        self._max_depth = max_depth
        self._strict = strict
        self._workspace_logger = logger
        self._graph: DependencyGraph | None = None
        self._reverse = False

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        yield Tree("Packages", id="dep_tree")
        yield Static("Scanning workspace…", id="details")
        yield Footer()

    def on_mount(self) -> None:
        self._start_scan()

    def _start_scan(self) -> None:
        self._set_details(f"[dim]Scanning {self._root.resolve()} …[/]")
        self.run_worker(self._build_graph_worker, thread=True, exclusive=True)

    def _build_graph_worker(self) -> DependencyGraph:
        """Worker that loads the snapshot or scans the workspace in a background thread."""
        if self._snapshot:
            return load_snapshot(self._snapshot, resolve_local=True)
        return build_graph(
            self._root,
            excluded_patterns=self._excluded_patterns,
            max_depth=self._max_depth,
            strict=self._strict,
            logger=self._workspace_logger,
        )

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        """Show the package list (or the requested tree) once the scan finishes."""
        if event.state == WorkerState.SUCCESS:
            self._graph = event.worker.result
            if self._root_package and self._root_package in self._graph:
                self._load_tree(self._root_package)
            else:
                self._show_packages()
        elif event.state == WorkerState.ERROR:
            self._graph = None
            tree = self.query_one("#dep_tree", Tree)
            self._clear_tree(tree)
            tree.root.add_leaf("[dim]Error loading workspace[/]")
            self._set_details(f"[red]Error: {event.worker.error!s}[/]")

    def _clear_tree(self, tree: Tree) -> None:
        while tree.root.children:
            tree.root.children[0].remove()

    def _show_packages(self) -> None:
        """List every package, in build order when the graph has no cycle."""
        tree = self.query_one("#dep_tree", Tree)
        self._clear_tree(tree)
        self._root_package = None
        tree.root.data = None
        graph = self._graph
        if graph is None or not graph.packages:
            tree.root.label = f"[{COLOR_HEADER}]Packages[/]"
            tree.root.add_leaf("[dim]No package.json found[/]")
            self._set_details("No packages found. Run wstree from a workspace root.")
            return
        try:
            names = topological_sort(graph)
            tree.root.label = f"[{COLOR_HEADER}]Build order[/]"
        except CycleError:
            names = sorted(graph.packages)
            tree.root.label = f"[{COLOR_HEADER}]Packages[/] [red](cycle)[/]"
        for i, name in enumerate(names, start=1):
            pkg = graph.packages[name]
            tn = tree.root.add_leaf(f"[dim]{i:>3}.[/] [bold]{name}[/] [dim]v{pkg.version}[/]")
            tn.data = name
        tree.root.expand()

        result = validate_graph(graph)
        status = "[green]valid[/]" if result.valid else "[red]" + "\n".join(result.errors) + "[/]"
        self._set_details(
            f"{len(graph.packages)} package(s)  ·  {status}\n\n"
            "[dim]Select a package to see its tree.[/]"
        )

    def _load_tree(self, package_name: str) -> None:
        graph = self._graph
        if graph is None:
            return
        root_node = build_dependency_tree(graph, package_name, reverse=self._reverse)
        if root_node is None:
            return
        self._root_package = package_name
        tree = self.query_one("#dep_tree", Tree)
        self._clear_tree(tree)
        kind = "dependents" if self._reverse else "dependencies"
        tree.root.label = f"{_node_label(root_node)} [dim]({kind})[/]"
        tree.root.data = root_node
        _populate_textual_tree(tree.root, root_node)
        _expand_to_depth(tree.root, EXPAND_DEPTH_DEFAULT)
        self._set_details(_format_node(root_node, graph, self._reverse))

    def _set_details(self, text: str) -> None:
        details = self.query_one("#details", Static)
        details.update(text)

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        node = event.node.data
        if isinstance(node, DependencyNode):
            self._set_details(_format_node(node, self._graph, self._reverse))
        elif isinstance(node, str):
            self._load_tree(node)

    def action_back(self) -> None:
        self._show_packages()

    def action_toggle_direction(self) -> None:
        self._reverse = not self._reverse
        if self._root_package:
            self._load_tree(self._root_package)

    def action_refresh(self) -> None:
        self._start_scan()

    def action_expand_all(self) -> None:
        tree = self.query_one("#dep_tree", Tree)
        tree.root.expand_all()

    def action_collapse_all(self) -> None:
        tree = self.query_one("#dep_tree", Tree)
        tree.root.collapse_all()
        tree.root.expand()
