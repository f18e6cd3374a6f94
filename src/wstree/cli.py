"""Command-line interface for wstree: build order, affected packages, validation, trees."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from wstree import __version__
from wstree.core.analysis import (
    find_all_dependents,
    topological_sort,
    validate_graph,
)
from wstree.core.codec import load_snapshot, save_snapshot
from wstree.core.errors import CycleError, GraphError
from wstree.core.finder import (
    default_excluded_patterns,
    default_scan_depth,
    scan_for_package_json_files,
)
from wstree.core.graph import DependencyGraph, build_dependency_graph
from wstree.core.tree import DependencyNode, build_dependency_tree
from wstree.log import VERBOSE, Logger, StdlibLogger


def _configure_logging(verbosity: int) -> Logger:
    """Send wstree diagnostics to stderr; -v shows VERBOSE, -vv DEBUG."""
    level = logging.WARNING
    if verbosity == 1:
        level = VERBOSE
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(format="%(levelname)s: %(message)s", stream=sys.stderr)
    logger = logging.getLogger("wstree")
    logger.setLevel(level)
    return StdlibLogger(logger)


def _excluded_patterns(args: argparse.Namespace) -> list[str]:
    return list(getattr(args, "exclude", None) or []) + default_excluded_patterns()


def _load_graph(args: argparse.Namespace, log: Logger) -> DependencyGraph:
    """Restore the graph from --snapshot, or scan the workspace root."""
    if getattr(args, "snapshot", None):
        return load_snapshot(args.snapshot, resolve_local=True)
    depth = args.scan_depth if args.scan_depth is not None else default_scan_depth()
    paths = scan_for_package_json_files(
        Path(args.root),
        _excluded_patterns(args),
        max_depth=depth,
        logger=log,
    )
    return build_dependency_graph(paths, logger=log, strict=getattr(args, "strict", False))


def _print_tree_text(
    node: DependencyNode,
    prefix: str = "",
    is_last: bool = True,
    is_root: bool = True,
) -> None:
    """Print a dependency tree as indented text."""
    marker = "" if is_root else ("└── " if is_last else "├── ")
    version = f" ({node.version})" if node.version else ""
    note = f" [{node.note}]" if node.note else ""
    print(f"{prefix}{marker}{node.name}{version}{note}")

    child_prefix = "" if is_root else prefix + ("    " if is_last else "│   ")
    children = node.children
    for i, child in enumerate(children):
        _print_tree_text(child, child_prefix, i == len(children) - 1, is_root=False)


def cmd_list(args: argparse.Namespace, log: Logger) -> int:
    """List workspace packages."""
    graph = _load_graph(args, log)
    if args.json:
        print(json.dumps([pkg.to_dict() for pkg in graph.packages.values()], indent=2))
        return 0
    if not graph.packages:
        print("No packages found.")
        return 0
    print(f"Found {len(graph.packages)} package(s):\n")
    for name in sorted(graph.packages):
        pkg = graph.packages[name]
        local = sorted(graph.dependencies_of(name))
        print(f"  {name} ({pkg.version})")
        if args.verbose:
            print(f"    path: {pkg.path}")
        if local:
            print(f"    depends on: {', '.join(local)}")
    return 0


def cmd_order(args: argparse.Namespace, log: Logger) -> int:
    """Print the build order (dependencies first)."""
    graph = _load_graph(args, log)
    order = topological_sort(graph, logger=log)
    if args.json:
        print(json.dumps(order, indent=2))
    else:
        for i, name in enumerate(order, start=1):
            print(f"{i:>3}. {name}")
    return 0


def cmd_dependents(args: argparse.Namespace, log: Logger) -> int:
    """Print every package affected by a change to the given package."""
    graph = _load_graph(args, log)
    if args.package not in graph:
        log.warn(f"Package not in workspace: {args.package}")
    dependents = find_all_dependents(args.package, graph)
    try:
        ordered = [n for n in topological_sort(graph, logger=log) if n in dependents]
    except CycleError as e:
        log.warn(f"{e}; listing dependents alphabetically")
        ordered = sorted(dependents)
    if args.json:
        print(json.dumps(ordered, indent=2))
    elif not ordered:
        print(f"No packages depend on {args.package}.")
    else:
        print(f"{len(ordered)} package(s) depend on {args.package}:\n")
        for name in ordered:
            print(f"  {name}")
    return 0


def cmd_validate(args: argparse.Namespace, log: Logger) -> int:
    """Check the graph for missing edge targets and cycles."""
    graph = _load_graph(args, log)
    result = validate_graph(graph)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.valid:
        print(f"OK: {len(graph.packages)} package(s), no problems found.")
    else:
        print(f"Found {len(result.errors)} problem(s):")
        for error in result.errors:
            print(f"  - {error}")
    return 0 if result.valid else 1


def cmd_tree(args: argparse.Namespace, log: Logger) -> int:
    """Show the dependency (or dependents) tree of a package."""
    graph = _load_graph(args, log)
    if args.package not in graph:
        print(f"Package not found: {args.package}", file=sys.stderr)
        return 1
    tree = build_dependency_tree(graph, args.package, max_depth=args.depth, reverse=args.reverse)
    if tree is None:
        return 1
    if args.json:
        print(json.dumps(tree.to_dict(), indent=2))
    else:
        _print_tree_text(tree)
    return 0


def _generate_dot(graph: DependencyGraph, title: str | None = None) -> str:
    """Generate DOT (Graphviz) format; an edge points from a package to its dependency."""
    lines = [
        "digraph dependencies {",
        "    rankdir=LR;",
        '    node [shape=box, style=rounded, fontname="sans-serif"];',
    ]
    if title:
        lines.insert(1, f'    label="{title}";')
        lines.insert(2, "    labelloc=t;")

    for name in sorted(graph.packages):
        if not graph.edges.get(name) and not graph.reverse_edges.get(name):
            lines.append(f'    "{name}";')
    for name in sorted(graph.edges):
        for dep in sorted(graph.edges[name]):
            lines.append(f'    "{name}" -> "{dep}";')

    lines.append("}")
    return "\n".join(lines)


def _mermaid_ids(graph: DependencyGraph) -> dict[str, str]:
    """Map every package and edge target to a distinct Mermaid node ID (n0, n1, ...)."""
    names = set(graph.packages)
    for deps in graph.edges.values():
        names.update(deps)
    return {name: f"n{i}" for i, name in enumerate(sorted(names))}


def _generate_mermaid(graph: DependencyGraph, title: str | None = None) -> str:
    """Generate Mermaid format from the graph's forward edges."""
    lines = ["graph LR"]
    if title:
        lines[0] = f"---\ntitle: {title}\n---\ngraph LR"

    ids = _mermaid_ids(graph)
    for name, node_id in ids.items():
        lines.append(f'    {node_id}["{name}"]')
    for name in sorted(graph.edges):
        for dep in sorted(graph.edges[name]):
            lines.append(f"    {ids[name]} --> {ids[dep]}")

    return "\n".join(lines)


def cmd_graph(args: argparse.Namespace, log: Logger) -> int:
    """Write the dependency graph in DOT or Mermaid format."""
    graph = _load_graph(args, log)
    if args.no_title:
        title = None
    elif args.snapshot:
        title = f"Snapshot: {Path(args.snapshot).name}"
    else:
        title = f"Workspace: {Path(args.root).resolve().name}"
    if args.format == "mermaid":
        output = _generate_mermaid(graph, title=title)
    else:
        output = _generate_dot(graph, title=title)

    if args.output:
        Path(args.output).write_text(output + "\n")
        print(f"Graph written to: {args.output}", file=sys.stderr)
    else:
        print(output)
    return 0


def cmd_snapshot(args: argparse.Namespace, log: Logger) -> int:
    """Scan the workspace and save its graph as JSON."""
    graph = _load_graph(args, log)
    out = save_snapshot(graph, args.output)
    print(f"Saved {len(graph.packages)} package(s) to {out}", file=sys.stderr)
    return 0


def cmd_tui(args: argparse.Namespace, log: Logger) -> int:
    """Launch the interactive TUI."""
    from wstree.tui.app import WorkspaceApp

    app = WorkspaceApp(
        root=Path(args.root),
        excluded_patterns=list(args.exclude or []),
        root_package=args.package,
        snapshot=args.snapshot,
        max_depth=args.scan_depth,
        strict=args.strict,
        logger=log,
    )
    app.run()
    return 0


def _add_root_argument(parser: argparse.ArgumentParser) -> None:
    # Added last so it follows any command-specific positional.
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Workspace root directory (default: current directory)",
    )


def _workspace_options() -> argparse.ArgumentParser:
    """Options shared by every command that needs a graph."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-x",
        "--exclude",
        action="append",
        metavar="PATTERN",
        help="Glob of package.json paths to skip (can be repeated)",
    )
    common.add_argument(
        "--scan-depth",
        type=int,
        default=None,
        metavar="N",
        help="How many directory levels below root to search (default: 1)",
    )
    common.add_argument(
        "--snapshot",
        metavar="FILE",
        help="Use a graph saved with 'wstree snapshot' instead of scanning",
    )
    common.add_argument(
        "--strict",
        action="store_true",
        help="Fail when two package.json files declare the same name",
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Show more detail (-vv for debug logging)",
    )
    return common


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the wstree CLI."""
    parser = argparse.ArgumentParser(
        prog="wstree",
        description="Explore package dependencies of a multi-package workspace.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    common = _workspace_options()

    # wstree list
    list_parser = subparsers.add_parser(
        "list",
        parents=[common],
        help="List workspace packages",
        description="List the packages found in the workspace and their local dependencies.",
    )
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")
    _add_root_argument(list_parser)
    list_parser.set_defaults(func=cmd_list)

    # wstree order
    order_parser = subparsers.add_parser(
        "order",
        parents=[common],
        help="Print the build order",
        description="Print packages so that every package follows its dependencies.",
    )
    order_parser.add_argument("--json", action="store_true", help="Output as JSON")
    _add_root_argument(order_parser)
    order_parser.set_defaults(func=cmd_order)

    # wstree dependents
    dependents_parser = subparsers.add_parser(
        "dependents",
        parents=[common],
        help="List packages affected by a change",
        description="List every package that depends, directly or not, on PACKAGE.",
    )
    dependents_parser.add_argument("package", help="Changed package name")
    dependents_parser.add_argument("--json", action="store_true", help="Output as JSON")
    _add_root_argument(dependents_parser)
    dependents_parser.set_defaults(func=cmd_dependents)

    # wstree validate
    validate_parser = subparsers.add_parser(
        "validate",
        parents=[common],
        help="Check for missing dependencies and cycles",
        description="Exit with status 1 if the workspace graph is inconsistent.",
    )
    validate_parser.add_argument("--json", action="store_true", help="Output as JSON")
    _add_root_argument(validate_parser)
    validate_parser.set_defaults(func=cmd_validate)

    # wstree tree
    tree_parser = subparsers.add_parser(
        "tree",
        parents=[common],
        help="Show the dependency tree of a package",
        description="Display the local dependencies of a package as a tree.",
    )
    tree_parser.add_argument("package", help="Package name to show the tree for")
    tree_parser.add_argument(
        "-d",
        "--depth",
        type=int,
        default=None,
        help="Maximum tree depth (default: unlimited)",
    )
    tree_parser.add_argument(
        "-r",
        "--reverse",
        action="store_true",
        help="Show dependents instead of dependencies",
    )
    tree_parser.add_argument("--json", action="store_true", help="Output as JSON")
    _add_root_argument(tree_parser)
    tree_parser.set_defaults(func=cmd_tree)

    # wstree graph
    graph_parser = subparsers.add_parser(
        "graph",
        parents=[common],
        help="Generate a dependency graph (DOT/Mermaid format)",
        description="Write the workspace dependency graph for Graphviz or Mermaid.",
    )
    graph_parser.add_argument(
        "-f",
        "--format",
        choices=["dot", "mermaid"],
        default="dot",
        help="Output format: dot (Graphviz) or mermaid (default: dot)",
    )
    graph_parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Output file (default: stdout)",
    )
    graph_parser.add_argument(
        "--no-title",
        action="store_true",
        help="Don't include a title in the graph",
    )
    _add_root_argument(graph_parser)
    graph_parser.set_defaults(func=cmd_graph)

    # wstree snapshot
    snapshot_parser = subparsers.add_parser(
        "snapshot",
        parents=[common],
        help="Save the workspace graph as JSON",
        description="Scan the workspace and write its graph to FILE for later --snapshot use.",
    )
    snapshot_parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        default="wstree-graph.json",
        help="Snapshot file (default: wstree-graph.json)",
    )
    _add_root_argument(snapshot_parser)
    snapshot_parser.set_defaults(func=cmd_snapshot)

    # wstree tui (default if no command)
    tui_parser = subparsers.add_parser(
        "tui",
        parents=[common],
        help="Launch the interactive terminal UI",
        description="Browse the workspace packages and their trees interactively.",
    )
    tui_parser.add_argument(
        "--package",
        help="Optional: start with this package's tree",
    )
    _add_root_argument(tui_parser)
    tui_parser.set_defaults(func=cmd_tui)

    args = parser.parse_args(argv)

    # Default to TUI on the current directory if no command specified
    if args.command is None:
        args = parser.parse_args(["tui"])

    log = _configure_logging(args.verbose)
    try:
        return args.func(args, log)
    except GraphError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
