"""Build order, impact and consistency queries over a DependencyGraph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping

from wstree.core.errors import CycleError
from wstree.core.graph import DependencyGraph
from wstree.log import Logger, resolve_logger

_IN_PROGRESS = 1
_DONE = 2


@dataclass
class ValidationResult:
    """Outcome of validate_graph: ``valid`` is True iff ``errors`` is empty."""

    valid: bool
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": list(self.errors)}


def _local_targets(graph: DependencyGraph, name: str) -> Iterator[str]:
    # Sorted for a deterministic order; targets that are not packages are skipped.
    return iter(sorted(dep for dep in graph.edges.get(name, ()) if dep in graph.packages))


def topological_sort(graph: DependencyGraph, *, logger: Logger | None = None) -> list[str]:
    """
    Order packages so every package comes after all of its local dependencies.

    Depth-first over forward edges, starting from each package in the order
    of ``graph.packages``; a package is appended once all its dependencies
    are. Uses an explicit stack, so deep graphs do not hit the recursion limit.

    Raises CycleError naming the package found on a dependency cycle.
    """
    log = resolve_logger(logger)
    state: dict[str, int] = {}
    result: list[str] = []

    for root in graph.packages:
        if state.get(root) == _DONE:
            continue
        state[root] = _IN_PROGRESS
        stack: list[tuple[str, Iterator[str]]] = [(root, _local_targets(graph, root))]
        while stack:
            name, deps = stack[-1]
            for dep in deps:
                mark = state.get(dep)
                if mark == _DONE:
                    continue
                if mark == _IN_PROGRESS:
                    path = [n for n, _ in stack]
                    raise CycleError(dep, path[path.index(dep) :] + [dep])
                state[dep] = _IN_PROGRESS
                stack.append((dep, _local_targets(graph, dep)))
                break
            else:
                stack.pop()
                state[name] = _DONE
                result.append(name)

    log.verbose(
        f"Topological sort completed. Build order determined for {len(result)} packages."
    )
    return result


def _reachable(start: str, adjacency: Mapping[str, set[str]]) -> set[str]:
    """Every name reachable from start (start itself excluded)."""
    seen = {start}
    stack = [start]
    while stack:
        for nxt in adjacency.get(stack.pop(), ()):
            if nxt not in seen:
                seen.add(nxt)
                stack.append(nxt)
    seen.discard(start)
    return seen


def find_all_dependents(package_name: str, graph: DependencyGraph) -> set[str]:
    """
    Find every package that depends on ``package_name``, directly or transitively.

    These are the packages affected by a change to it. Unknown names and
    packages without dependents give an empty set.
    """
    return _reachable(package_name, graph.reverse_edges)


def find_all_dependencies(package_name: str, graph: DependencyGraph) -> set[str]:
    """Every local package ``package_name`` needs, directly or transitively."""
    return _reachable(package_name, graph.edges)


def validate_graph(graph: DependencyGraph) -> ValidationResult:
    """
    Check that every edge points at a known package and that there are no cycles.

    Problems are collected as messages; this never raises.
    """
    errors: list[str] = []

    for pkg, deps in graph.edges.items():
        for dep in sorted(deps):
            if dep not in graph.packages:
                errors.append(f"Package {pkg} depends on {dep} which doesn't exist")

    try:
        topological_sort(graph)
    except CycleError as e:
        errors.append(str(e))

    return ValidationResult(valid=not errors, errors=errors)
