"""Build the workspace dependency graph from package.json manifests."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from wstree.core.errors import DescriptorError, DuplicateNameError
from wstree.core.parser import PackageDescriptor, parse_package_json
from wstree.log import Logger, resolve_logger


@dataclass
class PackageNode:
    """One workspace package: a node of the dependency graph."""

    name: str
    version: str
    path: str  # directory containing package.json
    dependencies: set[str] = field(default_factory=set)
    dev_dependencies: set[str] = field(default_factory=set)
    # Filled in once every package of the workspace is known.
    local_dependencies: set[str] = field(default_factory=set)

    @classmethod
    def from_descriptor(cls, descriptor: PackageDescriptor) -> PackageNode:
        return cls(
            name=descriptor.name,
            version=descriptor.version,
            path=str(descriptor.location),
            dependencies=set(descriptor.all_dependencies()),
            dev_dependencies=set(descriptor.dev_dependencies),
        )

    def to_dict(self) -> dict:
        """Serialize node to a JSON-friendly dict (for CLI/API output)."""
        return {
            "name": self.name,
            "version": self.version,
            "path": self.path,
            "dependencies": sorted(self.dependencies),
            "dev_dependencies": sorted(self.dev_dependencies),
            "local_dependencies": sorted(self.local_dependencies),
        }


@dataclass
class DependencyGraph:
    """Packages keyed by name plus forward (dependencies) and reverse (dependents) edges."""

    packages: dict[str, PackageNode] = field(default_factory=dict)
    edges: dict[str, set[str]] = field(default_factory=dict)
    reverse_edges: dict[str, set[str]] = field(default_factory=dict)

    def __contains__(self, name: object) -> bool:
        return name in self.packages

    def __len__(self) -> int:
        return len(self.packages)

    def dependencies_of(self, name: str) -> set[str]:
        """Direct local dependencies of a package (empty if unknown)."""
        return set(self.edges.get(name, ()))

    def dependents_of(self, name: str) -> set[str]:
        """Direct dependents of a package (empty if none or unknown)."""
        return set(self.reverse_edges.get(name, ()))


def build_reverse_graph(edges: Mapping[str, Iterable[str]]) -> dict[str, set[str]]:
    """
    Invert forward edges: map each dependency to the packages that need it.

    Packages nobody depends on do not appear as keys.
    """
    reverse: dict[str, set[str]] = {}
    for pkg, deps in edges.items():
        for dep in deps:
            reverse.setdefault(dep, set()).add(pkg)
    return reverse


def load_package_node(package_json_path: Path | str, *, logger: Logger | None = None) -> PackageNode:
    """Parse one manifest into a PackageNode with no local dependencies yet."""
    log = resolve_logger(logger)
    try:
        descriptor = parse_package_json(package_json_path)
    except DescriptorError as e:
        log.error(
            f"DEPENDENCY_GRAPH_PARSE_FAILED: Failed to parse package.json | "
            f"Path: {package_json_path} | Error: {e.reason}"
        )
        raise
    return PackageNode.from_descriptor(descriptor)


def build_dependency_graph(
    package_json_paths: Iterable[Path | str],
    *,
    logger: Logger | None = None,
    strict: bool = False,
) -> DependencyGraph:
    """
    Build a dependency graph from package.json paths.

    First every manifest is parsed (a later manifest with an already-seen
    name replaces the earlier one, unless ``strict`` is set, in which case
    DuplicateNameError is raised). Then each package's declared dependencies
    are matched against the known package names to find local dependencies,
    which become the graph's forward edges.

    Raises DescriptorError if any manifest cannot be parsed; no partial
    graph is returned.
    """
    log = resolve_logger(logger)
    packages: dict[str, PackageNode] = {}
    sources: dict[str, Path] = {}

    for raw_path in package_json_paths:
        path = Path(raw_path)
        node = load_package_node(path, logger=log)
        if node.name in packages:
            if strict:
                raise DuplicateNameError(node.name, sources[node.name], path)
            log.warn(
                f"Duplicate package name {node.name}: {path} replaces {sources[node.name]}"
            )
        packages[node.name] = node
        sources[node.name] = path
        log.verbose(f"Parsed package: {node.name} at {node.path}")

    edges: dict[str, set[str]] = {}
    for name, node in packages.items():
        local = {dep for dep in node.dependencies if dep in packages}
        for dep in sorted(local):
            log.verbose(f"{name} depends on local package: {dep}")
        node.local_dependencies = local
        edges[name] = set(local)

    log.debug(f"Dependency graph built with {len(packages)} packages")
    return DependencyGraph(
        packages=packages,
        edges=edges,
        reverse_edges=build_reverse_graph(edges),
    )
