"""Exceptions raised while scanning, parsing, building and analysing graphs."""

from __future__ import annotations

from pathlib import Path


class GraphError(Exception):
    """Base class for every wstree error."""


class ScanError(GraphError):
    """The workspace directory is missing or cannot be listed."""

    def __init__(self, directory: Path | str, reason: str = "") -> None:
        self.directory = Path(directory)
        self.reason = reason
        message = f"Failed to scan directory {directory}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DescriptorError(GraphError):
    """A package.json is unreadable, malformed, or has no name."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid package descriptor {path}: {reason}")


class CycleError(GraphError):
    """A dependency cycle makes a build order impossible.

    ``involved`` is the package that was re-entered while still in progress;
    ``cycle`` is the dependency path from it back to itself, when known.
    """

    def __init__(self, involved: str, cycle: list[str] | None = None) -> None:
        self.involved = involved
        self.cycle = list(cycle) if cycle else []
        message = f"Circular dependency detected involving package: {involved}"
        if self.cycle:
            message += f" ({' -> '.join(self.cycle)})"
        super().__init__(message)


class DuplicateNameError(GraphError):
    """Two manifests declare the same package name (strict builds only)."""

    def __init__(self, name: str, first: Path | str, second: Path | str) -> None:
        self.name = name
        self.first = Path(first)
        self.second = Path(second)
        super().__init__(f"Package name {name!r} is declared by both {first} and {second}")


class SnapshotError(GraphError):
    """A serialized graph document is unreadable or has the wrong shape."""
