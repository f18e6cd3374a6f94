"""Parse package.json manifests into package descriptors."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from wstree.core.errors import DescriptorError

# package.json fields that declare dependencies, in the order they are merged.
DEPENDENCY_FIELDS = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)

DEFAULT_VERSION = "0.0.0"


@dataclass
class PackageDescriptor:
    """Metadata read from a package.json."""

    name: str
    path: Path  # the manifest file
    version: str = DEFAULT_VERSION
    description: str = ""
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    peer_dependencies: dict[str, str] = field(default_factory=dict)
    optional_dependencies: dict[str, str] = field(default_factory=dict)

    @property
    def location(self) -> Path:
        """Directory that contains the manifest."""
        return self.path.parent

    def all_dependencies(self) -> list[str]:
        """Names from every dependency category, first declaration wins the position."""
        names: dict[str, None] = {}
        for group in (
            self.dependencies,
            self.dev_dependencies,
            self.peer_dependencies,
            self.optional_dependencies,
        ):
            names.update(dict.fromkeys(group))
        return list(names)


def _dependency_map(data: dict[str, Any], key: str, path: Path) -> dict[str, str]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DescriptorError(path, f"{key} must be an object")
    return {str(name): str(spec) for name, spec in value.items()}


def parse_package_json(path: Path | str) -> PackageDescriptor:
    """
    Read and validate a package.json file.

    Raises DescriptorError if the file cannot be read, is not a JSON object,
    has no usable ``name``, or has a malformed ``version`` or dependency field.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DescriptorError(path, f"cannot read file ({e})") from e
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise DescriptorError(path, f"invalid JSON ({e.msg} at line {e.lineno})") from e
    if not isinstance(data, dict):
        raise DescriptorError(path, "top-level value must be an object")

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise DescriptorError(path, "package has no name field")

    version = data.get("version")
    if version is None:
        version = DEFAULT_VERSION
    elif not isinstance(version, str):
        raise DescriptorError(path, "version must be a string")

    description = data.get("description")
    if not isinstance(description, str):
        description = ""

    return PackageDescriptor(
        name=name,
        path=path.resolve(),
        version=version or DEFAULT_VERSION,
        description=description,
        dependencies=_dependency_map(data, "dependencies", path),
        dev_dependencies=_dependency_map(data, "devDependencies", path),
        peer_dependencies=_dependency_map(data, "peerDependencies", path),
        optional_dependencies=_dependency_map(data, "optionalDependencies", path),
    )
