"""Discover package.json manifests in a workspace directory."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable

from wstree.core.errors import ScanError
from wstree.log import Logger, resolve_logger

MANIFEST_NAME = "package.json"
DEFAULT_SCAN_DEPTH = 1

EXCLUDE_ENV = "WSTREE_EXCLUDE"
SCAN_DEPTH_ENV = "WSTREE_SCAN_DEPTH"


def _glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a path glob: ``**`` spans directories, ``*`` and ``?`` do not."""
    out: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
            continue
        if ch == "*":
            out.append("[^/]*")
        elif ch == "?":
            out.append(".")
        else:
            out.append(re.escape(ch))
        i += 1
    return re.compile("^" + "".join(out) + "$")


def _matches_pattern(file_path: str, pattern: str) -> bool:
    """True if the glob matches the whole path or just its last component."""
    regex = _glob_to_regex(pattern)
    return bool(regex.match(file_path) or regex.match(os.path.basename(file_path)))


def should_exclude(
    package_json_path: Path | str,
    excluded_patterns: Iterable[str],
    *,
    cwd: Path | str | None = None,
) -> bool:
    """
    Check whether a manifest matches any exclusion pattern.

    Each pattern is tried against the absolute path, the path relative to
    ``cwd`` (default: current directory), and the directories of both.
    """
    patterns = [p for p in excluded_patterns if p]
    if not patterns:
        return False

    absolute = Path(package_json_path).as_posix()
    base = Path(cwd) if cwd is not None else Path.cwd()
    relative = Path(os.path.relpath(package_json_path, base)).as_posix()
    candidates = (
        absolute,
        relative,
        os.path.dirname(absolute),
        os.path.dirname(relative),
    )
    return any(_matches_pattern(c, pattern) for pattern in patterns for c in candidates)


def default_excluded_patterns() -> list[str]:
    """Exclusion globs from WSTREE_EXCLUDE (split by os.pathsep)."""
    value = os.environ.get(EXCLUDE_ENV, "")
    return [p.strip() for p in value.split(os.pathsep) if p.strip()]


def default_scan_depth() -> int:
    """Scan depth from WSTREE_SCAN_DEPTH, falling back to DEFAULT_SCAN_DEPTH."""
    value = os.environ.get(SCAN_DEPTH_ENV, "").strip()
    try:
        depth = int(value)
    except ValueError:
        return DEFAULT_SCAN_DEPTH
    return depth if depth >= 0 else DEFAULT_SCAN_DEPTH


def scan_for_package_json_files(
    directory: Path | str,
    excluded_patterns: Iterable[str] = (),
    *,
    max_depth: int = DEFAULT_SCAN_DEPTH,
    logger: Logger | None = None,
) -> list[Path]:
    """
    Find package.json files in a workspace.

    The directory's own package.json comes first, followed by manifests in
    sub-directories (sorted by name) up to ``max_depth`` levels below it.

    Raises ScanError if the directory does not exist or cannot be listed.
    """
    log = resolve_logger(logger)
    root = Path(directory)
    patterns = list(excluded_patterns)
    found: list[Path] = []

    def _consider(pkg_json: Path) -> None:
        if not pkg_json.is_file():
            return
        if should_exclude(pkg_json, patterns):
            log.verbose(f"Excluding package.json at: {pkg_json} (matches exclusion pattern)")
            return
        found.append(pkg_json)
        log.verbose(f"Found package.json at: {pkg_json}")

    def _scan_dir(p: Path, depth: int) -> None:
        if depth > max_depth:
            return
        try:
            children = sorted(child for child in p.iterdir() if child.is_dir())
        except PermissionError:
            if depth == 1:
                raise
            log.warn(f"Skipping unreadable directory: {p}")
            return
        for child in children:
            _consider(child / MANIFEST_NAME)
            _scan_dir(child, depth + 1)

    try:
        if not root.is_dir():
            raise FileNotFoundError(f"no such directory: {root}")
        _consider(root / MANIFEST_NAME)
        _scan_dir(root, 1)
    except OSError as e:
        log.error(
            f"DEPENDENCY_GRAPH_SCAN_FAILED: Failed to scan directory | Directory: {root} | Error: {e}"
        )
        raise ScanError(root, str(e)) from e

    return found
