# SPDX-License-Identifier: AGPL-3.0-only OR LicenseRef-Fullbleed-Commercial
"""Find candidate asset paths beneath the WebJars prefix.

Search roots (``sys.path`` entries by default) are classified into locations,
and each location is enumerated by the scanner registered for its scheme:

- ``file``: a plain directory holding the prefix, walked to a bounded depth
- ``jar``: a zip archive (``.jar``, ``.zip``, ``.whl``) listing the prefix
- ``pkg``: an importable package's resources via ``importlib.resources``

Every scanner returns paths that start at the prefix and fully match the
filter expression.
"""
from __future__ import annotations

import os
import re
import sys
import zipfile
from collections.abc import Iterable
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Callable, Optional, Union

from .errors import DepthExceededError, DiscoveryError

WEBJARS_PATH_PREFIX = "META-INF/resources/webjars"
MAX_DIRECTORY_DEPTH = 5
MATCH_ALL = ".*"
PKG_SCHEME = "pkg:"
SEARCH_PATH_ENV = "WEBJARS_SEARCH_PATH"

FilterExpr = Union[str, re.Pattern[str]]


@dataclass(frozen=True)
class SearchLocation:
    scheme: str
    target: str

    def __str__(self) -> str:
        return f"{self.scheme}:{self.target}"


Scanner = Callable[[SearchLocation, re.Pattern[str], str, int], set[str]]

_SCANNERS: dict[str, Scanner] = {}


def register_scanner(scheme: str, scanner: Optional[Scanner] = None):
    """Register the scanner for a location scheme; usable as a decorator."""
    if scanner is None:
        def decorator(fn: Scanner) -> Scanner:
            _SCANNERS[scheme] = fn
            return fn
        return decorator
    _SCANNERS[scheme] = scanner
    return scanner


def scanner_for(scheme: str) -> Scanner:
    try:
        return _SCANNERS[scheme]
    except KeyError:
        raise DiscoveryError(f"no scanner registered for scheme: {scheme}") from None


def compile_filter(filter_expr: FilterExpr) -> re.Pattern[str]:
    if isinstance(filter_expr, re.Pattern):
        return filter_expr
    return re.compile(filter_expr)


def split_search_path(value: str) -> list[str]:
    """Split an ``os.pathsep``-separated search path, keeping ``pkg:<name>`` whole.

    On POSIX the separator is also the colon in ``pkg:``, so a bare ``pkg`` entry
    is joined with the entry after it. Empty entries are dropped.
    """
    roots: list[str] = []
    entries = iter(value.split(os.pathsep))
    for entry in entries:
        if entry + os.pathsep == PKG_SCHEME:
            roots.append(PKG_SCHEME + next(entries, ""))
        elif entry:
            roots.append(entry)
    return roots


def default_search_roots() -> list[str]:
    """Return ``$WEBJARS_SEARCH_PATH`` entries if set, else ``sys.path``."""
    env = os.environ.get(SEARCH_PATH_ENV)
    if env:
        return split_search_path(env)
    # An empty sys.path entry stands for the current directory
    return [entry or "." for entry in sys.path]


def _locate(root, path_prefix: str) -> Optional[SearchLocation]:
    text = str(root)
    if text.startswith(PKG_SCHEME):
        return SearchLocation("pkg", text[len(PKG_SCHEME):])

    path = Path(text)
    try:
        if path.is_dir():
            candidate = path / path_prefix
            if candidate.is_dir():
                return SearchLocation("file", candidate.as_posix())
            return None
        if path.is_file() and zipfile.is_zipfile(path):
            with zipfile.ZipFile(path) as zf:
                marker = path_prefix + "/"
                if any(name.startswith(marker) for name in zf.namelist()):
                    return SearchLocation("jar", path.as_posix())
    except (OSError, zipfile.BadZipFile) as exc:
        raise DiscoveryError(f"failed to inspect search root {text}: {exc}") from exc
    return None


def resolve_search_roots(
    search_roots: Iterable, path_prefix: str = WEBJARS_PATH_PREFIX
) -> list[SearchLocation]:
    """Map search roots to the locations that actually hold ``path_prefix``.

    Roots that do not exist, are not archives or lack the prefix are skipped.
    Duplicates collapse; order is kept.
    """
    locations: list[SearchLocation] = []
    for root in search_roots:
        location = _locate(root, path_prefix)
        if location is not None and location not in locations:
            locations.append(location)
    return locations


@register_scanner("file")
def scan_directory(
    location: SearchLocation, filter_expr: re.Pattern[str], path_prefix: str, max_depth: int
) -> set[str]:
    """Walk a prefix directory; a directory below ``max_depth`` levels is fatal."""
    root = Path(location.target)
    found: set[str] = set()
    stack: list[tuple[Path, int]] = [(root, 0)]
    while stack:
        directory, level = stack.pop()
        if level > max_depth:
            raise DepthExceededError(root, max_depth)
        for child in directory.iterdir():
            if child.is_dir():
                stack.append((child, level + 1))
                continue
            relative = f"{path_prefix}/{child.relative_to(root).as_posix()}"
            if filter_expr.fullmatch(relative):
                found.add(relative)
    return found


@register_scanner("jar")
def scan_archive(
    location: SearchLocation, filter_expr: re.Pattern[str], path_prefix: str, max_depth: int
) -> set[str]:
    """List archive entries under the prefix. Entries are flat, so no depth limit."""
    marker = path_prefix + "/"
    found: set[str] = set()
    with zipfile.ZipFile(location.target) as zf:
        for info in zf.infolist():
            name = info.filename
            if info.is_dir() or not name.startswith(marker):
                continue
            if filter_expr.fullmatch(name):
                found.add(name)
    return found


@register_scanner("pkg")
def scan_package_resources(
    location: SearchLocation, filter_expr: re.Pattern[str], path_prefix: str, max_depth: int
) -> set[str]:
    """Walk ``<package>/<prefix>`` through ``importlib.resources``.

    Works for any loader that provides a ``Traversable``, including packages
    imported from zip files. Importing the package runs its ``__init__``, so any
    failure there is reported as a ``DiscoveryError``.
    """
    try:
        node = resources.files(location.target)
    except Exception as exc:
        raise DiscoveryError(f"cannot load package resources for {location}: {exc}") from exc
    for segment in path_prefix.split("/"):
        node = node.joinpath(segment)
    if not node.is_dir():
        return set()

    found: set[str] = set()
    stack: list[tuple[object, str, int]] = [(node, path_prefix, 0)]
    while stack:
        directory, prefix, level = stack.pop()
        if level > max_depth:
            raise DepthExceededError(f"{location}/{path_prefix}", max_depth)
        for child in directory.iterdir():
            rel = f"{prefix}/{child.name}"
            if child.is_dir():
                if child.name == "__pycache__":
                    continue
                stack.append((child, rel, level + 1))
            elif child.is_file() and filter_expr.fullmatch(rel):
                found.add(rel)
    return found


def get_asset_paths(
    filter_expr: FilterExpr = MATCH_ALL,
    search_roots: Optional[Iterable] = None,
    *,
    path_prefix: str = WEBJARS_PATH_PREFIX,
    max_depth: int = MAX_DIRECTORY_DEPTH,
) -> set[str]:
    """Collect every asset path below ``path_prefix`` that matches ``filter_expr``.

    I/O failures are re-raised as ``DiscoveryError``; an index is never built
    from a partial scan.
    """
    pattern = compile_filter(filter_expr)
    roots = default_search_roots() if search_roots is None else list(search_roots)

    asset_paths: set[str] = set()
    for location in resolve_search_roots(roots, path_prefix):
        scanner = scanner_for(location.scheme)
        try:
            asset_paths |= scanner(location, pattern, path_prefix, max_depth)
        except (OSError, zipfile.BadZipFile) as exc:
            raise DiscoveryError(f"failed to scan {location}: {exc}") from exc
    return asset_paths
