# SPDX-License-Identifier: AGPL-3.0-only OR LicenseRef-Fullbleed-Commercial
"""Locate WebJar assets by partial path.

A locator owns one immutable ``FullPathIndex`` built when it is constructed.
Lookups never modify it, so a locator can be shared between threads. To pick
up newly added assets, build a new locator.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Optional

from .discovery import (
    MATCH_ALL,
    MAX_DIRECTORY_DEPTH,
    WEBJARS_PATH_PREFIX,
    FilterExpr,
    get_asset_paths,
)
from .index import FullPathIndex, build_index, reverse_path
from .resolvers import AssetResolver, exactly_one

if TYPE_CHECKING:
    from .config import LocatorConfig


def get_full_path_index(
    filter_expr: FilterExpr = MATCH_ALL,
    search_roots: Optional[Iterable] = None,
    *,
    path_prefix: str = WEBJARS_PATH_PREFIX,
    max_depth: int = MAX_DIRECTORY_DEPTH,
) -> FullPathIndex:
    """Discover assets under ``search_roots`` and index them by reversed path.

    The path ``a/b`` is stored as ``"b/a" -> "a/b"``, so an asset can be found
    from its rightmost path segments with a prefix lookup on the sorted keys.
    """
    asset_paths = get_asset_paths(
        filter_expr, search_roots, path_prefix=path_prefix, max_depth=max_depth
    )
    return build_index(asset_paths)


class WebJarAssetLocator:
    def __init__(
        self,
        full_path_index: Optional[Mapping[str, str]] = None,
        *,
        resolver: AssetResolver = exactly_one,
        path_prefix: str = WEBJARS_PATH_PREFIX,
    ):
        if full_path_index is None:
            full_path_index = get_full_path_index(MATCH_ALL, path_prefix=path_prefix)
        elif not isinstance(full_path_index, FullPathIndex):
            full_path_index = FullPathIndex(full_path_index)
        self._full_path_index = full_path_index
        self._path_prefix = path_prefix
        self.asset_resolver = resolver

    @classmethod
    def from_search_roots(
        cls,
        search_roots: Optional[Iterable],
        filter_expr: FilterExpr = MATCH_ALL,
        *,
        max_depth: int = MAX_DIRECTORY_DEPTH,
        path_prefix: str = WEBJARS_PATH_PREFIX,
        resolver: AssetResolver = exactly_one,
    ) -> "WebJarAssetLocator":
        index = get_full_path_index(
            filter_expr, search_roots, path_prefix=path_prefix, max_depth=max_depth
        )
        return cls(index, resolver=resolver, path_prefix=path_prefix)

    @classmethod
    def from_config(cls, config: "LocatorConfig") -> "WebJarAssetLocator":
        return cls.from_search_roots(
            config.get_search_roots(),
            config.filter,
            max_depth=config.max_depth,
            path_prefix=config.path_prefix,
            resolver=config.get_resolver(),
        )

    @property
    def full_path_index(self) -> FullPathIndex:
        return self._full_path_index

    def get_full_path_index(self) -> FullPathIndex:
        return self._full_path_index

    @property
    def path_prefix(self) -> str:
        return self._path_prefix

    def set_asset_resolver(self, resolver: AssetResolver) -> None:
        self.asset_resolver = resolver

    def get_full_path(self, partial_path: str) -> str:
        """Return the full path of the one asset ending with ``partial_path``.

        ``partial_path`` is e.g. ``"jquery.js"`` or ``"abc/someother.js"``.
        With the default resolver it must be distinct within the index,
        otherwise ``AssetNotFoundError`` or ``MultipleMatchesError`` is raised.
        """
        tail = self._full_path_index.tail(reverse_path(partial_path))
        return self.asset_resolver(tail, partial_path)

    def list_assets(self, folder_path: str) -> set[str]:
        """List assets within a folder. ``folder_path`` must begin with '/'."""
        if not folder_path.startswith("/"):
            raise ValueError(f"folder path must begin with '/': {folder_path!r}")
        prefix = self._path_prefix + folder_path
        return {asset for asset in self._full_path_index.values() if asset.startswith(prefix)}
