# SPDX-License-Identifier: AGPL-3.0-only OR LicenseRef-Fullbleed-Commercial
"""Locate assets bundled in WebJars by partial path.

``WebJarAssetLocator().get_full_path("jquery.js")`` returns
``"META-INF/resources/webjars/jquery/3.1.0/jquery.js"`` when exactly one
indexed asset ends with that path.
"""
from importlib.metadata import PackageNotFoundError, version

from .discovery import (
    MAX_DIRECTORY_DEPTH,
    WEBJARS_PATH_PREFIX,
    SearchLocation,
    get_asset_paths,
    register_scanner,
    resolve_search_roots,
)
from .errors import (
    AssetNotFoundError,
    ConfigError,
    DepthExceededError,
    DiscoveryError,
    MultipleMatchesError,
    WebJarError,
)
from .index import FullPathIndex, build_index, reverse_path
from .locator import WebJarAssetLocator, get_full_path_index
from .resolvers import AssetResolver, exactly_one, first_match, matching_entries


def _get_version():
    """Resolve the installed package version."""
    try:
        return version("webjar-locator")
    except PackageNotFoundError:
        return "0.0.0-dev"


__version__ = _get_version()

__all__ = [
    "MAX_DIRECTORY_DEPTH",
    "WEBJARS_PATH_PREFIX",
    "AssetNotFoundError",
    "AssetResolver",
    "ConfigError",
    "DepthExceededError",
    "DiscoveryError",
    "FullPathIndex",
    "MultipleMatchesError",
    "SearchLocation",
    "WebJarAssetLocator",
    "WebJarError",
    "build_index",
    "exactly_one",
    "first_match",
    "get_asset_paths",
    "get_full_path_index",
    "matching_entries",
    "register_scanner",
    "resolve_search_roots",
    "reverse_path",
]
