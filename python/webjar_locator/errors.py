# SPDX-License-Identifier: AGPL-3.0-only OR LicenseRef-Fullbleed-Commercial
"""Exception types raised by the WebJar asset locator."""
from __future__ import annotations


class WebJarError(Exception):
    """Base class for every locator failure."""


class AssetNotFoundError(WebJarError, LookupError):
    """No indexed asset ends with the requested partial path."""

    def __init__(self, partial_path: str):
        self.partial_path = partial_path
        super().__init__(
            f"{partial_path} could not be found. Make sure you've added the "
            "corresponding WebJar and please check for typos."
        )


class MultipleMatchesError(WebJarError, LookupError):
    """More than one indexed asset ends with the requested partial path."""

    def __init__(self, partial_path: str):
        self.partial_path = partial_path
        super().__init__(
            f"Multiple matches found for {partial_path}. Please provide a more "
            "specific path, for example by including a version number."
        )


class DiscoveryError(WebJarError, RuntimeError):
    """Enumerating a search root failed."""


class DepthExceededError(DiscoveryError):
    """A directory search root nests deeper than the configured limit."""

    def __init__(self, root, max_depth: int):
        self.root = root
        self.max_depth = max_depth
        super().__init__(f"Got deeper than {max_depth} levels while searching {root}")


class ConfigError(WebJarError, ValueError):
    """webjars.toml is missing, unreadable or holds invalid values."""

    def __init__(self, message: str, path=None):
        self.path = path
        super().__init__(message)
