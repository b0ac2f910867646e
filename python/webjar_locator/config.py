# SPDX-License-Identifier: AGPL-3.0-only OR LicenseRef-Fullbleed-Commercial
from pathlib import Path
from typing import Any, Dict, List, Optional
try:
    import tomllib
except ImportError:
    import tomli as tomllib
import re

from .discovery import MATCH_ALL, MAX_DIRECTORY_DEPTH, PKG_SCHEME, WEBJARS_PATH_PREFIX
from .errors import ConfigError
from .resolvers import RESOLVERS

CONFIG_FILENAME = "webjars.toml"

# Default configuration structure
DEFAULT_CONFIG = {
    "locator": {
        "search_roots": [],  # empty means $WEBJARS_SEARCH_PATH or sys.path
        "filter": MATCH_ALL,
        "max_depth": MAX_DIRECTORY_DEPTH,
        "path_prefix": WEBJARS_PATH_PREFIX,
        "resolver": "exactly-one",
    }
}


class LocatorConfig:
    def __init__(self, data: Dict[str, Any], path: Optional[Path] = None):
        self.data = data
        self.path = path
        self.root = path.parent if path is not None else Path.cwd()
        self._validate()

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "LocatorConfig":
        """Load configuration from webjars.toml."""
        if path is None:
            path = Path.cwd() / CONFIG_FILENAME
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"No {CONFIG_FILENAME} found at {path}.", path)

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to parse {path}: {e}", path) from e

        return cls(data, path)

    @classmethod
    def defaults(cls) -> "LocatorConfig":
        return cls({})

    @property
    def locator(self) -> Dict[str, Any]:
        return self.data.get("locator", {})

    def _get(self, key: str) -> Any:
        return self.locator.get(key, DEFAULT_CONFIG["locator"][key])

    @property
    def filter(self) -> str:
        return self._get("filter")

    @property
    def max_depth(self) -> int:
        return self._get("max_depth")

    @property
    def path_prefix(self) -> str:
        return self._get("path_prefix").strip("/")

    @property
    def resolver_name(self) -> str:
        return self._get("resolver")

    def get_resolver(self):
        return RESOLVERS[self.resolver_name]

    def resolve_path(self, relative_path: str) -> Path:
        return self.root / relative_path

    def get_search_roots(self) -> Optional[List[str]]:
        """Configured roots with filesystem entries made absolute, or None."""
        roots = self._get("search_roots")
        if isinstance(roots, str):
            roots = [roots]
        if not roots:
            return None
        resolved = []
        for root in roots:
            if root.startswith(PKG_SCHEME):
                resolved.append(root)
            else:
                resolved.append(str(self.resolve_path(root)))
        return resolved

    def _validate(self) -> None:
        where = f" in {self.path}" if self.path else ""
        if not isinstance(self.data.get("locator", {}), dict):
            raise ConfigError(f"[locator] must be a table{where}", self.path)
        roots = self._get("search_roots")
        if not isinstance(roots, (str, list)) or (
            isinstance(roots, list) and not all(isinstance(r, str) for r in roots)
        ):
            raise ConfigError(f"locator.search_roots must be a list of strings{where}", self.path)
        depth = self._get("max_depth")
        if isinstance(depth, bool) or not isinstance(depth, int) or depth < 0:
            raise ConfigError(f"locator.max_depth must be a non-negative integer{where}", self.path)
        prefix = self._get("path_prefix")
        if not isinstance(prefix, str) or not prefix.strip("/"):
            raise ConfigError(f"locator.path_prefix must be a non-empty string{where}", self.path)
        if self._get("resolver") not in RESOLVERS:
            expected = ", ".join(sorted(RESOLVERS))
            raise ConfigError(
                f"unknown locator.resolver: {self._get('resolver')} (expected {expected}){where}",
                self.path,
            )
        try:
            re.compile(self._get("filter"))
        except (re.error, TypeError) as e:
            raise ConfigError(f"locator.filter is not a valid regular expression{where}: {e}", self.path) from e
