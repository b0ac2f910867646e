# SPDX-License-Identifier: AGPL-3.0-only OR LicenseRef-Fullbleed-Commercial
"""Reversed-path index over full asset paths.

Every full path is stored under a key made of its ``/`` segments in reverse
order, so ``a/b/c`` is keyed as ``c/b/a``. Looking up an asset by its trailing
segments then becomes a prefix lookup on the key, and all keys sharing a prefix
sit next to each other once sorted.
"""
from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Iterator, Mapping
from itertools import islice
from types import MappingProxyType


def reverse_path(path: str) -> str:
    """Reverse the segment order of a ``/``-separated path.

    ``reverse_path("aa/bb/cc") == "cc/bb/aa"``. Characters inside a segment are
    left alone, and applying the function twice returns the input.
    """
    return "/".join(reversed(path.split("/")))


class FullPathIndex(Mapping):
    """Read-only mapping of reversed key -> full path, ordered by key.

    Instances never change after construction. ``tail()`` returns a view that
    shares storage with its parent rather than copying it.
    """

    __slots__ = ("_keys", "_paths", "_start")

    def __init__(self, entries: Mapping[str, str] | Iterable[tuple[str, str]] = ()):
        paths = dict(entries)
        self._keys = tuple(sorted(paths))
        self._paths = MappingProxyType(paths)
        self._start = 0

    @classmethod
    def _view(cls, parent: "FullPathIndex", start: int) -> "FullPathIndex":
        view = cls.__new__(cls)
        view._keys = parent._keys
        view._paths = parent._paths
        view._start = start
        return view

    def __getitem__(self, key: str) -> str:
        if self._start:
            # keys below the view's first key belong to the parent only
            if self._start >= len(self._keys) or key < self._keys[self._start]:
                raise KeyError(key)
        return self._paths[key]

    def __iter__(self) -> Iterator[str]:
        return islice(self._keys, self._start, None)

    def __len__(self) -> int:
        return len(self._keys) - self._start

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"

    def tail(self, from_key: str) -> "FullPathIndex":
        """Return the entries whose key is ``>= from_key``, in key order."""
        start = bisect_left(self._keys, from_key, lo=self._start)
        return self._view(self, start)


def build_index(candidate_paths: Iterable[str]) -> FullPathIndex:
    """Index a collection of full asset paths by their reversed form.

    The same full path seen twice yields the same key, so duplicates collapse.
    No filtering happens here.
    """
    return FullPathIndex((reverse_path(path), path) for path in candidate_paths)
