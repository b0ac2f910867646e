# SPDX-License-Identifier: AGPL-3.0-only OR LicenseRef-Fullbleed-Commercial
"""Resolution policies: choose one asset from the candidates for a partial path.

A policy is any callable ``(tail, partial_path) -> full_path``. ``tail`` is the
slice of the index whose reversed keys sort at or after the reversed partial
path; entries there are candidates only, and the policy decides which of them
really match. Policies raise ``AssetNotFoundError``/``MultipleMatchesError``
(or anything else they like) when they cannot pick one.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Callable

from .errors import AssetNotFoundError, MultipleMatchesError
from .index import reverse_path

AssetResolver = Callable[[Mapping[str, str], str], str]


def matching_entries(tail: Mapping[str, str], partial_path: str) -> Iterator[tuple[str, str]]:
    """Yield the leading run of ``(key, full_path)`` pairs that match.

    Stops at the first key that does not start with the reversed partial path;
    keys are sorted, so nothing after it can match.
    """
    reversed_partial = reverse_path(partial_path)
    for key, full_path in tail.items():
        if not key.startswith(reversed_partial):
            return
        yield key, full_path


def exactly_one(tail: Mapping[str, str], partial_path: str) -> str:
    """Return the only match, or raise when there is none or more than one.

    Only the first two entries of the tail are examined.
    """
    matches = matching_entries(tail, partial_path)
    first = next(matches, None)
    if first is None:
        raise AssetNotFoundError(partial_path)
    if next(matches, None) is not None:
        raise MultipleMatchesError(partial_path)
    return first[1]


def first_match(tail: Mapping[str, str], partial_path: str) -> str:
    """Return the match with the lowest reversed key, ignoring any others."""
    for _key, full_path in matching_entries(tail, partial_path):
        return full_path
    raise AssetNotFoundError(partial_path)


RESOLVERS: dict[str, AssetResolver] = {
    "exactly-one": exactly_one,
    "first-match": first_match,
}
