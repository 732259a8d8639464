"""Structural deep clone for plain state data.

Dicts, lists, tuples, sets and frozensets are rebuilt recursively; immutable
scalars are shared. Anything else falls back to copy.deepcopy, so only plain
data is guaranteed to round-trip faithfully.
"""

from __future__ import annotations

import copy
from typing import TypeVar

T = TypeVar("T")

_SCALARS = (type(None), bool, int, float, complex, str, bytes)


def clone(value: T) -> T:
    if isinstance(value, _SCALARS):
        return value
    if type(value) is dict:
        return {k: clone(v) for k, v in value.items()}  # type: ignore[return-value]
    if type(value) is list:
        return [clone(v) for v in value]  # type: ignore[return-value]
    if type(value) is tuple:
        return tuple(clone(v) for v in value)  # type: ignore[return-value]
    if type(value) is set:
        return {clone(v) for v in value}  # type: ignore[return-value]
    if type(value) is frozenset:
        return frozenset(clone(v) for v in value)  # type: ignore[return-value]
    return copy.deepcopy(value)
