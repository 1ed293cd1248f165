"""Structural equality for card field values.

Used to decide whether a field "changed" relative to the sync snapshot.
``None`` stands for every flavour of absence (missing key, JSON ``null``),
so serialization round-trips never produce a false difference.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def values_equal(a: Any, b: Any) -> bool:
    """Compare two field values.

    Rules:
    - None == None (absence in any form)
    - Sequences: same length, pairwise equal, order-sensitive
      (lists and tuples are interchangeable)
    - Mappings: same key set, values recursively equal
    - Anything else: plain ``==``
    """
    if a is None or b is None:
        return a is None and b is None

    if _is_sequence(a) and _is_sequence(b):
        if len(a) != len(b):
            return False
        return all(values_equal(x, y) for x, y in zip(a, b, strict=True))

    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(values_equal(a[key], b[key]) for key in a)

    if _is_sequence(a) or _is_sequence(b) or isinstance(a, Mapping) or isinstance(b, Mapping):
        return False

    return bool(a == b)
