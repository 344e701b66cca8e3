"""
Property helpers for validating sorting-machine results.

These back the test-suite and the benchmark runner's optional sanity check.

Public API (stable):
    is_nondecreasing(xs, order) -> bool
    first_nondecreasing_violation_index(xs, order) -> int | None
    is_permutation(a, b) -> bool                 # hashable elements
    is_permutation_eq(a, b) -> bool              # any elements, by ==
    permutation_counter_diff(a, b) -> dict
    assert_no_mutation(before, after) -> None
    drain_machine(machine) -> list

Notes
-----
- Nondecreasing is checked under the machine's order, not the elements' own
  ``<``; two elements that tie are fine in either order.
- Tie order (stability) is *not* checked here. A stability test needs tagged
  elements, e.g. pairs (key, id) compared on key only, and is only meaningful
  for machines that promise it.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Hashable, List, Sequence

from sortmachine.order import Order


__all__ = [
    "is_nondecreasing",
    "first_nondecreasing_violation_index",
    "is_permutation",
    "is_permutation_eq",
    "permutation_counter_diff",
    "assert_no_mutation",
    "drain_machine",
]


def is_nondecreasing(xs: Sequence[Any], order: Order) -> bool:
    """Return True iff order(xs[i], xs[i+1]) <= 0 for all i."""
    return first_nondecreasing_violation_index(xs, order) is None


def first_nondecreasing_violation_index(xs: Sequence[Any], order: Order) -> int | None:
    """
    Return the first index i where xs[i] comes after xs[i+1], or None.

    Useful for precise error messages:
        i = first_nondecreasing_violation_index(out, order)
        assert i is None, f"out of order at i={i}: {out[i]!r} > {out[i+1]!r}"
    """
    for i in range(len(xs) - 1):
        if order(xs[i], xs[i + 1]) > 0:
            return i
    return None


def is_permutation(a: Sequence[Hashable], b: Sequence[Hashable]) -> bool:
    """Return True iff `a` and `b` contain exactly the same multiset of values."""
    if len(a) != len(b):
        return False
    return Counter(a) == Counter(b)


def is_permutation_eq(a: Sequence[Any], b: Sequence[Any]) -> bool:
    """
    Like `is_permutation`, but works for unhashable elements (quadratic).
    """
    if len(a) != len(b):
        return False
    try:
        return Counter(a) == Counter(b)
    except TypeError:
        pass
    remaining = list(b)
    for x in a:
        for i, y in enumerate(remaining):
            if x == y:
                del remaining[i]
                break
        else:
            return False
    return True


def permutation_counter_diff(a: Sequence[Hashable], b: Sequence[Hashable]) -> Dict[Any, int]:
    """
    Return a dict of value -> count difference (count_a - count_b).

    Empty dict means `a` and `b` have identical multiplicities.
    """
    diff = Counter(a)
    diff.subtract(Counter(b))
    return {k: d for k, d in diff.items() if d != 0}


def assert_no_mutation(before: Sequence[Any], after: Sequence[Any]) -> None:
    """
    Assert that two sequences are element-wise equal, used to ensure a
    caller's input list was not mutated by feeding it to a machine.

    Raises AssertionError with a concise message if they differ.
    """
    if len(before) != len(after):
        raise AssertionError(
            f"Input mutated: length changed from {len(before)} to {len(after)}"
        )
    for i, (x, y) in enumerate(zip(before, after)):
        if x != y:
            raise AssertionError(f"Input mutated at index {i}: before={x!r}, after={y!r}")


def drain_machine(machine: Any) -> List[Any]:
    """Return every remaining element of an extraction-mode machine, in extraction order."""
    return list(machine.drain())
