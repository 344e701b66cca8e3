"""
Oracle for sorting-machine correctness.

Ground truth is Python's built-in ``sorted()`` driven by the same order the
machine uses (via ``functools.cmp_to_key``):
- Deterministic and portable
- Stable, so for a given input there is exactly one oracle output

Because machines may return tied elements in any relative order, a machine's
output is compared to the oracle *up to ties*: same multiset, and position by
position the two elements compare equal under the order.

Public API (stable):
    oracle_sort(xs: Sequence[T], order: Order) -> list[T]
    equals_oracle(xs: Sequence[T], out: Sequence[T], order: Order) -> bool

Conventions:
- The oracle never mutates its input and always returns a **new** list.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import List, Sequence, TypeVar

from sortmachine.order import Order
from sortmachine.validate.properties import is_permutation_eq

T = TypeVar("T")

ORACLE_NAME: str = "python_sorted_timsort_cmp_to_key"

__all__ = ["ORACLE_NAME", "oracle_sort", "equals_oracle"]


def oracle_sort(xs: Sequence[T], order: Order) -> List[T]:
    """
    Return the ground-truth sorted output for ``xs`` under ``order``.

    Parameters
    ----------
    xs : sequence
        Input elements. The oracle does not mutate ``xs``.
    order : Order
        Comparator in ``cmp`` convention.

    Returns
    -------
    list
        A new list with the same elements as ``xs``, in nondecreasing order,
        ties kept in input order.
    """
    return sorted(xs, key=cmp_to_key(order))


def equals_oracle(xs: Sequence[T], out: Sequence[T], order: Order) -> bool:
    """
    Check whether a machine's output matches the oracle up to ties.

    True iff ``out`` holds exactly the elements of ``xs`` (with multiplicity)
    and ``order(out[i], oracle[i]) == 0`` for every position ``i``.
    """
    expected = oracle_sort(xs, order)
    if len(out) != len(expected):
        return False
    if any(order(o, e) != 0 for o, e in zip(out, expected)):
        return False
    return is_permutation_eq(xs, out)
