"""
Merge-sort-backed sorting machine (the stable alternative).

Insertion appends to a list, exactly like the heap machine. At the transition
the list is sorted with a bottom-up merge sort under the machine's order,
which keeps elements that tie in insertion order. The sorted run is then
stored reversed so ``remove_first`` is an O(1) ``list.pop()`` from the end.

Totals: O(n) to insert, O(n log n) at the transition, O(n) to drain.

Unlike the heap machine, ties come out in the order they were added. Callers
must not rely on that unless they chose this machine on purpose.

Public API (stable):
    MergeSortingMachine(order)
    new_machine(order) -> MergeSortingMachine
    merge_sort(xs, order) -> list
"""

from __future__ import annotations

from typing import List, Sequence, TypeVar

from sortmachine.machines.base import SortingMachine
from sortmachine.order import Order

T = TypeVar("T")

__all__ = ["MergeSortingMachine", "merge_sort", "new_machine"]


class MergeSortingMachine(SortingMachine[T]):
    """Sorting machine that merge-sorts at the transition."""

    def _prepare_extraction(self) -> None:
        ordered = merge_sort(self._entries, self._order)
        ordered.reverse()
        self._entries = ordered

    def _take_first(self) -> T:
        return self._entries.pop()


def merge_sort(xs: Sequence[T], order: Order) -> List[T]:
    """
    Return a new list with the elements of ``xs`` in nondecreasing order.

    Bottom-up: merge runs of width 1, 2, 4, ... between two buffers. On a tie
    the left run wins, which makes the sort stable. ``xs`` is not mutated.
    """
    src: List[T] = list(xs)
    n = len(src)
    if n < 2:
        return src
    dst: List[T] = list(src)
    width = 1
    while width < n:
        for lo in range(0, n, 2 * width):
            mid = min(lo + width, n)
            hi = min(lo + 2 * width, n)
            _merge(src, dst, lo, mid, hi, order)
        src, dst = dst, src
        width *= 2
    return src


def _merge(src: List[T], dst: List[T], lo: int, mid: int, hi: int, order: Order) -> None:
    i, j, k = lo, mid, lo
    while i < mid and j < hi:
        if order(src[j], src[i]) < 0:
            dst[k] = src[j]
            j += 1
        else:
            dst[k] = src[i]
            i += 1
        k += 1
    while i < mid:
        dst[k] = src[i]
        i += 1
        k += 1
    while j < hi:
        dst[k] = src[j]
        j += 1
        k += 1


def new_machine(order: Order) -> MergeSortingMachine:
    """Entry point used by the benchmark runner."""
    return MergeSortingMachine(order)
