"""
Heap-backed sorting machine (the reference realisation).

Storage is a plain list. While inserting, ``add`` just appends (amortised
O(1), any order). The transition turns the list into a binary min-heap under
the machine's order with a bottom-up heapify (sift-down from the last internal
node to the root, O(n)). ``remove_first`` is heap-extract-min: swap the root
with the last element, sift down within the shorter prefix, then pop the old
root off the end (O(log n)). The minimum stays in the list until that final
pop.

Totals: O(n) to insert, O(n log n) to drain.

Ties are *not* extracted in insertion order. Elements equal under the order
may come out in any relative order; only the full sequence is guaranteed to
be nondecreasing.

Heap layout (0-based):
    parent(i) = (i - 1) // 2
    left(i)   = 2 * i + 1
    right(i)  = 2 * i + 2

Public API (stable):
    HeapSortingMachine(order)
    new_machine(order) -> HeapSortingMachine
"""

from __future__ import annotations

from typing import List, TypeVar

from sortmachine.machines.base import SortingMachine
from sortmachine.order import Order

T = TypeVar("T")

__all__ = ["HeapSortingMachine", "new_machine"]


class HeapSortingMachine(SortingMachine[T]):
    """Sorting machine that heapifies at the transition and extracts minima."""

    def _prepare_extraction(self) -> None:
        entries = self._entries
        n = len(entries)
        # Leaves (indices >= n // 2) are already one-element heaps.
        for i in range(n // 2 - 1, -1, -1):
            self._sift_down(entries, i, n)

    def _take_first(self) -> T:
        entries = self._entries
        last = len(entries) - 1
        entries[0], entries[last] = entries[last], entries[0]
        # Sift within entries[:last]; the minimum stays stored until the pop,
        # so a raising order leaves every element in place.
        self._sift_down(entries, 0, last)
        return entries.pop()

    def _sift_down(self, entries: List[T], i: int, n: int) -> None:
        # `i` strictly increases each round, so this terminates even if the
        # order is not a total preorder.
        order = self._order
        while True:
            left = 2 * i + 1
            if left >= n:
                return
            smallest = left
            right = left + 1
            if right < n and order(entries[right], entries[left]) < 0:
                smallest = right
            if order(entries[smallest], entries[i]) >= 0:
                return
            entries[i], entries[smallest] = entries[smallest], entries[i]
            i = smallest


def new_machine(order: Order) -> HeapSortingMachine:
    """Entry point used by the benchmark runner."""
    return HeapSortingMachine(order)
