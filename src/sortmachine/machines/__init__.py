"""
Sorting machine realisations.

Re-exports:
    SortingMachine        # abstract two-phase protocol
    HeapSortingMachine    # binary heap, ties in unspecified order
    MergeSortingMachine   # stable merge sort, ties in insertion order
    MACHINE_NAMES         # module names resolvable by the benchmark runner
"""

from .base import SortingMachine
from .heap import HeapSortingMachine
from .merge import MergeSortingMachine

MACHINE_NAMES = ("heap", "merge")

__all__ = [
    "SortingMachine",
    "HeapSortingMachine",
    "MergeSortingMachine",
    "MACHINE_NAMES",
]
