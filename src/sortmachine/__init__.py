"""
sortmachine: collect elements now, get them back in order later.

A sorting machine accepts elements under a caller-supplied order, commits to
that order once, then yields elements smallest-first:

    from sortmachine import HeapSortingMachine, case_insensitive_order

    m = HeapSortingMachine(case_insensitive_order)
    for word in ["b", "A", "a"]:
        m.add(word)
    m.transition_to_extraction()
    while m.size() > 0:
        print(m.remove_first())   # "A"/"a" (either order), then "b"
"""

from .errors import EmptyMachineError, PreconditionViolation, WrongModeError
from .machines import HeapSortingMachine, MergeSortingMachine, SortingMachine
from .order import (
    Order,
    case_insensitive_order,
    get_order,
    natural_order,
    order_from_key,
    reverse_order,
)

__version__ = "0.1.0"

__all__ = [
    "SortingMachine",
    "HeapSortingMachine",
    "MergeSortingMachine",
    "PreconditionViolation",
    "WrongModeError",
    "EmptyMachineError",
    "Order",
    "natural_order",
    "reverse_order",
    "case_insensitive_order",
    "order_from_key",
    "get_order",
]
