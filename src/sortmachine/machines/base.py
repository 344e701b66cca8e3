"""
Shared two-phase protocol for sorting machines.

A sorting machine collects elements in *insertion mode*, commits to an order
exactly once via ``transition_to_extraction()``, then hands elements back one
at a time, smallest first, via ``remove_first()``:

    [insertion]  --add(x)-->                     [insertion]
    [insertion]  --transition_to_extraction()--> [extraction]
    [extraction] --remove_first()-->             [extraction]   (size - 1)

Extraction mode is terminal: no operation leads back to insertion mode.

This module owns the phase bookkeeping and precondition checks; concrete
machines only supply the reorganisation done at the transition
(``_prepare_extraction``) and the minimum-extraction step (``_take_first``).
Both operate on ``self._entries``, a plain list that always holds exactly the
current contents, so ``size()`` is simply its length.

Machines are single-threaded, synchronous, in-memory values. Share one across
threads only behind an external lock.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Generic, Iterator, List, TypeVar

from sortmachine.errors import EmptyMachineError, WrongModeError
from sortmachine.order import Order
from sortmachine.validate.properties import is_permutation_eq

T = TypeVar("T")

__all__ = ["SortingMachine"]

logger = logging.getLogger(__name__)


class SortingMachine(ABC, Generic[T]):
    """Abstract base for array-backed sorting machines."""

    def __init__(self, order: Order) -> None:
        self._order: Order = order
        self._insertion_mode: bool = True
        self._entries: List[T] = []

    # ------------------------- algorithm hooks ------------------------- #

    @abstractmethod
    def _prepare_extraction(self) -> None:
        """Reorganise ``self._entries`` so ``_take_first`` can run repeatedly."""

    @abstractmethod
    def _take_first(self) -> T:
        """Remove and return a minimal element; ``self._entries`` is non-empty."""

    # ------------------------- kernel ------------------------- #

    def add(self, x: T) -> None:
        """Insert ``x``. Insertion mode only."""
        if not self._insertion_mode:
            raise WrongModeError("add", "machine is already in extraction mode")
        self._entries.append(x)

    def transition_to_extraction(self) -> None:
        """Commit to the order. Legal exactly once, from insertion mode."""
        if not self._insertion_mode:
            raise WrongModeError(
                "transition_to_extraction", "machine is already in extraction mode"
            )
        self._prepare_extraction()
        self._insertion_mode = False
        logger.debug(
            "%s: switched to extraction mode with %d entries",
            type(self).__name__,
            len(self._entries),
        )

    def remove_first(self) -> T:
        """Remove and return an element minimal among those still held."""
        if self._insertion_mode:
            raise WrongModeError("remove_first", "machine is still in insertion mode")
        if not self._entries:
            raise EmptyMachineError("remove_first", "machine is empty")
        return self._take_first()

    def size(self) -> int:
        return len(self._entries)

    def is_in_insertion_mode(self) -> bool:
        return self._insertion_mode

    def order(self) -> Order:
        return self._order

    # ------------------------- standard operations ------------------------- #

    def new_instance(self) -> "SortingMachine[T]":
        """Return a fresh, empty machine of the same class bound to the same order."""
        return type(self)(self._order)

    def drain(self) -> Iterator[T]:
        """Yield ``remove_first()`` until the machine is empty. Extraction mode only."""
        if self._insertion_mode:
            raise WrongModeError("drain", "machine is still in insertion mode")
        return self._drain()

    def _drain(self) -> Iterator[T]:
        while self._entries:
            yield self.remove_first()

    # ------------------------- dunder ------------------------- #

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[T]:
        # Snapshot in storage order: no ordering guarantee, nothing removed.
        return iter(list(self._entries))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SortingMachine):
            return NotImplemented
        return (
            self._insertion_mode == other._insertion_mode
            and self._order is other._order
            and is_permutation_eq(self._entries, other._entries)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        mode = "insertion" if self._insertion_mode else "extraction"
        order_name = getattr(self._order, "__name__", repr(self._order))
        return (
            f"{type(self).__name__}(order={order_name}, mode={mode}, "
            f"entries={self._entries!r})"
        )

