"""
Orders (comparators) understood by sorting machines.

An order is any callable ``compare(a, b) -> int`` following the classic
``cmp`` convention:
    negative  -> a comes before b
    zero      -> a and b are equal under the order (ties are allowed)
    positive  -> a comes after b

The relation must be a total preorder (reflexive, transitive, total). The
machines never check this; they only call the order.

Public API (stable):
    Order                                  # type alias
    natural_order(a, b) -> int
    reverse_order(a, b) -> int
    case_insensitive_order(a, b) -> int
    order_from_key(key) -> Order
    get_order(name) -> Order
    sign(order, a, b) -> int               # -1 / 0 / 1
    ORDERS                                 # name -> order, for YAML configs
"""

from __future__ import annotations

from typing import Any, Callable, Dict

Order = Callable[[Any, Any], int]

__all__ = [
    "Order",
    "ORDERS",
    "natural_order",
    "reverse_order",
    "case_insensitive_order",
    "order_from_key",
    "get_order",
    "sign",
]


def natural_order(a: Any, b: Any) -> int:
    """Compare with the values' own ``<`` / ``>``."""
    return (a > b) - (a < b)


def reverse_order(a: Any, b: Any) -> int:
    return natural_order(b, a)


def case_insensitive_order(a: str, b: str) -> int:
    """
    Lexicographic order ignoring case, so "a" and "A" tie.

    Uses ``str.casefold`` rather than ``lower`` so that e.g. "ß" and "ss" tie too.
    """
    return natural_order(a.casefold(), b.casefold())


def order_from_key(key: Callable[[Any], Any]) -> Order:
    """
    Build an order that compares ``key(a)`` with ``key(b)``.

    Example:
        by_score = order_from_key(lambda rec: rec["score"])
    """

    def _compare(a: Any, b: Any) -> int:
        return natural_order(key(a), key(b))

    _compare.__name__ = f"by_{getattr(key, '__name__', 'key')}"
    return _compare


ORDERS: Dict[str, Order] = {
    "natural": natural_order,
    "reverse": reverse_order,
    "case_insensitive": case_insensitive_order,
}


def get_order(name: str) -> Order:
    """Resolve an order by its registry name (used by experiment configs)."""
    try:
        return ORDERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown order: {name!r}. Supported: {sorted(ORDERS)}"
        ) from None


def sign(order: Order, a: Any, b: Any) -> int:
    """Normalise ``order(a, b)`` to -1, 0 or 1."""
    c = order(a, b)
    return (c > 0) - (c < 0)
