"""
Sort orders for ranking guesses by their stats.

Each order is registered by name with @register and lists best guesses first:

  alpha    : word, A..Z
  expected : fewest expected words left (ties: smaller worst case)
  max      : smallest worst case (ties: fewer expected words left)
  entropy  : most information first
  solve    : highest chance that one word remains

An "r-" prefix reverses any order ("r-entropy" = least informative first).
"""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence, Tuple

from .stats import Stats

Row = Tuple[str, Stats]
SortKey = Callable[[Row], tuple]

# ---- Global sort-order registry ----
SORT_ORDERS: Dict[str, SortKey] = {}
ALIASES = {"ave": "expected", "info": "entropy", "word": "alpha"}


def register(name: str) -> Callable[[SortKey], SortKey]:
    """
    Decorator: @register("name") on a key function adds it to SORT_ORDERS.
    """
    def deco(fn: SortKey) -> SortKey:
        if not name:
            raise ValueError(f"{fn.__name__} must be registered under a non-empty name")
        if name in SORT_ORDERS:
            raise ValueError(f"Duplicate sort order: {name}")
        SORT_ORDERS[name] = fn
        return fn
    return deco


@register("alpha")
def _by_alpha(row: Row) -> tuple:
    return (row[0],)


@register("expected")
def _by_expected(row: Row) -> tuple:
    w, s = row
    return (s.expected_bucket, s.max_bucket, w)


@register("max")
def _by_max(row: Row) -> tuple:
    w, s = row
    return (s.max_bucket, s.expected_bucket, w)


@register("entropy")
def _by_entropy(row: Row) -> tuple:
    w, s = row
    return (-s.entropy_bits, s.expected_bucket, w)


@register("solve")
def _by_solve(row: Row) -> tuple:
    w, s = row
    return (-s.solve_probability, s.expected_bucket, w)


def resolve_order(order: str) -> Tuple[str, bool]:
    """
    Normalize an order name -> (registered name, reversed?).

    Raises ValueError for unknown names (listing the valid ones).
    """
    name = order.strip().lower()
    reverse = name.startswith("r-")
    if reverse:
        name = name[2:]
    name = ALIASES.get(name, name)
    if name not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order: {order}. Available: {get_order_ids()}")
    return name, reverse


def sort_rows(rows: Sequence[Row], order: str = "entropy", reverse: bool = False) -> List[Row]:
    name, flipped = resolve_order(order)
    return sorted(rows, key=SORT_ORDERS[name], reverse=reverse != flipped)


def get_order_ids() -> List[str]:
    """All registered order names (sorted for stable CLI help)."""
    return sorted(SORT_ORDERS.keys())
