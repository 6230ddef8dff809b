from __future__ import annotations

from typing import Any, Hashable, Iterable, List

from weightbalance.config import LOCK_FIELD
from weightbalance.data.coding import coerce_sibling_set, coerce_weight, with_weights, write_field


def _matches(ids: Iterable[Any], item_id: Hashable) -> List[bool]:
    # Plain equality so that a None id can be targeted too.
    return [current == item_id for current in ids]


def set_weight(items: Iterable[Any], item_id: Hashable, weight: Any) -> List[Any]:
    """Apply a manual edit: unlocked items with `item_id` take `weight` (coerced, missing -> 0).

    A locked item keeps its weight; unlock it first with toggle_lock(). The
    result is not rebalanced; follow with normalize() or auto_balance() as needed.
    """

    items = list(items)
    frame = coerce_sibling_set(items)
    weights = frame["weight"].copy()
    target = [hit and not locked for hit, locked in zip(_matches(frame["id"], item_id), frame["locked"])]
    weights.loc[target] = coerce_weight(weight)
    return with_weights(items, weights)


def toggle_lock(items: Iterable[Any], item_id: Hashable) -> List[Any]:
    """Flip the lock flag of items with `item_id`; weights come back coerced."""

    items = list(items)
    frame = coerce_sibling_set(items)
    out = with_weights(items, frame["weight"])
    return [
        write_field(item, LOCK_FIELD, not locked) if hit else item
        for item, hit, locked in zip(out, _matches(frame["id"], item_id), frame["locked"])
    ]
