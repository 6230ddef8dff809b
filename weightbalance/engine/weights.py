"""Weight balancing for one sibling set of weighted sub-measures.

Every function takes a snapshot (a sequence of items), coerces it once with
coerce_sibling_set, and returns new values. Inputs are never mutated and
nothing is kept between calls.

Items may be WeightedItem instances, mappings with "id" / "weight" /
"isWeightLocked" keys, or plain objects exposing the same attributes. Returned
items keep the caller's type and any extra fields.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Iterable, List, Sequence, Tuple

import pandas as pd

from weightbalance.config import (
    ADJUSTMENT_TOLERANCE,
    BALANCE_TOLERANCE,
    MESSAGE_DECIMALS,
    RESIDUAL_EPSILON,
    TARGET_TOTAL,
)
from weightbalance.data.coding import coerce_sibling_set, round_weight, with_weights


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceReport:
    is_valid: bool
    message: str
    total: float

    def to_dict(self) -> Dict[str, Any]:
        return {"isValid": self.is_valid, "message": self.message, "total": self.total}


@dataclass(frozen=True)
class WeightAdjustment:
    item_id: Hashable
    current_weight: float
    suggested_weight: float
    adjustment: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "itemId": self.item_id,
            "currentWeight": self.current_weight,
            "suggestedWeight": self.suggested_weight,
            "adjustment": self.adjustment,
        }


def _snapshot(items: Iterable[Any]) -> Tuple[List[Any], pd.DataFrame]:
    items = list(items)
    return items, coerce_sibling_set(items)


def _within(total: float, tolerance: float) -> bool:
    return abs(total - TARGET_TOTAL) <= tolerance


def _largest_unlocked(weights: pd.Series, locked: pd.Series):
    # idxmax returns the first label among equal maxima.
    return weights.loc[~locked].idxmax()


def total_weight(items: Iterable[Any]) -> float:
    _, frame = _snapshot(items)
    return float(frame["weight"].sum())


def is_balanced(items: Iterable[Any], tolerance: float = BALANCE_TOLERANCE) -> bool:
    """True iff the weights add up to 100 within `tolerance`.

    An empty set totals 0 and is never balanced.
    """

    return _within(total_weight(items), tolerance)


def describe_balance(items: Iterable[Any], tolerance: float = BALANCE_TOLERANCE) -> BalanceReport:
    total = total_weight(items)
    if _within(total, tolerance):
        return BalanceReport(is_valid=True, message="Weights are balanced (100%)", total=total)

    diff = total - TARGET_TOTAL
    amount = round_weight(abs(diff), MESSAGE_DECIMALS)
    if diff > 0:
        message = f"Weights exceed 100% by {amount:.{MESSAGE_DECIMALS}f}%"
    else:
        message = f"Weights are under 100% by {amount:.{MESSAGE_DECIMALS}f}%"
    return BalanceReport(is_valid=False, message=message, total=total)


def auto_balance(items: Iterable[Any]) -> List[Any]:
    """Give every unlocked item an equal share of what the locked items leave.

    A single item always gets 100, locked or not. With nothing unlocked the
    set comes back unchanged. If locked weights already exceed 100 the shares
    are negative; they are not clamped.
    """

    items, frame = _snapshot(items)
    if frame.empty:
        return items
    if len(frame) == 1:
        return with_weights(items, [TARGET_TOTAL])

    locked = frame["locked"]
    weights = frame["weight"].copy()
    n_unlocked = int((~locked).sum())
    if n_unlocked == 0:
        logger.debug("auto_balance: all %d items locked; nothing to redistribute", len(frame))
        return with_weights(items, weights)

    remaining = TARGET_TOTAL - float(weights.loc[locked].sum())
    if remaining < 0:
        logger.debug("auto_balance: locked weights exceed %s by %s", TARGET_TOTAL, -remaining)
    weights.loc[~locked] = round_weight(remaining / n_unlocked)
    return with_weights(items, weights)


def normalize(items: Iterable[Any], tolerance: float = BALANCE_TOLERANCE) -> List[Any]:
    """Rescale unlocked weights proportionally so the set sums to exactly 100.

    Relative proportions among unlocked items are kept; locked items pass
    through. Scaled weights are rounded to two decimals and whatever the
    rounding leaves over is added, unrounded, to the largest unlocked item
    (first in input order on a tie). The result therefore sums to 100 up to
    float error, and normalizing it again is a no-op.

    Already-balanced sets (within `tolerance`) are returned unchanged, as are
    sets with no unlocked item. If every unlocked weight is zero no scaling
    is possible and the whole gap lands on the first unlocked item.
    """

    items, frame = _snapshot(items)
    if frame.empty:
        return items
    if len(frame) == 1:
        return with_weights(items, [TARGET_TOTAL])

    weights = frame["weight"].copy()
    if _within(float(weights.sum()), tolerance):
        return with_weights(items, weights)

    locked = frame["locked"]
    if not (~locked).any():
        logger.debug("normalize: all %d items locked; leaving total at %s", len(frame), float(weights.sum()))
        return with_weights(items, weights)

    locked_total = float(weights.loc[locked].sum())
    unlocked_total = float(weights.loc[~locked].sum())
    target_unlocked_total = TARGET_TOTAL - locked_total
    if unlocked_total > 0:
        scale = target_unlocked_total / unlocked_total
    else:
        logger.debug("normalize: unlocked weights total %s; skipping proportional scaling", unlocked_total)
        scale = 1.0

    weights.loc[~locked] = [round_weight(w * scale) for w in weights.loc[~locked]]

    residual = TARGET_TOTAL - float(weights.sum())
    if abs(residual) > RESIDUAL_EPSILON:
        sink = _largest_unlocked(weights, locked)
        logger.debug("normalize: assigning residual %.12g to item %r", residual, frame.at[sink, "id"])
        weights.loc[sink] = weights.loc[sink] + residual

    return with_weights(items, weights)


def suggested_adjustments(
    items: Iterable[Any],
    tolerance: float = BALANCE_TOLERANCE,
    min_adjustment: float = ADJUSTMENT_TOLERANCE,
) -> List[WeightAdjustment]:
    """Preview of what normalize() would change, one entry per moved item.

    Items whose weight would move by `min_adjustment` or less are left out.
    """

    items, frame = _snapshot(items)
    suggested = coerce_sibling_set(normalize(items, tolerance=tolerance))

    out: List[WeightAdjustment] = []
    for (item_id, current), new in zip(frame[["id", "weight"]].itertuples(index=False), suggested["weight"]):
        adjustment = float(new) - float(current)
        if abs(adjustment) > min_adjustment:
            out.append(
                WeightAdjustment(
                    item_id=item_id,
                    current_weight=float(current),
                    suggested_weight=float(new),
                    adjustment=adjustment,
                )
            )
    return out


def adjustments_frame(adjustments: Sequence[WeightAdjustment]) -> pd.DataFrame:
    columns = ["itemId", "currentWeight", "suggestedWeight", "adjustment"]
    return pd.DataFrame([a.to_dict() for a in adjustments], columns=columns)
