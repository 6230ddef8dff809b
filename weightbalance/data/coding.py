from __future__ import annotations

import copy
import dataclasses
import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from weightbalance.config import ID_FIELD, LOCK_FIELD, TRUE_STRINGS, WEIGHT_DECIMALS, WEIGHT_FIELD


_NORMALIZE_RE = re.compile(r"[^0-9a-zA-Z]+")
_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def normalize_name(name) -> str:
    return _NORMALIZE_RE.sub("", str(name)).lower()


def _snake_case(name: str) -> str:
    return _CAMEL_RE.sub("_", name).lower()


@dataclass(frozen=True)
class WeightedItem:
    id: Hashable
    weight: Optional[float] = None
    is_weight_locked: bool = False


def normalize_column_names(df: pd.DataFrame) -> Dict[str, str]:
    """Return a normalized-name -> exact-name mapping for df columns.

    Normalization drops case and separators, so "isWeightLocked",
    "is_weight_locked" and "Is Weight Locked" all map to "isweightlocked".
    Two columns collapsing onto the same name is an error.
    """

    mapping: Dict[str, str] = {}
    collisions: Dict[str, list[str]] = {}

    for col in df.columns.astype(str).tolist():
        norm = normalize_name(col)
        if norm in mapping and mapping[norm] != col:
            collisions.setdefault(norm, sorted({mapping[norm], col}))
        mapping[norm] = col

    if collisions:
        raise ValueError(f"Normalized column name collisions: {collisions}")

    return mapping


def _find_key(record: Mapping, field: str):
    if field in record:
        return field
    target = normalize_name(field)
    for key in record:
        if normalize_name(key) == target:
            return key
    return None


def read_field(item: Any, field: str) -> Any:
    """Read `field` from a mapping or an attribute object; absent -> None."""

    if isinstance(item, Mapping):
        key = _find_key(item, field)
        return None if key is None else item[key]
    for name in (field, _snake_case(field)):
        if hasattr(item, name):
            return getattr(item, name)
    return None


def write_field(item: Any, field: str, value: Any) -> Any:
    """Return a copy of `item` with `field` set to `value`.

    Mappings come back as plain dicts that keep every other key. Dataclasses
    go through dataclasses.replace; anything else is shallow-copied.
    """

    if isinstance(item, Mapping):
        out = dict(item)
        key = _find_key(item, field)
        out[field if key is None else key] = value
        return out

    present = [n for n in (field, _snake_case(field)) if hasattr(item, n)]
    name = present[0] if present else field
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        if name in {f.name for f in dataclasses.fields(item)}:
            return dataclasses.replace(item, **{name: value})
    out = copy.copy(item)
    setattr(out, name, value)
    return out


def coerce_weights(values: Iterable[Any]) -> pd.Series:
    """Missing, NaN, infinite and non-numeric weights become 0.0."""

    raw = pd.Series(list(values), dtype=object)
    numeric = pd.to_numeric(raw, errors="coerce").astype(float)
    return numeric.replace([np.inf, -np.inf], np.nan).fillna(0.0)


def coerce_weight(value: Any) -> float:
    return float(coerce_weights([value]).iloc[0])


def coerce_lock(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    try:
        if pd.isna(value):
            return False
    except (TypeError, ValueError):
        pass
    return bool(value)


def coerce_sibling_set(items: Sequence[Any]) -> pd.DataFrame:
    """Coerced snapshot of a sibling set: one row per item, in input order.

    Columns: id (as given), weight (float, missing -> 0.0), locked (bool).
    """

    return pd.DataFrame(
        {
            "id": pd.Series([read_field(item, ID_FIELD) for item in items], dtype=object),
            "weight": coerce_weights(read_field(item, WEIGHT_FIELD) for item in items),
            "locked": pd.Series([coerce_lock(read_field(item, LOCK_FIELD)) for item in items], dtype=bool),
        }
    )


def round_weight(value: float, decimals: int = WEIGHT_DECIMALS) -> float:
    """Round half-up (away from zero on a tie) to `decimals` places."""

    fv = float(value)
    if not math.isfinite(fv):
        return fv
    quantum = Decimal(1).scaleb(-decimals)
    try:
        return float(Decimal(str(fv)).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return fv


def with_weights(items: Sequence[Any], weights: Iterable[float]) -> List[Any]:
    return [write_field(item, WEIGHT_FIELD, float(w)) for item, w in zip(items, weights)]


def sibling_set_to_frame(items: Sequence[Any]) -> pd.DataFrame:
    """Tabular view of a sibling set with the stored field names."""

    frame = coerce_sibling_set(items)
    return frame.rename(columns={"id": ID_FIELD, "weight": WEIGHT_FIELD, "locked": LOCK_FIELD})
