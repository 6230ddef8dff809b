from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from weightbalance.config import ID_FIELD, LOCK_FIELD, WEIGHT_FIELD
from weightbalance.data.coding import normalize_name, normalize_column_names
from .validate import assert_records, assert_required_columns


def _load_json_records(path: Path) -> List[Dict[str, Any]]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict) and "items" in payload:
        payload = payload["items"]
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of items (or an object with an 'items' list) in {path}")
    assert_records(payload)
    return [dict(r) for r in payload]


def _frame_to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    columns = normalize_column_names(df)
    id_col = columns.get(normalize_name(ID_FIELD))
    assert_required_columns(df, [id_col or ID_FIELD])

    rename = {id_col: ID_FIELD}
    for field in (WEIGHT_FIELD, LOCK_FIELD):
        col = columns.get(normalize_name(field))
        if col is not None:
            rename[col] = field

    # Blank cells stay None; the engine treats a missing weight as 0.
    out = df.rename(columns=rename).astype(object).where(df.notna().to_numpy(), None)
    return out.to_dict(orient="records")


def load_sibling_set(path: Path, nrows: Optional[int] = None) -> List[Dict[str, Any]]:
    """Load one sibling set from .json, .csv or .xlsx/.xls.

    Column/key names are matched without regard to case or separators, so a
    spreadsheet column "Is Weight Locked" is read as "isWeightLocked".
    """

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".json":
        records = _load_json_records(path)
        return records if nrows is None else records[:nrows]
    if suffix == ".csv":
        return _frame_to_records(pd.read_csv(path, nrows=nrows))
    if suffix in (".xlsx", ".xls"):
        return _frame_to_records(pd.read_excel(path, nrows=nrows))
    raise ValueError(f"Unsupported sibling set file type: {path.suffix!r} (expected .json, .csv, .xlsx)")
