import json
from pathlib import Path

import pandas as pd
import pytest

from weightbalance.data.ingest import load_sibling_set
from weightbalance.engine.weights import normalize, total_weight


def test_load_json_list_and_wrapped(tmp_path: Path):
    rows = [{"id": "a", "weight": 50}, {"id": "b", "weight": 30, "isWeightLocked": True}]
    plain = tmp_path / "plain.json"
    plain.write_text(json.dumps(rows), encoding="utf-8")
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps({"objective": "o1", "items": rows}), encoding="utf-8")

    assert load_sibling_set(plain) == rows
    assert load_sibling_set(wrapped, nrows=1) == rows[:1]


def test_load_json_rejects_non_objects(tmp_path: Path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps([{"id": "a"}, 5]), encoding="utf-8")
    with pytest.raises(ValueError, match="positions"):
        load_sibling_set(path)


def test_load_csv_matches_column_spelling(tmp_path: Path):
    path = tmp_path / "krs.csv"
    pd.DataFrame(
        {
            "ID": ["a", "b", "c"],
            "Weight": [50, None, 5],
            "Is Weight Locked": [False, True, False],
            "Title": ["Revenue", "NPS", "Churn"],
        }
    ).to_csv(path, index=False)

    items = load_sibling_set(path)
    assert [item["id"] for item in items] == ["a", "b", "c"]
    assert items[1]["weight"] is None
    assert items[1]["isWeightLocked"] == True  # noqa: E712
    assert items[0]["Title"] == "Revenue"
    assert total_weight(normalize(items)) == pytest.approx(100, abs=1e-9)


def test_load_csv_requires_id(tmp_path: Path):
    path = tmp_path / "noid.csv"
    pd.DataFrame({"weight": [50, 50]}).to_csv(path, index=False)
    with pytest.raises(ValueError, match="Missing required columns"):
        load_sibling_set(path)


def test_unsupported_suffix(tmp_path: Path):
    with pytest.raises(ValueError, match="Unsupported"):
        load_sibling_set(tmp_path / "krs.txt")
