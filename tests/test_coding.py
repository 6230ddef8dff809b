import math
from types import SimpleNamespace

import pandas as pd
import pytest

from weightbalance.data.coding import (
    WeightedItem,
    coerce_lock,
    coerce_sibling_set,
    coerce_weights,
    normalize_column_names,
    read_field,
    round_weight,
    write_field,
)


def test_round_weight_is_half_up():
    assert round_weight(0.125) == 0.13
    assert round_weight(2.675) == 2.68
    assert round_weight(-0.125) == -0.13
    assert round_weight(58.8235294117647) == 58.82
    assert round_weight(14.95, 1) == 15.0
    assert math.isnan(round_weight(float("nan")))


def test_coerce_weights_defaults_malformed_to_zero():
    out = coerce_weights([10, "12.5", None, float("nan"), "abc", float("inf"), 3.25])
    assert out.tolist() == [10.0, 12.5, 0.0, 0.0, 0.0, 0.0, 3.25]
    assert coerce_weights([]).tolist() == []


def test_coerce_lock():
    assert coerce_lock(True) is True
    assert coerce_lock(None) is False
    assert coerce_lock(float("nan")) is False
    assert coerce_lock("TRUE") is True
    assert coerce_lock("false") is False
    assert coerce_lock(0) is False
    assert coerce_lock(1) is True


def test_coerce_sibling_set_reads_every_item_shape():
    items = [
        {"id": "a", "weight": 40, "isWeightLocked": True},
        {"id": "b", "is_weight_locked": "yes"},
        WeightedItem("c", 25.5),
        SimpleNamespace(id="d", weight=None, isWeightLocked=False),
    ]
    frame = coerce_sibling_set(items)
    assert frame["id"].tolist() == ["a", "b", "c", "d"]
    assert frame["weight"].tolist() == [40.0, 0.0, 25.5, 0.0]
    assert frame["locked"].tolist() == [True, True, False, False]


def test_read_and_write_field_keep_the_callers_spelling():
    item = {"id": "a", "is_weight_locked": False, "note": "x"}
    assert read_field(item, "isWeightLocked") is False
    assert write_field(item, "isWeightLocked", True) == {"id": "a", "is_weight_locked": True, "note": "x"}
    assert write_field({"id": "a"}, "weight", 5.0) == {"id": "a", "weight": 5.0}
    assert item == {"id": "a", "is_weight_locked": False, "note": "x"}

    wi = WeightedItem("a", 1.0)
    assert write_field(wi, "isWeightLocked", True) == WeightedItem("a", 1.0, is_weight_locked=True)

    ns = SimpleNamespace(id="a", weight=1.0)
    out = write_field(ns, "weight", 2.0)
    assert out.weight == 2.0 and ns.weight == 1.0


def test_normalize_column_names_rejects_collisions():
    df = pd.DataFrame(columns=["ID", "Weight", "Is Weight Locked"])
    assert normalize_column_names(df) == {"id": "ID", "weight": "Weight", "isweightlocked": "Is Weight Locked"}

    with pytest.raises(ValueError, match="collisions"):
        normalize_column_names(pd.DataFrame(columns=["isWeightLocked", "is_weight_locked"]))
