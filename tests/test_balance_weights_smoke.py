import json
import subprocess
import sys
from pathlib import Path

import pandas as pd


def _write_input(path: Path) -> None:
    items = [
        {"id": "kr-revenue", "weight": 50, "title": "Grow ARR"},
        {"id": "kr-nps", "weight": 30, "isWeightLocked": True},
        {"id": "kr-churn", "weight": 5},
    ]
    path.write_text(json.dumps(items), encoding="utf-8")


def test_balance_weights_suggest_smoke(tmp_path: Path):
    repo_root = Path(__file__).resolve().parents[1]
    in_json = tmp_path / "sibling_set.json"
    _write_input(in_json)
    outdir = tmp_path / "out"

    cmd = [
        sys.executable,
        str(repo_root / "scripts" / "01_balance_weights.py"),
        "--input",
        str(in_json),
        "--operation",
        "suggest",
        "--outdir",
        str(outdir),
    ]
    subprocess.run(cmd, cwd=repo_root, check=True)

    weights = pd.read_csv(outdir / "tables" / "weights_suggest.csv")
    assert weights.columns.tolist() == ["id", "weight", "isWeightLocked"]
    assert abs(weights["weight"].sum() - 100) < 1e-6
    assert weights.loc[weights["id"] == "kr-nps", "weight"].item() == 30

    adjustments = pd.read_csv(outdir / "tables" / "suggested_adjustments.csv")
    assert adjustments["itemId"].tolist() == ["kr-revenue", "kr-churn"]
    assert abs(adjustments["adjustment"].sum() - 15) < 1e-6

    assert (outdir / "figures" / "weight_distribution.png").exists()

    meta = json.loads((outdir / "logs" / "balance_run_metadata.json").read_text(encoding="utf-8"))
    assert meta["operation"] == "suggest"
    assert meta["balance_before"]["isValid"] is False
    assert meta["balance_after"]["isValid"] is True
    assert meta["n_adjustments"] == 2


def test_balance_weights_missing_input_fails(tmp_path: Path):
    repo_root = Path(__file__).resolve().parents[1]
    cmd = [
        sys.executable,
        str(repo_root / "scripts" / "01_balance_weights.py"),
        "--input",
        str(tmp_path / "nope.json"),
        "--no-figure",
        "--outdir",
        str(tmp_path / "out"),
    ]
    result = subprocess.run(cmd, cwd=repo_root, capture_output=True, text=True)
    assert result.returncode != 0
    assert "Input file not found" in result.stderr
