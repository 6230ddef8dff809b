from __future__ import annotations

import argparse
import os
import platform
import sys
import tempfile
from datetime import datetime, timezone
from importlib import metadata
from pathlib import Path
from typing import Dict, Iterable, Optional

_mpl_cache_dir = Path(tempfile.gettempdir()) / "matplotlib"
_mpl_cache_dir.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("MPLCONFIGDIR", str(_mpl_cache_dir))

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from weightbalance.config import BALANCE_TOLERANCE, OPERATIONS, OUTPUTS_DIR  # noqa: E402
from weightbalance.data.coding import sibling_set_to_frame  # noqa: E402
from weightbalance.data.ingest import load_sibling_set  # noqa: E402
from weightbalance.engine.weights import (  # noqa: E402
    adjustments_frame,
    auto_balance,
    describe_balance,
    normalize,
    suggested_adjustments,
)
from weightbalance.reporting.figures import plot_weight_distribution, save_figure  # noqa: E402
from weightbalance.utils.logging import configure_logging, write_json  # noqa: E402


def package_versions(packages: Iterable[str]) -> Dict[str, Optional[str]]:
    out: Dict[str, Optional[str]] = {}
    for pkg in packages:
        try:
            out[pkg] = metadata.version(pkg)
        except metadata.PackageNotFoundError:
            out[pkg] = None
    return out


def main() -> None:
    parser = argparse.ArgumentParser(description="Balance the weights of one sibling set of sub-measures.")
    parser.add_argument("--input", type=Path, required=True, help="Sibling set file (.json, .csv, .xlsx).")
    parser.add_argument("--operation", choices=OPERATIONS, default="normalize")
    parser.add_argument(
        "--tolerance",
        type=float,
        default=BALANCE_TOLERANCE,
        help=f"Balance tolerance in percentage points (default: {BALANCE_TOLERANCE}).",
    )
    parser.add_argument("--nrows", type=int, default=None, help="Optional: read only the first N items.")
    parser.add_argument("--outdir", type=Path, default=OUTPUTS_DIR, help="Output directory (default: outputs/).")
    parser.add_argument("--no-figure", action="store_true", help="Skip the weight distribution figure.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING).")
    args = parser.parse_args()

    configure_logging(args.log_level)

    if not args.input.exists():
        raise SystemExit(f"Input file not found: {args.input}")
    if args.tolerance < 0:
        raise SystemExit("--tolerance must be non-negative.")
    if args.nrows is not None and args.nrows <= 0:
        raise SystemExit("--nrows must be a positive integer.")

    try:
        items = load_sibling_set(args.input, nrows=args.nrows)
    except ValueError as e:
        raise SystemExit(f"Could not read sibling set from {args.input}: {e}")
    if not items:
        print(f"Warning: {args.input} holds no items; an empty set is never balanced.")

    outdir = args.outdir
    tables_dir = outdir / "tables"
    figures_dir = outdir / "figures"
    logs_dir = outdir / "logs"
    tables_dir.mkdir(parents=True, exist_ok=True)

    before = describe_balance(items, tolerance=args.tolerance)

    if args.operation == "auto-balance":
        result = auto_balance(items)
    elif args.operation in ("normalize", "suggest"):
        result = normalize(items, tolerance=args.tolerance)
    else:
        result = items

    after = describe_balance(result, tolerance=args.tolerance)

    slug = args.operation.replace("-", "_")
    weights_csv = tables_dir / f"weights_{slug}.csv"
    sibling_set_to_frame(result).to_csv(weights_csv, index=False)
    written = [weights_csv]

    n_adjustments = None
    if args.operation == "suggest":
        adjustments = suggested_adjustments(items, tolerance=args.tolerance)
        n_adjustments = len(adjustments)
        adjustments_csv = tables_dir / "suggested_adjustments.csv"
        adjustments_frame(adjustments).to_csv(adjustments_csv, index=False)
        written.append(adjustments_csv)

    if not args.no_figure:
        figure_path = figures_dir / "weight_distribution.png"
        fig = plot_weight_distribution(result, title=f"Weights after {args.operation}")
        save_figure(fig, figure_path)
        plt.close(fig)
        written.append(figure_path)

    run_meta = {
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "argv": sys.argv,
        "python_version": sys.version,
        "platform": platform.platform(),
        "packages": package_versions(["pandas", "numpy", "matplotlib", "openpyxl"]),
        "input": str(args.input),
        "operation": args.operation,
        "tolerance": args.tolerance,
        "n_items": len(items),
        "balance_before": before.to_dict(),
        "balance_after": after.to_dict(),
        "n_adjustments": n_adjustments,
        "outputs": [str(p) for p in written],
    }
    meta_path = logs_dir / "balance_run_metadata.json"
    write_json(meta_path, run_meta)
    written.append(meta_path)

    print(before.message if args.operation == "describe" else f"{before.message} -> {after.message}")
    for path in written:
        print(f"Wrote {path}")


if __name__ == "__main__":
    main()
