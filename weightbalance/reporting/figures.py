from pathlib import Path
from typing import Any, Sequence

from weightbalance.data.coding import coerce_sibling_set


def save_figure(fig, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=300, bbox_inches="tight")


def plot_weight_distribution(items: Sequence[Any], title: str = "Weight Distribution"):
    """Horizontal bar per item; locked items hatched. Returns the Figure."""

    import matplotlib.pyplot as plt

    frame = coerce_sibling_set(list(items))
    total = float(frame["weight"].sum())
    labels = [str(v) for v in frame["id"]]

    fig, ax = plt.subplots(figsize=(8, max(2.0, 0.5 * len(frame) + 1.0)))
    bars = ax.barh(labels, frame["weight"], color="tab:blue")
    for bar, locked in zip(bars, frame["locked"]):
        if locked:
            bar.set_hatch("//")
            bar.set_facecolor("lightgray")
            bar.set_edgecolor("tab:gray")
    ax.axvline(0, color="black", linewidth=0.8)
    ax.invert_yaxis()
    ax.set_xlabel("Weight (%)")
    ax.set_title(f"{title} (total {total:.1f}%)")
    fig.tight_layout()
    return fig
