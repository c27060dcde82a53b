"""Figures for sampled matrix multiplication experiments.

Reads the CSVs written by :mod:`sampled_matmul.sampling.experiments` and
produces:
1. Error vs sampling ratio, one panel per matrix family
2. Speedup vs matrix size per sampling ratio

Expected: error decays roughly as ~1/sqrt(s), and importance weighting beats
uniform sampling most clearly on the skewed-column family.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List

import matplotlib.pyplot as plt
import matplotlib.ticker as ticker
import pandas as pd

from sampled_matmul.common.logging_utils import get_logger

logger = get_logger(__name__)

plt.rcParams.update({
    'font.size': 11,
    'axes.titlesize': 13,
    'axes.labelsize': 12,
    'legend.fontsize': 9,
    'lines.linewidth': 2,
    'lines.markersize': 7,
    'errorbar.capsize': 3,
})

WEIGHTING_COLORS = {
    "uniform": "#2166ac",      # Blue
    "norm": "#b2182b",         # Red
    "paired_dot": "#1b7837",   # Green
    "naive_matmul": "#7f7f7f", # Gray (baseline)
}

WEIGHTING_MARKERS = {
    "uniform": "o",
    "norm": "s",
    "paired_dot": "D",
    "naive_matmul": "^",
}

WEIGHTING_LABELS = {
    "uniform": "Uniform Sampling",
    "norm": "Importance (norm product)",
    "paired_dot": "Importance (paired dot)",
    "naive_matmul": "Naive MatMul (Baseline)",
}


def _save_figure(fig: plt.Figure, path: Path) -> None:
    """Save figure with tight layout."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    logger.info(f"Saved: {path}")


def summarize_errors(df: pd.DataFrame) -> pd.DataFrame:
    """Mean and std of ``rel_error`` per (family, weighting, sampling_ratio)."""
    return (
        df.groupby(["family", "weighting", "sampling_ratio"])["rel_error"]
        .agg(["mean", "std"])
        .reset_index()
        .fillna({"std": 0.0})
    )


# ============================================================================
# Figure 1: Error vs Sampling Ratio
# ============================================================================

def plot_error_vs_sampling_ratio(csv_path: Path, output_path: Path) -> None:
    """One panel per family; one line per weighting with std error bars."""
    df = pd.read_csv(csv_path)
    agg = summarize_errors(df)
    families: List[str] = sorted(agg["family"].unique())

    fig, axes = plt.subplots(1, len(families), figsize=(5 * len(families), 5), squeeze=False)

    for ax, family in zip(axes[0], families):
        fam = agg[agg["family"] == family]
        for weighting in WEIGHTING_COLORS:
            data = fam[fam["weighting"] == weighting].sort_values("sampling_ratio")
            if data.empty:
                continue
            ax.errorbar(
                data["sampling_ratio"] * 100, data["mean"], yerr=data["std"],
                color=WEIGHTING_COLORS[weighting],
                marker=WEIGHTING_MARKERS[weighting],
                label=WEIGHTING_LABELS[weighting],
            )
        ax.set_xlabel("Sampling Ratio s/n (%)")
        ax.set_ylabel("Relative Frobenius Error")
        ax.set_title(family.replace("_", " ").title())
        ax.set_yscale("log")
        ax.yaxis.set_major_formatter(ticker.FuncFormatter(lambda x, p: f'{x:g}'))
        ax.legend(loc="upper right", framealpha=0.9)
        ax.grid(True, alpha=0.3, which='both')

    fig.suptitle("Sampled MatMul: Error vs Sampling Ratio", fontweight="bold")
    _save_figure(fig, output_path)


# ============================================================================
# Figure 2: Speedup vs Matrix Size
# ============================================================================

def plot_speedup_vs_size(csv_path: Path, output_path: Path) -> None:
    """Mean speedup over the naive multiply, per weighting and sampling ratio."""
    df = pd.read_csv(csv_path)
    df = df[df["weighting"] != "naive_matmul"]
    agg = df.groupby(["weighting", "sampling_ratio", "n"])["speedup"].mean().reset_index()
    ratios = sorted(agg["sampling_ratio"].unique())

    fig, axes = plt.subplots(1, len(ratios), figsize=(4 * len(ratios), 4), squeeze=False, sharey=True)

    for ax, ratio in zip(axes[0], ratios):
        sub = agg[agg["sampling_ratio"] == ratio]
        for weighting in WEIGHTING_COLORS:
            data = sub[sub["weighting"] == weighting].sort_values("n")
            if data.empty:
                continue
            ax.plot(
                data["n"], data["speedup"],
                color=WEIGHTING_COLORS[weighting],
                marker=WEIGHTING_MARKERS[weighting],
                label=WEIGHTING_LABELS[weighting],
            )
        ax.axhline(1.0, color=WEIGHTING_COLORS["naive_matmul"], linestyle="--", linewidth=1)
        ax.set_xscale("log", base=2)
        ax.set_yscale("log")
        ax.set_xlabel("Matrix size n")
        ax.set_title(f"s/n = {ratio:g}")
        ax.grid(True, alpha=0.3, which='both')
    axes[0][0].set_ylabel("Speedup vs naive")
    axes[0][0].legend(loc="upper left", framealpha=0.9)

    fig.suptitle("Sampled MatMul: Speedup vs Matrix Size", fontweight="bold")
    _save_figure(fig, output_path)


def generate_all_plots(results_dir: Path, output_dir: Path) -> None:
    """Generate every figure whose CSV is present in ``results_dir``."""
    output_dir.mkdir(parents=True, exist_ok=True)

    csv_path = results_dir / "sampled_error_sweep.csv"
    if csv_path.exists():
        plot_error_vs_sampling_ratio(csv_path, output_dir / "fig1_error_vs_ratio.png")
    else:
        logger.warning(f"Skipping Figure 1: {csv_path} not found")

    csv_path = results_dir / "sampled_size_scaling.csv"
    if csv_path.exists():
        plot_speedup_vs_size(csv_path, output_dir / "fig2_speedup_vs_size.png")
    else:
        logger.warning(f"Skipping Figure 2: {csv_path} not found")


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate sampled multiplication plots")
    parser.add_argument(
        "--results-dir", type=Path,
        default=Path("results"),
        help="Directory containing experiment CSV files"
    )
    parser.add_argument(
        "--output-dir", type=Path,
        default=Path("results/figures"),
        help="Output directory for plots"
    )
    args = parser.parse_args()

    generate_all_plots(args.results_dir, args.output_dir)


if __name__ == "__main__":
    main()
