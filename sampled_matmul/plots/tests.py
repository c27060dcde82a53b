"""Smoke tests for the experiment figures."""

from __future__ import annotations

import pandas as pd

from sampled_matmul.common.config import ExperimentConfig, MatrixFamily, MatrixSize, Weighting
from sampled_matmul.plots.plot_sampling import generate_all_plots, summarize_errors
from sampled_matmul.sampling.experiments import run_all_experiments


def test_summarize_errors_groups_trials() -> None:
    df = pd.DataFrame({
        "family": ["positive"] * 4,
        "weighting": ["norm", "norm", "uniform", "uniform"],
        "sampling_ratio": [0.1] * 4,
        "rel_error": [0.2, 0.4, 1.0, 1.0],
    })
    agg = summarize_errors(df).set_index("weighting")
    assert abs(agg.loc["norm", "mean"] - 0.3) < 1e-12
    assert agg.loc["uniform", "std"] == 0.0


def test_generate_all_plots_from_experiment_output(tmp_path) -> None:
    results = tmp_path / "results"
    figures = tmp_path / "figures"
    config = ExperimentConfig(
        sizes=[MatrixSize(m=8, n=8, p=8), MatrixSize(m=16, n=16, p=16)],
        sampling_ratios=[0.25, 0.5],
        weightings=list(Weighting),
        families=[MatrixFamily.POSITIVE, MatrixFamily.GAUSSIAN],
        num_trials=2,
        seed=1,
        error_size=MatrixSize(m=8, n=16, p=8),
    )
    run_all_experiments(results, config)

    generate_all_plots(results, figures)

    assert (figures / "fig1_error_vs_ratio.png").stat().st_size > 0
    assert (figures / "fig2_speedup_vs_size.png").stat().st_size > 0


def test_generate_all_plots_skips_missing_results(tmp_path) -> None:
    generate_all_plots(tmp_path / "missing", tmp_path / "figures")
    assert list((tmp_path / "figures").iterdir()) == []
