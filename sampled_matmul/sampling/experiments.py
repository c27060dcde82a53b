"""Accuracy and runtime experiments for sampled matrix multiplication.

**Matrix families:** dense Gaussian, positive uniform, low-rank, and
positive matrices with skewed column norms.

**Weightings:** uniform, norm-based importance, paired-dot importance (the
last only on entrywise non-negative families, where its weights are valid).

**Metrics:** relative Frobenius error, runtime, speedup over the naive
outer-product multiply that uses all ``n`` terms.

**Experiments:**
- Error vs sampling ratio s/n per family and weighting
- Runtime and speedup vs matrix size
"""

from __future__ import annotations

import argparse
import csv
from pathlib import Path
from typing import Dict, List

import numpy as np

from sampled_matmul.common.config import (
    ExperimentConfig,
    MatrixFamily,
    MatrixSize,
    SamplingConfig,
    Weighting,
)
from sampled_matmul.common.datasets import generate_pair
from sampled_matmul.common.logging_utils import append_jsonl, get_logger
from sampled_matmul.common.metrics import max_abs_error, relative_frobenius_error
from sampled_matmul.common.timing import time_function
from sampled_matmul.linalg.dense import exact_product, multiply_dense
from sampled_matmul.sampling.core import multiply_from_config

logger = get_logger(__name__)

# Families whose entries are all non-negative, so paired-dot weights are valid.
NONNEGATIVE_FAMILIES = {MatrixFamily.POSITIVE, MatrixFamily.SKEWED_COLUMNS}


def _write_csv(path: Path, rows: List[Dict]) -> None:
    """Write rows to CSV file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if not rows:
        return
    fieldnames = list(rows[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)
    logger.info(f"Wrote {len(rows)} rows to {path}")


def _weightings_for(family: MatrixFamily, weightings: List[Weighting]) -> List[Weighting]:
    if family in NONNEGATIVE_FAMILIES:
        return list(weightings)
    return [w for w in weightings if w != Weighting.PAIRED_DOT]


def run_single_experiment(
    a: np.ndarray,
    b: np.ndarray,
    exact_c: np.ndarray,
    baseline_time: float,
    sampling_ratio: float,
    weighting: Weighting,
    seed: int,
) -> Dict:
    """Run one sampled multiplication and return its metrics."""
    n = a.shape[1]
    s = max(1, int(round(sampling_ratio * n)))
    config = SamplingConfig(sample_count=s, weighting=weighting, seed=seed)

    estimate, timing = time_function(lambda: multiply_from_config(a, b, config))
    rel_error = relative_frobenius_error(exact_c, estimate)
    speedup = baseline_time / timing.seconds if timing.seconds > 0 else 0.0

    return {
        "s": s,
        "sampling_ratio": sampling_ratio,
        "rel_error": rel_error,
        "max_abs_error": max_abs_error(exact_c, estimate),
        "runtime_sec": timing.seconds,
        "speedup": speedup,
    }


# ============================================================================
# Experiment 1: Error vs Sampling Ratio
# ============================================================================

def run_error_sweep(output_dir: Path, config: ExperimentConfig) -> List[Dict]:
    """Error of every weighting across sampling ratios and matrix families."""
    logger.info("Running Experiment 1: Error vs Sampling Ratio")

    rng = np.random.default_rng(config.seed)
    size = config.error_size
    rows: List[Dict] = []

    for family in config.families:
        logger.info(f"  Testing family={family.value}...")
        for trial in range(config.num_trials):
            a, b = generate_pair(family, size.m, size.n, size.p, int(rng.integers(0, 1_000_000)))
            exact_c = exact_product(a, b)
            _, baseline_timing = time_function(lambda: multiply_dense(a, b))

            for ratio in config.sampling_ratios:
                for weighting in _weightings_for(family, config.weightings):
                    result = run_single_experiment(
                        a, b, exact_c, baseline_timing.seconds,
                        ratio, weighting, int(rng.integers(0, 1_000_000)),
                    )
                    rows.append({
                        "family": family.value,
                        "weighting": weighting.value,
                        "n": size.n,
                        "trial": trial,
                        **result,
                    })

    _write_csv(output_dir / "sampled_error_sweep.csv", rows)
    return rows


# ============================================================================
# Experiment 2: Runtime and Speedup vs Matrix Size
# ============================================================================

def run_size_scaling(output_dir: Path, config: ExperimentConfig) -> List[Dict]:
    """Runtime of the estimator against the naive full multiply as n grows."""
    logger.info("Running Experiment 2: Size Scaling")

    rng = np.random.default_rng(config.seed)
    rows: List[Dict] = []
    trials = min(config.num_trials, 5)

    for size in config.sizes:
        logger.info(f"  Testing n={size.n}...")
        for trial in range(trials):
            a, b = generate_pair(
                MatrixFamily.SKEWED_COLUMNS, size.m, size.n, size.p, int(rng.integers(0, 1_000_000))
            )
            exact_c = exact_product(a, b)
            _, baseline_timing = time_function(lambda: multiply_dense(a, b))

            rows.append({
                "weighting": "naive_matmul",
                "n": size.n,
                "trial": trial,
                "s": size.n,
                "sampling_ratio": 1.0,
                "rel_error": 0.0,
                "max_abs_error": 0.0,
                "runtime_sec": baseline_timing.seconds,
                "speedup": 1.0,
            })

            for ratio in config.sampling_ratios:
                for weighting in config.weightings:
                    result = run_single_experiment(
                        a, b, exact_c, baseline_timing.seconds,
                        ratio, weighting, int(rng.integers(0, 1_000_000)),
                    )
                    rows.append({
                        "weighting": weighting.value,
                        "n": size.n,
                        "trial": trial,
                        **result,
                    })

    _write_csv(output_dir / "sampled_size_scaling.csv", rows)
    return rows


# ============================================================================
# Main Entry Point
# ============================================================================

def run_all_experiments(output_dir: Path, config: ExperimentConfig) -> None:
    """Run every experiment and append a manifest line to ``runs.jsonl``."""
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.info("=" * 60)
    logger.info("Starting sampled multiplication experiments")
    logger.info("=" * 60)

    error_rows = run_error_sweep(output_dir, config)
    scaling_rows = run_size_scaling(output_dir, config)

    append_jsonl(output_dir / "runs.jsonl", {
        "seed": config.seed,
        "num_trials": config.num_trials,
        "sampling_ratios": config.sampling_ratios,
        "weightings": [w.value for w in config.weightings],
        "families": [f.value for f in config.families],
        "sizes": [size.n for size in config.sizes],
        "error_rows": len(error_rows),
        "scaling_rows": len(scaling_rows),
    })

    logger.info("=" * 60)
    logger.info(f"All experiments complete. Results in {output_dir}")
    logger.info("=" * 60)


def main() -> None:
    defaults = ExperimentConfig.default()
    parser = argparse.ArgumentParser(description="Run sampled matrix multiplication experiments")
    parser.add_argument(
        "--output-dir", type=Path,
        default=Path("results"),
        help="Directory for CSV results and the run manifest",
    )
    parser.add_argument(
        "--sizes", type=int, nargs="+",
        default=[size.n for size in defaults.sizes],
        help="Square matrix sizes n for the scaling experiment",
    )
    parser.add_argument(
        "--ratios", type=float, nargs="+",
        default=defaults.sampling_ratios,
        help="Sampling ratios s/n",
    )
    parser.add_argument(
        "--weightings", nargs="+",
        choices=[w.value for w in Weighting],
        default=[w.value for w in defaults.weightings],
    )
    parser.add_argument("--trials", type=int, default=defaults.num_trials)
    parser.add_argument("--seed", type=int, default=defaults.seed)
    args = parser.parse_args()

    config = ExperimentConfig(
        sizes=[MatrixSize(m=n, n=n, p=n) for n in args.sizes],
        sampling_ratios=args.ratios,
        weightings=[Weighting(w) for w in args.weightings],
        families=defaults.families,
        num_trials=args.trials,
        seed=args.seed,
    )
    run_all_experiments(args.output_dir, config)


if __name__ == "__main__":
    main()
