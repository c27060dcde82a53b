"""Tests for the sampled multiplication core.

Statistical checks use fixed seeds and generous tolerances so they are
deterministic; the remaining tests pin down the exact sampling and
rescaling behaviour with injected uniform draws.
"""

from __future__ import annotations

import json

import numpy as np
import pytest

from sampled_matmul.common.config import ExperimentConfig, MatrixFamily, MatrixSize, Weighting
from sampled_matmul.errors import (
    DegenerateDistribution,
    InvalidSampleCount,
    ReconstructionFailure,
    ShapeMismatch,
)
from sampled_matmul.linalg.codec import flatten
from sampled_matmul.linalg.dense import exact_product
from sampled_matmul.sampling.builder import build_sampled_factors
from sampled_matmul.sampling.core import (
    _self_test,
    mean_estimate,
    multiply,
    multiply_flat,
    multiply_with_details,
)
from sampled_matmul.sampling.experiments import run_all_experiments
from sampled_matmul.sampling.probabilities import build_probabilities
from sampled_matmul.sampling.sampler import (
    default_uniform,
    draw_index,
    draw_indices,
    sequence_uniform,
)

A_SMALL = [[1, 2], [3, 4]]
B_SMALL = [[5, 6], [7, 8]]
C_SMALL = np.array([[19.0, 22.0], [43.0, 50.0]])


# ============================================================================
# Probabilities
# ============================================================================

def test_probabilities_sum_to_one_for_positive_inputs() -> None:
    rng = np.random.default_rng(0)
    a = rng.uniform(0.1, 2.0, size=(7, 11))
    b = rng.uniform(0.1, 2.0, size=(11, 4))

    for weighting in (Weighting.NORM, Weighting.UNIFORM):
        pk = build_probabilities(a, b, weighting)
        assert pk.shape == (11,)
        assert pk.dtype == np.float64
        assert np.all(pk >= 0.0)
        assert abs(pk.sum() - 1.0) < 1e-6

    square_b = rng.uniform(0.1, 2.0, size=(11, 7))
    pk = build_probabilities(a, square_b, Weighting.PAIRED_DOT)
    assert pk.shape == (11,)
    assert abs(pk.sum() - 1.0) < 1e-6


def test_norm_weights_match_column_and_row_norms() -> None:
    a = np.array([[3.0, 0.0], [4.0, 1.0]])
    b = np.array([[1.0, 0.0], [0.0, 2.0]])
    # ||a_0|| ||b_0|| = 5 * 1, ||a_1|| ||b_1|| = 1 * 2
    np.testing.assert_allclose(build_probabilities(a, b), [5.0 / 7.0, 2.0 / 7.0])


def test_paired_dot_weights_pair_column_of_a_with_row_of_b() -> None:
    a = np.array([[1.0, 2.0], [3.0, 4.0]])
    b = np.array([[5.0, 6.0], [7.0, 8.0]])
    # a_0 . b_0 = 1*5 + 3*6 = 23, a_1 . b_1 = 2*7 + 4*8 = 46
    pk = build_probabilities(a, b, Weighting.PAIRED_DOT)
    np.testing.assert_allclose(pk, [1.0 / 3.0, 2.0 / 3.0])


def test_probabilities_are_read_only() -> None:
    pk = build_probabilities(np.ones((2, 3)), np.ones((3, 2)))
    with pytest.raises(ValueError):
        pk[0] = 1.0


def test_paired_dot_requires_matching_outer_dimensions() -> None:
    with pytest.raises(ShapeMismatch):
        build_probabilities(np.ones((2, 3)), np.ones((3, 4)), Weighting.PAIRED_DOT)


def test_paired_dot_rejects_negative_weights() -> None:
    a = np.array([[1.0, -1.0]])
    b = np.array([[1.0], [1.0]])
    with pytest.raises(DegenerateDistribution):
        build_probabilities(a, b, Weighting.PAIRED_DOT)


def test_zero_and_nonfinite_weights_are_degenerate() -> None:
    with pytest.raises(DegenerateDistribution):
        build_probabilities(np.zeros((3, 4)), np.zeros((4, 2)))
    with pytest.raises(DegenerateDistribution):
        build_probabilities(np.full((2, 2), np.nan), np.ones((2, 2)))
    with pytest.raises(DegenerateDistribution):
        build_probabilities(np.empty((2, 0)), np.empty((0, 2)))


def test_probabilities_reject_incompatible_shapes() -> None:
    with pytest.raises(ShapeMismatch):
        build_probabilities(np.ones((2, 3)), np.ones((2, 3)))


# ============================================================================
# Sampler
# ============================================================================

def test_single_entry_distribution_always_selects_zero() -> None:
    pk = np.array([1.0])
    for r in (0.0, 0.25, 0.5, 0.999999):
        assert draw_index(pk, sequence_uniform([r])) == 0


def test_draw_index_reference_values() -> None:
    pk = np.array([0.2, 0.3, 0.5])
    assert draw_index(pk, sequence_uniform([0.95])) == 2
    assert draw_index(pk, sequence_uniform([0.0])) == 0
    assert draw_index(pk, sequence_uniform([0.49999])) == 1


def test_zero_draw_selects_first_nonzero_index() -> None:
    pk = np.array([0.0, 0.0, 0.4, 0.6])
    assert draw_index(pk, sequence_uniform([0.0])) == 2


def test_one_hot_distribution_always_selects_hot_index() -> None:
    pk = np.array([0.0, 1.0, 0.0])
    uniform = default_uniform(3)
    assert all(draw_index(pk, uniform) == 1 for _ in range(200))


def test_roundoff_shortfall_falls_back_to_last_positive_index() -> None:
    pk = np.array([0.5, 0.4999999, 0.0])
    assert draw_index(pk, sequence_uniform([0.99999999])) == 1


def test_draw_index_rejects_out_of_range_draws() -> None:
    pk = np.array([0.5, 0.5])
    for r in (1.0, -0.1, 2.0):
        with pytest.raises(ValueError):
            draw_index(pk, sequence_uniform([r]))


def test_draw_indices_counts_and_reproducibility() -> None:
    pk = np.array([0.1, 0.2, 0.3, 0.4])
    first = draw_indices(pk, 50, default_uniform(7))
    second = draw_indices(pk, 50, default_uniform(7))
    assert first.shape == (50,)
    assert first.dtype == np.int64
    np.testing.assert_array_equal(first, second)
    assert first.min() >= 0 and first.max() < 4


def test_draw_indices_rejects_invalid_sample_counts() -> None:
    pk = np.array([1.0])
    for s in (0, -3, 2.5, True, "4"):
        with pytest.raises(InvalidSampleCount):
            draw_indices(pk, s, default_uniform(0))


def test_sequence_uniform_reports_exhaustion() -> None:
    uniform = sequence_uniform([0.5])
    uniform()
    with pytest.raises(ValueError):
        uniform()


# ============================================================================
# Sampled factors
# ============================================================================

def test_builder_collects_and_rescales_in_draw_order() -> None:
    a = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    b = np.array([[1.0, 1.0, 1.0, 1.0], [2.0, 4.0, 6.0, 8.0]])
    pk = np.array([0.25, 0.75])
    indices = np.array([1, 1, 0])

    factors = build_sampled_factors(a.T.copy(), b, pk, indices)

    assert factors.left.shape == (3, 3)
    assert factors.right.shape == (3, 4)
    assert factors.sample_count == 3
    np.testing.assert_array_equal(factors.left, a[:, [1, 1, 0]])
    np.testing.assert_allclose(factors.right[0], b[1] / (3 * 0.75))
    np.testing.assert_allclose(factors.right[1], b[1] / (3 * 0.75))
    np.testing.assert_allclose(factors.right[2], b[0] / (3 * 0.25))


def test_builder_rejects_zero_probability_draw() -> None:
    a_columns = np.ones((2, 2))
    b = np.ones((2, 2))
    with pytest.raises(DegenerateDistribution):
        build_sampled_factors(a_columns, b, np.array([1.0, 0.0]), np.array([1]))


def test_builder_rejects_mismatched_shared_dimension() -> None:
    with pytest.raises(ShapeMismatch):
        build_sampled_factors(np.ones((3, 2)), np.ones((2, 2)), np.array([0.5, 0.5]), np.array([0]))


# ============================================================================
# End to end
# ============================================================================

def test_full_coverage_reproduces_exact_product() -> None:
    """Uniform weights, s = n and draws covering each index once give A @ B."""

    for draws in ([0.1, 0.7], [0.7, 0.1]):
        estimate = multiply(
            A_SMALL, B_SMALL, 2, weighting=Weighting.UNIFORM, uniform=sequence_uniform(draws)
        )
        np.testing.assert_array_equal(estimate, C_SMALL)


def test_mean_of_uniform_estimates_converges_to_exact_product() -> None:
    mean = mean_estimate(A_SMALL, B_SMALL, 2, 4000, weighting=Weighting.UNIFORM, seed=1)
    err = np.linalg.norm(mean - C_SMALL, ord="fro") / np.linalg.norm(C_SMALL, ord="fro")
    assert err < 0.05, f"uniform mean error too large: {err:.4f}"


def test_mean_of_importance_estimates_is_unbiased() -> None:
    rng = np.random.default_rng(2)
    a = rng.normal(size=(6, 8))
    b = rng.normal(size=(8, 5))
    exact = exact_product(a, b)

    mean = mean_estimate(a, b, 4, 3000, weighting=Weighting.NORM, seed=3)
    err = np.linalg.norm(mean - exact, ord="fro") / np.linalg.norm(exact, ord="fro")
    assert err < 0.1, f"importance mean error too large: {err:.4f}"


def test_importance_sampling_beats_uniform_on_skewed_columns() -> None:
    rng = np.random.default_rng(4)
    n = 200
    scales = np.arange(1, n + 1, dtype=np.float64) ** -1.5
    a = rng.uniform(0.1, 1.0, size=(20, n)) * scales[np.newaxis, :]
    b = rng.uniform(0.1, 1.0, size=(n, 20)) * scales[:, np.newaxis]
    exact = exact_product(a, b)

    def mean_error(weighting: Weighting) -> float:
        uniform = default_uniform(5)
        errs = [
            np.linalg.norm(multiply(a, b, 20, weighting=weighting, uniform=uniform) - exact)
            for _ in range(30)
        ]
        return float(np.mean(errs)) / float(np.linalg.norm(exact))

    assert mean_error(Weighting.NORM) < mean_error(Weighting.UNIFORM)


def test_details_expose_consistent_metadata() -> None:
    rng = np.random.default_rng(6)
    a = rng.normal(size=(4, 9))
    b = rng.normal(size=(9, 3))

    result = multiply_with_details(a, b, 5, seed=11)

    assert result.estimate.shape == (4, 3)
    assert result.estimate.dtype == np.float64
    assert result.indices.shape == (5,)
    assert result.probabilities.shape == (9,)
    assert result.factors.left.shape == (4, 5)
    assert result.factors.right.shape == (5, 3)
    assert np.all(result.probabilities[result.indices] > 0.0)
    np.testing.assert_allclose(result.estimate, result.factors.left @ result.factors.right)


def test_seed_makes_multiply_reproducible() -> None:
    rng = np.random.default_rng(8)
    a = rng.normal(size=(5, 12))
    b = rng.normal(size=(12, 5))
    np.testing.assert_array_equal(multiply(a, b, 6, seed=99), multiply(a, b, 6, seed=99))


def test_integer_inputs_accumulate_in_float64() -> None:
    a = np.array(A_SMALL, dtype=np.int32)
    b = np.array(B_SMALL, dtype=np.int32)
    estimate = multiply(a, b, 3, seed=0)
    assert estimate.dtype == np.float64
    assert estimate.shape == (2, 2)


def test_multiply_flat_matches_multiply() -> None:
    rng = np.random.default_rng(9)
    a = rng.uniform(size=(3, 6))
    b = rng.uniform(size=(6, 4))
    flat_a = np.concatenate([flatten(a), [99.0, 99.0]])  # trailing slack is ignored
    flat_b = flatten(b)

    via_flat = multiply_flat(flat_a, flat_b, 18, 24, 6, 4, 5, seed=21)
    direct = multiply(a, b, 5, seed=21)
    np.testing.assert_array_equal(via_flat, direct)


def test_multiply_flat_reports_reconstruction_failure() -> None:
    with pytest.raises(ReconstructionFailure):
        multiply_flat(list(range(7)), list(range(6)), 7, 6, 3, 2, 2)
    with pytest.raises(ReconstructionFailure):
        multiply_flat(list(range(6)), list(range(7)), 6, 7, 3, 3, 2)


def test_multiply_reports_error_kinds() -> None:
    with pytest.raises(InvalidSampleCount):
        multiply(A_SMALL, B_SMALL, 0)
    with pytest.raises(InvalidSampleCount):
        multiply(A_SMALL, B_SMALL, -2)
    with pytest.raises(ShapeMismatch):
        multiply([[1, 2, 3], [4, 5, 6]], B_SMALL, 2)
    with pytest.raises(ShapeMismatch):
        multiply([[1, 2], [3]], B_SMALL, 2)
    with pytest.raises(ShapeMismatch):
        multiply([1, 2], B_SMALL, 2)
    with pytest.raises(DegenerateDistribution):
        multiply([[0, 0], [0, 0]], B_SMALL, 2)


def test_self_test_passes() -> None:
    _self_test(num_trials=200, seed=0)


# ============================================================================
# Experiments
# ============================================================================

def test_experiments_write_csvs_and_manifest(tmp_path) -> None:
    config = ExperimentConfig(
        sizes=[MatrixSize(m=8, n=8, p=8)],
        sampling_ratios=[0.25, 0.5],
        weightings=list(Weighting),
        families=list(MatrixFamily),
        num_trials=1,
        seed=0,
        error_size=MatrixSize(m=8, n=16, p=8),
    )

    run_all_experiments(tmp_path, config)

    error_csv = (tmp_path / "sampled_error_sweep.csv").read_text(encoding="utf-8").splitlines()
    assert error_csv[0].startswith("family,weighting,n,trial,s,sampling_ratio,rel_error")
    # paired_dot only runs on the two non-negative families
    assert len(error_csv) - 1 == 2 * (2 * 3 + 2 * 2)

    scaling_csv = (tmp_path / "sampled_size_scaling.csv").read_text(encoding="utf-8").splitlines()
    assert len(scaling_csv) - 1 == 1 + 2 * 3

    manifest = [json.loads(line) for line in (tmp_path / "runs.jsonl").read_text().splitlines()]
    assert manifest[-1]["error_rows"] == 20
    assert manifest[-1]["scaling_rows"] == 7


if __name__ == "__main__":  # pragma: no cover - manual execution
    test_full_coverage_reproduces_exact_product()
    test_mean_of_uniform_estimates_converges_to_exact_product()
    test_mean_of_importance_estimates_is_unbiased()
    print("Sampled multiplication tests passed.")
