"""Sanity checks for shared configuration, metrics and helpers."""

from __future__ import annotations

import json
import logging

import numpy as np
import pytest

from sampled_matmul.common.config import ExperimentConfig, MatrixFamily, Weighting
from sampled_matmul.common.datasets import (
    LowRankMatrixSpec,
    generate_pair,
    low_rank_matrix,
)
from sampled_matmul.common.logging_utils import append_jsonl, get_logger
from sampled_matmul.common.metrics import max_abs_error, relative_frobenius_error
from sampled_matmul.common.timing import time_function, timer


def test_relative_frobenius_error() -> None:
    true = np.array([[3.0, 0.0], [0.0, 4.0]])
    assert relative_frobenius_error(true, true) == 0.0
    assert relative_frobenius_error(true, np.zeros((2, 2))) == pytest.approx(1.0)
    assert relative_frobenius_error(np.zeros((2, 2)), np.zeros((2, 2))) == 0.0
    with pytest.raises(ValueError):
        relative_frobenius_error(np.zeros((2, 2)), np.ones((2, 2)))
    with pytest.raises(ValueError):
        relative_frobenius_error(true, np.zeros((3, 3)))


def test_max_abs_error() -> None:
    assert max_abs_error(np.array([[1.0, 2.0]]), np.array([[1.5, 1.0]])) == 1.0
    assert max_abs_error(np.empty((0, 0)), np.empty((0, 0))) == 0.0


def test_get_logger_attaches_single_handler() -> None:
    logger = get_logger("sampled_matmul.tests.logger")
    again = get_logger("sampled_matmul.tests.logger")
    assert logger is again
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO


def test_append_jsonl_appends_lines(tmp_path) -> None:
    path = tmp_path / "nested" / "runs.jsonl"
    append_jsonl(path, {"a": 1})
    append_jsonl(path, {"b": [1, 2]})
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line) for line in lines] == [{"a": 1}, {"b": [1, 2]}]


def test_timer_records_elapsed_time() -> None:
    with timer() as t:
        sum(range(1000))
    assert t.seconds >= 0.0
    value, timing = time_function(lambda: 42)
    assert value == 42
    assert timing.seconds >= 0.0


def test_generate_pair_shapes_and_signs() -> None:
    for family in MatrixFamily:
        a, b = generate_pair(family, 5, 12, 3, seed=7)
        assert a.shape == (5, 12)
        assert b.shape == (12, 3)
    a, b = generate_pair(MatrixFamily.SKEWED_COLUMNS, 5, 12, 3, seed=7)
    assert np.all(a > 0.0) and np.all(b > 0.0)


def test_skewed_pair_shares_heavy_indices() -> None:
    # 400 rows make the base-norm noise negligible next to the 1 : 2**-1.5 scale gap.
    a, b = generate_pair(MatrixFamily.SKEWED_COLUMNS, 400, 12, 400, seed=7)
    assert np.argmax(np.linalg.norm(a, axis=0)) == np.argmax(np.linalg.norm(b, axis=1))


def test_low_rank_matrix_has_requested_rank() -> None:
    a = low_rank_matrix(LowRankMatrixSpec(m=20, n=15, r=3, seed=0))
    assert np.linalg.matrix_rank(a) == 3
    with pytest.raises(ValueError):
        low_rank_matrix(LowRankMatrixSpec(m=4, n=4, r=5))


def test_default_experiment_config() -> None:
    config = ExperimentConfig.default()
    assert config.num_trials > 0
    assert Weighting.NORM in config.weightings
    assert all(0.0 < r <= 1.0 for r in config.sampling_ratios)
    assert Weighting("paired_dot") is Weighting.PAIRED_DOT
