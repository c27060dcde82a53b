"""Tests for the flat-buffer codec and dense plumbing."""

from __future__ import annotations

import numpy as np
import pytest

from sampled_matmul.errors import ShapeMismatch
from sampled_matmul.linalg.codec import flatten, is_reconstruction_failure, reconstruct
from sampled_matmul.linalg.dense import add, as_matrix, dot, exact_product, multiply_dense, transpose


def test_reconstruct_round_trip() -> None:
    rng = np.random.default_rng(0)
    m, n = 4, 7
    original = rng.integers(-50, 50, size=(m, n)).astype(np.float64)

    rebuilt = reconstruct(flatten(original), m * n, n)

    assert rebuilt.shape == (m, n)
    np.testing.assert_array_equal(rebuilt, original)
    assert not is_reconstruction_failure(rebuilt)


def test_reconstruct_uses_only_declared_prefix() -> None:
    rebuilt = reconstruct([1, 2, 3, 4, 5, 6, 7, 8], 6, 3)
    np.testing.assert_array_equal(rebuilt, [[1, 2, 3], [4, 5, 6]])


def test_reconstruct_indivisible_length_returns_empty() -> None:
    rebuilt = reconstruct(list(range(10)), 7, 3)
    assert rebuilt.shape[0] == 0
    assert is_reconstruction_failure(rebuilt)


def test_reconstruct_out_of_range_arguments_return_empty() -> None:
    assert is_reconstruction_failure(reconstruct([1, 2, 3, 4], 4, 0))
    assert is_reconstruction_failure(reconstruct([1, 2, 3, 4], -2, 2))
    assert is_reconstruction_failure(reconstruct([1, 2, 3, 4], 6, 2))
    assert is_reconstruction_failure(reconstruct([], 0, 3))


def test_reconstruct_does_not_alias_input() -> None:
    flat = np.arange(6, dtype=np.float64)
    rebuilt = reconstruct(flat, 6, 2)
    flat[0] = 100.0
    assert rebuilt[0, 0] == 0.0
    assert not np.shares_memory(flat, rebuilt)


def test_multiply_dense_matches_matmul() -> None:
    rng = np.random.default_rng(1)
    x = rng.normal(size=(5, 3))
    y = rng.normal(size=(3, 4))
    c = multiply_dense(x, y)
    assert c.shape == (5, 4)
    np.testing.assert_allclose(c, x @ y, atol=1e-12)


def test_multiply_dense_small_integers_exact() -> None:
    x = np.array([[1.0, 2.0], [3.0, 4.0]])
    y = np.array([[5.0, 6.0], [7.0, 8.0]])
    np.testing.assert_array_equal(multiply_dense(x, y), [[19.0, 22.0], [43.0, 50.0]])


def test_multiply_dense_rejects_incompatible_shapes() -> None:
    with pytest.raises(ShapeMismatch):
        multiply_dense(np.ones((2, 3)), np.ones((2, 3)))
    with pytest.raises(ShapeMismatch):
        multiply_dense(np.ones(3), np.ones((3, 1)))
    with pytest.raises(ShapeMismatch):
        exact_product(np.ones((2, 3)), np.ones((4, 1)))


def test_dot_and_vector_shapes() -> None:
    assert dot(np.array([1, 2, 3]), np.array([4, 5, 6])) == 32.0
    with pytest.raises(ShapeMismatch):
        dot(np.array([1.0, 2.0]), np.array([1.0]))


def test_transpose_and_add() -> None:
    m = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    t = transpose(m)
    assert t.shape == (3, 2)
    assert t.flags["C_CONTIGUOUS"]
    np.testing.assert_array_equal(add(m, m), 2 * m)
    with pytest.raises(ShapeMismatch):
        add(m, t)


def test_as_matrix_validates_rectangular_input() -> None:
    arr = as_matrix([[1, 2], [3, 4]])
    assert arr.dtype == np.float64
    with pytest.raises(ShapeMismatch):
        as_matrix([[1, 2], [3]])
    with pytest.raises(ShapeMismatch):
        as_matrix([1, 2, 3])
    with pytest.raises(ShapeMismatch):
        as_matrix([["a", "b"]])
