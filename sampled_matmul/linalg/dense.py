"""Dense matrix plumbing shared by the sampled estimator.

Provides input normalisation, vector dot product, transpose, addition and
the exact multiply applied to the small sampled factors. Accumulation is
always carried out in ``float64`` regardless of the input dtype.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from sampled_matmul.errors import ShapeMismatch

FloatArray = NDArray[np.floating]


def as_matrix(x: Any, name: str = "matrix") -> FloatArray:
    """Convert ``x`` to a rectangular 2D ``float64`` array.

    Nested lists, tuples and arrays of any numeric dtype are accepted.

    Raises
    ------
    ShapeMismatch
        If ``x`` is ragged, not two-dimensional, or not numeric.
    """

    try:
        arr = np.asarray(x, dtype=np.float64)
    except (ValueError, TypeError) as exc:
        raise ShapeMismatch(f"{name} is not a rectangular numeric matrix") from exc
    if arr.ndim != 2:
        raise ShapeMismatch(f"{name} must be 2D, got ndim={arr.ndim}")
    return arr


def dot(x: FloatArray, y: FloatArray) -> float:
    """Dot product of two equal-length vectors, accumulated in ``float64``."""

    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.ndim != 1 or y.ndim != 1 or x.shape[0] != y.shape[0]:
        raise ShapeMismatch(f"dot requires equal-length vectors, got {x.shape} and {y.shape}")
    return float(np.dot(x, y))


def transpose(m: FloatArray) -> FloatArray:
    """Return a contiguous transposed copy of ``m``."""

    return np.ascontiguousarray(np.asarray(m).T)


def add(a: FloatArray, b: FloatArray) -> FloatArray:
    """Elementwise sum of two matrices of identical shape."""

    if a.shape != b.shape:
        raise ShapeMismatch(f"cannot add matrices of shapes {a.shape} and {b.shape}")
    return np.add(a, b, dtype=np.float64)


def multiply_dense(x: FloatArray, y: FloatArray) -> FloatArray:
    """Exact product of an ``(m, s)`` and an ``(s, p)`` matrix.

    Computes ``C[i, j] = sum_k x[i, k] * y[k, j]`` by accumulating the ``s``
    outer products ``x[:, k] y[k, :]^T``, so the only loop in Python runs over
    the small sampled dimension.

    Parameters
    ----------
    x, y:
        Matrices with shapes ``(m, s)`` and ``(s, p)``.

    Returns
    -------
    ndarray
        Product with shape ``(m, p)`` and dtype ``float64``.

    Raises
    ------
    ShapeMismatch
        If the inputs are not 2D or ``x.shape[1] != y.shape[0]``.
    """

    if x.ndim != 2 or y.ndim != 2:
        raise ShapeMismatch("multiply_dense expects 2D arrays")
    if x.shape[1] != y.shape[0]:
        raise ShapeMismatch(
            f"incompatible shapes for matmul: x{x.shape}, y{y.shape} (x.shape[1] != y.shape[0])"
        )

    m, s = x.shape
    p = y.shape[1]
    c = np.zeros((m, p), dtype=np.float64)
    for k in range(s):
        c += np.outer(x[:, k], y[k, :])
    return c


def exact_product(a: FloatArray, b: FloatArray) -> FloatArray:
    """Reference product ``A @ B`` through NumPy's BLAS-backed matmul.

    Only used to measure the error of sampled estimates.
    """

    if a.ndim != 2 or b.ndim != 2:
        raise ShapeMismatch("a and b must be 2D arrays")
    if a.shape[1] != b.shape[0]:
        raise ShapeMismatch("inner dimensions of a and b are incompatible")
    return (a @ b).astype(np.float64)
