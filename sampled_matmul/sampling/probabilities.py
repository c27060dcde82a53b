r"""Sampling distributions over the shared dimension of ``A @ B``.

For ``A`` with shape ``(m, n)`` and ``B`` with shape ``(n, p)`` the product
decomposes into ``n`` outer products ``a_k b_k^T`` where ``a_k`` is the
``k``-th column of ``A`` and ``b_k^T`` the ``k``-th row of ``B``. Each
weighting assigns a non-negative weight ``w_k`` to every term and
normalises:

.. math::

    p_k = \frac{w_k}{\sum_j w_j}.

Weightings
----------
``Weighting.NORM``
    ``w_k = ||a_k|| \, ||b_k||``. Minimises estimator variance among
    norm-based choices; valid for any compatible shapes.
``Weighting.PAIRED_DOT``
    ``w_k = a_k \cdot b_k``, pairing column ``k`` of ``A`` with row ``k`` of
    ``B`` entrywise. Requires ``m == p`` and non-negative weights, which
    holds for example when both inputs are entrywise non-negative.
``Weighting.UNIFORM``
    ``w_k = 1``.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from sampled_matmul.common.config import Weighting
from sampled_matmul.errors import DegenerateDistribution, ShapeMismatch
from sampled_matmul.linalg.dense import dot

FloatArray = NDArray[np.floating]


def _validate_pair(a: FloatArray, b: FloatArray) -> None:
    if a.ndim != 2 or b.ndim != 2:
        raise ShapeMismatch("probabilities expect 2D arrays for a and b")
    if a.shape[1] != b.shape[0]:
        raise ShapeMismatch(
            f"incompatible shapes for matmul: a{a.shape}, b{b.shape} (a.shape[1] != b.shape[0])"
        )


def raw_weights(a: FloatArray, b: FloatArray, weighting: Weighting = Weighting.NORM) -> FloatArray:
    """Unnormalised per-index weights ``w_k`` in ``float64``."""

    _validate_pair(a, b)
    weighting = Weighting(weighting)
    n = a.shape[1]
    a64 = a.astype(np.float64, copy=False)
    b64 = b.astype(np.float64, copy=False)

    if weighting == Weighting.UNIFORM:
        return np.ones(n, dtype=np.float64)

    if weighting == Weighting.NORM:
        col_norms_a = np.linalg.norm(a64, axis=0)
        row_norms_b = np.linalg.norm(b64, axis=1)
        return col_norms_a * row_norms_b

    if a.shape[0] != b.shape[1]:
        raise ShapeMismatch(
            f"paired-dot weights need columns of a and rows of b of equal length, "
            f"got a{a.shape}, b{b.shape}"
        )
    weights = np.empty(n, dtype=np.float64)
    for k in range(n):
        weights[k] = dot(a64[:, k], b64[k, :])
    return weights


def build_probabilities(
    a: FloatArray,
    b: FloatArray,
    weighting: Weighting = Weighting.NORM,
) -> FloatArray:
    """Build the sampling distribution over the shared dimension.

    Parameters
    ----------
    a, b:
        Input matrices with shapes ``(m, n)`` and ``(n, p)``.
    weighting:
        Which weights to normalise; see the module docstring.

    Returns
    -------
    ndarray
        Read-only ``float64`` vector of length ``n`` with non-negative
        entries summing to one.

    Raises
    ------
    ShapeMismatch
        If the inputs cannot be paired.
    DegenerateDistribution
        If any weight is negative or non-finite, or the weights sum to zero.
    """

    weights = raw_weights(a, b, weighting)

    if not np.all(np.isfinite(weights)):
        raise DegenerateDistribution("sampling weights contain NaN or infinite values")
    if np.any(weights < 0.0):
        raise DegenerateDistribution(
            f"sampling weights must be non-negative for {Weighting(weighting).value} weighting"
        )
    total_weight = float(np.sum(weights))
    if not np.isfinite(total_weight) or total_weight <= 0.0:
        raise DegenerateDistribution(
            "cannot construct sampling distribution: weights sum to zero or are non-finite"
        )

    probabilities = (weights / total_weight).astype(np.float64)
    probabilities.flags.writeable = False
    return probabilities
