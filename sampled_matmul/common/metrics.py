"""Metric utilities for evaluating sampled products.

All functions here work purely on NumPy arrays and are side-effect free.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

FloatArray = NDArray[np.floating]


def relative_frobenius_error(true: FloatArray, approx: FloatArray) -> float:
    """Compute relative Frobenius norm error ``||true - approx||_F / ||true||_F``.

    Parameters
    ----------
    true:
        Ground-truth matrix.
    approx:
        Approximate matrix with the same shape as ``true``.

    Returns
    -------
    float
        Relative Frobenius norm error.
    """

    if true.shape != approx.shape:
        raise ValueError("shapes of true and approx must match")

    diff = true - approx
    num = np.linalg.norm(diff, ord="fro")
    denom = np.linalg.norm(true, ord="fro")
    if denom == 0.0:
        if num == 0.0:
            return 0.0
        raise ValueError("cannot compute relative error: true has zero Frobenius norm")
    return float(num / denom)


def max_abs_error(true: FloatArray, approx: FloatArray) -> float:
    """Largest absolute entrywise deviation between ``true`` and ``approx``."""

    if true.shape != approx.shape:
        raise ValueError("shapes of true and approx must match")
    if true.size == 0:
        return 0.0
    return float(np.max(np.abs(true - approx)))
