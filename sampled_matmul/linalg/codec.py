"""Conversion between flat row-major buffers and 2D matrices.

Callers that hold matrices as contiguous buffers pass them through
``reconstruct`` before multiplying. A buffer that cannot be split into
whole rows yields an *empty* matrix (zero rows) instead of raising; use
``is_reconstruction_failure`` to tell that apart from real data.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

FloatArray = NDArray[np.floating]


def _empty() -> FloatArray:
    return np.empty((0, 0), dtype=np.float64)


def reconstruct(flat: Any, declared_length: int, row_height: int) -> FloatArray:
    """Rebuild a matrix from the first ``declared_length`` entries of ``flat``.

    Parameters
    ----------
    flat:
        One-dimensional buffer (sequence or array) of numbers.
    declared_length:
        Number of leading entries of ``flat`` that belong to the matrix.
    row_height:
        Number of entries per row; consecutive chunks of this size become the
        rows of the result, top to bottom.

    Returns
    -------
    ndarray
        Freshly allocated ``(declared_length // row_height, row_height)``
        matrix, or a ``(0, 0)`` matrix when ``declared_length`` is not a
        multiple of ``row_height`` (or either value is out of range for the
        buffer).
    """

    buf = np.asarray(flat).reshape(-1)
    if row_height <= 0 or declared_length < 0 or declared_length > buf.shape[0]:
        return _empty()
    if declared_length % row_height != 0:
        return _empty()
    # np.array copies, so the result never aliases the caller's buffer.
    copy = np.array(buf[:declared_length], dtype=np.float64)
    return copy.reshape(declared_length // row_height, row_height)


def flatten(matrix: FloatArray) -> FloatArray:
    """Row-major copy of ``matrix`` as a 1D ``float64`` buffer."""

    return np.array(matrix, dtype=np.float64).reshape(-1)


def is_reconstruction_failure(matrix: FloatArray) -> bool:
    """Whether ``matrix`` is the empty sentinel returned by ``reconstruct``."""

    return matrix.ndim != 2 or matrix.shape[0] == 0
