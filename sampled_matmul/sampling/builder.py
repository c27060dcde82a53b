r"""Assembly of the two small factors whose product estimates ``A @ B``.

Given draws ``k_1, ..., k_s`` the estimator is

.. math::

    \tilde{C} = \sum_{i=1}^s a_{k_i} \frac{b_{k_i}^T}{s \, p_{k_i}}
              = A' B',

with ``A'`` the ``(m, s)`` matrix of sampled columns of ``A`` and ``B'`` the
``(s, p)`` matrix of sampled, rescaled rows of ``B``. The ``1 / (s p_k)``
factor makes ``E[\tilde{C}] = A B``.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from sampled_matmul.errors import DegenerateDistribution, ShapeMismatch
from sampled_matmul.linalg.dense import transpose

FloatArray = NDArray[np.floating]


@dataclass
class SampledFactors:
    """Reduced factors ``left`` (m×s) and ``right`` (s×p)."""

    left: FloatArray
    right: FloatArray

    @property
    def sample_count(self) -> int:
        return int(self.left.shape[1])


def build_sampled_factors(
    a_columns: FloatArray,
    b_rows: FloatArray,
    probabilities: NDArray[np.floating],
    indices: NDArray[np.integer],
) -> SampledFactors:
    """Collect and rescale the sampled slices of ``A`` and ``B``.

    Parameters
    ----------
    a_columns:
        ``A`` transposed, shape ``(n, m)``; row ``k`` is column ``k`` of ``A``.
    b_rows:
        ``B`` with shape ``(n, p)``.
    probabilities:
        Sampling distribution of length ``n`` the indices were drawn from.
    indices:
        The ``s`` drawn indices, in draw order; repeats are allowed.

    Returns
    -------
    SampledFactors
        ``left`` with shape ``(m, s)`` and ``right`` with shape ``(s, p)``.
    """

    n = probabilities.shape[0]
    if a_columns.shape[0] != n or b_rows.shape[0] != n:
        raise ShapeMismatch(
            f"shared dimension mismatch: a_columns{a_columns.shape}, b_rows{b_rows.shape}, "
            f"{n} probabilities"
        )

    s = int(indices.shape[0])
    sampled_a = []
    sampled_b = []
    for idx in indices:
        p_k = float(probabilities[idx])
        if p_k <= 0.0:
            raise DegenerateDistribution(f"index {int(idx)} was drawn with probability {p_k!r}")
        sampled_a.append(a_columns[idx])
        sampled_b.append(b_rows[idx] / (s * p_k))

    m = a_columns.shape[1]
    p = b_rows.shape[1]
    left_rows = np.array(sampled_a, dtype=np.float64).reshape(s, m)
    right = np.array(sampled_b, dtype=np.float64).reshape(s, p)
    return SampledFactors(left=transpose(left_rows), right=right)
