"""Seeded synthetic matrices for accuracy and timing experiments.

Each generator is described by a small spec dataclass so experiment rows
can record exactly what was multiplied.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from sampled_matmul.common.config import MatrixFamily

FloatArray = NDArray[np.floating]


@dataclass
class GaussianMatrixSpec:
    """Dense matrix with i.i.d. standard normal entries."""

    m: int
    n: int
    seed: Optional[int] = None


@dataclass
class PositiveMatrixSpec:
    """Dense matrix with i.i.d. entries uniform on ``[low, high)``."""

    m: int
    n: int
    low: float = 0.1
    high: float = 1.0
    seed: Optional[int] = None


@dataclass
class LowRankMatrixSpec:
    """Rank-``r`` matrix with power-law singular values plus optional noise."""

    m: int
    n: int
    r: int
    decay_exponent: float = 1.0
    noise_std: float = 0.0
    seed: Optional[int] = None


@dataclass
class SkewedColumnMatrixSpec:
    """Positive matrix whose column norms decay as ``(k + 1) ** -decay_exponent``.

    Importance sampling has the largest advantage over uniform sampling on
    this family, since a handful of columns carry most of the product.
    """

    m: int
    n: int
    decay_exponent: float = 1.5
    seed: Optional[int] = None
    permutation_seed: Optional[int] = None


def gaussian_matrix(spec: GaussianMatrixSpec) -> FloatArray:
    rng = np.random.default_rng(spec.seed)
    return rng.normal(size=(spec.m, spec.n))


def positive_matrix(spec: PositiveMatrixSpec) -> FloatArray:
    if not 0.0 < spec.low < spec.high:
        raise ValueError("positive matrices require 0 < low < high")
    rng = np.random.default_rng(spec.seed)
    return rng.uniform(spec.low, spec.high, size=(spec.m, spec.n))


def low_rank_matrix(spec: LowRankMatrixSpec) -> FloatArray:
    """Build ``U diag(sigma) V^T`` with orthonormal ``U``, ``V``."""

    if not 1 <= spec.r <= min(spec.m, spec.n):
        raise ValueError("rank r must be in [1, min(m, n)]")
    rng = np.random.default_rng(spec.seed)
    u, _ = np.linalg.qr(rng.normal(size=(spec.m, spec.r)))
    v, _ = np.linalg.qr(rng.normal(size=(spec.n, spec.r)))
    singulars = np.arange(1, spec.r + 1, dtype=np.float64) ** (-spec.decay_exponent)
    a = (u * singulars[np.newaxis, :]) @ v.T
    if spec.noise_std > 0.0:
        a = a + spec.noise_std * rng.normal(size=a.shape)
    return a


def skewed_column_matrix(spec: SkewedColumnMatrixSpec) -> FloatArray:
    rng = np.random.default_rng(spec.seed)
    base = rng.uniform(0.1, 1.0, size=(spec.m, spec.n))
    scales = np.arange(1, spec.n + 1, dtype=np.float64) ** (-spec.decay_exponent)
    # Shuffle so the heavy columns are not simply the leading ones.
    perm_seed = spec.seed if spec.permutation_seed is None else spec.permutation_seed
    scales = scales[np.random.default_rng(perm_seed).permutation(spec.n)]
    return base * scales[np.newaxis, :]


def generate_pair(family: MatrixFamily, m: int, n: int, p: int, seed: int) -> tuple:
    """Generate a compatible ``(A, B)`` pair from ``family``.

    For the skewed family ``B`` is the transpose of a ``(p, n)`` matrix that
    shares ``A``'s column permutation, so the heavy indices of the shared
    dimension line up between the columns of ``A`` and the rows of ``B``.
    """

    if family == MatrixFamily.GAUSSIAN:
        a = gaussian_matrix(GaussianMatrixSpec(m=m, n=n, seed=seed))
        b = gaussian_matrix(GaussianMatrixSpec(m=n, n=p, seed=seed + 1000))
    elif family == MatrixFamily.POSITIVE:
        a = positive_matrix(PositiveMatrixSpec(m=m, n=n, seed=seed))
        b = positive_matrix(PositiveMatrixSpec(m=n, n=p, seed=seed + 1000))
    elif family == MatrixFamily.LOW_RANK:
        r = max(1, min(m, n, p) // 16)
        a = low_rank_matrix(LowRankMatrixSpec(m=m, n=n, r=r, seed=seed))
        b = low_rank_matrix(LowRankMatrixSpec(m=n, n=p, r=r, seed=seed + 1000))
    elif family == MatrixFamily.SKEWED_COLUMNS:
        a = skewed_column_matrix(SkewedColumnMatrixSpec(m=m, n=n, seed=seed))
        b = skewed_column_matrix(
            SkewedColumnMatrixSpec(m=p, n=n, seed=seed + 1000, permutation_seed=seed)
        ).T
    else:
        raise ValueError(f"unknown matrix family: {family!r}")
    return a, b
