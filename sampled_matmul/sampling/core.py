r"""Sampled matrix multiplication end to end.

Approximates ``C = A @ B`` for ``A`` of shape ``(m, n)`` and ``B`` of shape
``(n, p)`` by

1. building a distribution ``p_k`` over the shared dimension,
2. drawing ``s`` indices with replacement,
3. gathering the sampled columns of ``A`` and the sampled rows of ``B``
   rescaled by ``1 / (s p_k)``,
4. multiplying the resulting ``(m, s)`` and ``(s, p)`` factors exactly.

The cost of the final multiply is ``O(m s p)`` instead of ``O(m n p)``.
All routines raise the explicit errors of :mod:`sampled_matmul.errors` on
bad shapes, sample counts or degenerate distributions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
from numpy.typing import NDArray

from sampled_matmul.common.config import SamplingConfig, Weighting
from sampled_matmul.common.logging_utils import get_logger
from sampled_matmul.errors import ReconstructionFailure, ShapeMismatch
from sampled_matmul.linalg.codec import is_reconstruction_failure, reconstruct
from sampled_matmul.linalg.dense import add, as_matrix, exact_product, multiply_dense, transpose
from sampled_matmul.sampling.builder import SampledFactors, build_sampled_factors
from sampled_matmul.sampling.probabilities import build_probabilities
from sampled_matmul.sampling.sampler import (
    UniformSource,
    default_uniform,
    draw_indices,
    validate_sample_count,
)

FloatArray = NDArray[np.floating]

logger = get_logger(__name__)


@dataclass
class SampledProductResult:
    """Approximate product together with the sampling metadata.

    Attributes
    ----------
    estimate : ndarray
        The approximate product ``\tilde{C}`` with shape ``(m, p)``.
    indices : ndarray
        Drawn shared-dimension indices, length ``s``.
    probabilities : ndarray
        Distribution the indices were drawn from, length ``n``.
    factors : SampledFactors
        The reduced ``(m, s)`` and ``(s, p)`` factors.
    """

    estimate: FloatArray
    indices: np.ndarray
    probabilities: np.ndarray
    factors: SampledFactors


def _validate_inputs(a: FloatArray, b: FloatArray) -> None:
    if a.shape[1] != b.shape[0]:
        raise ShapeMismatch(
            f"incompatible shapes for matmul: a{a.shape}, b{b.shape} (a.shape[1] != b.shape[0])"
        )


def multiply_with_details(
    a: Any,
    b: Any,
    s: int,
    *,
    weighting: Weighting = Weighting.NORM,
    uniform: Optional[UniformSource] = None,
    seed: Optional[int] = None,
) -> SampledProductResult:
    """Sampled multiplication returning the estimate and its metadata.

    Parameters
    ----------
    a, b:
        Input matrices with shapes ``(m, n)`` and ``(n, p)``; anything
        convertible to a rectangular 2D array.
    s:
        Number of sampled outer products. Must be a positive integer.
    weighting:
        How the sampling distribution is built.
    uniform:
        Source of uniform ``[0, 1)`` draws. Defaults to a fresh generator
        seeded with ``seed``.
    seed:
        Seed for the default generator; ignored when ``uniform`` is given.

    Returns
    -------
    SampledProductResult
        Approximate product and sampling metadata.
    """

    s = validate_sample_count(s)
    a = as_matrix(a, "a")
    b = as_matrix(b, "b")
    _validate_inputs(a, b)
    if uniform is None:
        uniform = default_uniform(seed)

    weighting = Weighting(weighting)
    logger.debug(
        "sampled multiply: a%s @ b%s with s=%d, weighting=%s", a.shape, b.shape, s, weighting.value
    )

    a_columns = transpose(a)
    probabilities = build_probabilities(a, b, weighting)
    indices = draw_indices(probabilities, s, uniform)
    factors = build_sampled_factors(a_columns, b, probabilities, indices)
    estimate = multiply_dense(factors.left, factors.right)

    return SampledProductResult(
        estimate=estimate,
        indices=indices,
        probabilities=probabilities,
        factors=factors,
    )


def multiply(
    a: Any,
    b: Any,
    s: int,
    *,
    weighting: Weighting = Weighting.NORM,
    uniform: Optional[UniformSource] = None,
    seed: Optional[int] = None,
) -> FloatArray:
    """Approximate ``A @ B`` from ``s`` sampled outer products.

    See :func:`multiply_with_details` for the parameters. Only the
    ``(m, p)`` estimate is returned.
    """

    return multiply_with_details(a, b, s, weighting=weighting, uniform=uniform, seed=seed).estimate


def multiply_flat(
    flat_a: Any,
    flat_b: Any,
    len_a: int,
    len_b: int,
    height_a: int,
    height_b: int,
    s: int,
    *,
    weighting: Weighting = Weighting.NORM,
    uniform: Optional[UniformSource] = None,
    seed: Optional[int] = None,
) -> FloatArray:
    """Sampled multiplication of two matrices given as flat row-major buffers.

    ``len_*`` is the number of leading buffer entries that belong to each
    matrix and ``height_*`` the number of entries per row.

    Raises
    ------
    ReconstructionFailure
        If either buffer cannot be split into whole rows.
    """

    s = validate_sample_count(s)
    a = reconstruct(flat_a, len_a, height_a)
    if is_reconstruction_failure(a):
        raise ReconstructionFailure(
            f"cannot rebuild a: length {len_a} is not a positive multiple of row height {height_a}"
        )
    b = reconstruct(flat_b, len_b, height_b)
    if is_reconstruction_failure(b):
        raise ReconstructionFailure(
            f"cannot rebuild b: length {len_b} is not a positive multiple of row height {height_b}"
        )
    return multiply(a, b, s, weighting=weighting, uniform=uniform, seed=seed)


def multiply_from_config(a: Any, b: Any, config: SamplingConfig) -> FloatArray:
    """Run :func:`multiply` with parameters taken from a ``SamplingConfig``."""

    return multiply(a, b, config.sample_count, weighting=config.weighting, seed=config.seed)


def mean_estimate(
    a: Any,
    b: Any,
    s: int,
    runs: int,
    *,
    weighting: Weighting = Weighting.NORM,
    seed: Optional[int] = None,
) -> FloatArray:
    """Average of ``runs`` independent sampled estimates of ``A @ B``.

    All runs share one generator seeded with ``seed``, so the average is
    reproducible while the individual draws stay independent.
    """

    if runs <= 0:
        raise ValueError("runs must be positive")
    uniform = default_uniform(seed)
    total = multiply(a, b, s, weighting=weighting, uniform=uniform)
    for _ in range(runs - 1):
        total = add(total, multiply(a, b, s, weighting=weighting, uniform=uniform))
    return total / float(runs)


def _self_test(num_trials: int = 200, seed: int = 0) -> None:
    """Monte Carlo check that every weighting is approximately unbiased."""

    rng = np.random.default_rng(seed)
    m, n, p = 6, 5, 6
    a = rng.uniform(0.1, 1.0, size=(m, n))
    b = rng.uniform(0.1, 1.0, size=(n, p))
    exact = exact_product(a, b)
    s = max(2, n // 2)

    for weighting in Weighting:
        mean = mean_estimate(a, b, s, num_trials, weighting=weighting, seed=int(rng.integers(0, 1_000_000)))
        err = np.linalg.norm(mean - exact, ord="fro") / np.linalg.norm(exact, ord="fro")
        assert err < 0.1, f"{weighting.value} mean error too large: {err!r}"


if __name__ == "__main__":  # pragma: no cover - manual quick check
    _self_test()
