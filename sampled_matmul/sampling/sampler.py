"""Weighted index sampling driven by an injected uniform source.

A *uniform source* is any zero-argument callable returning a float in
``[0, 1)``. Nothing here touches a global random state: callers either pass
their own source or get a fresh generator from ``default_uniform``.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

import numpy as np
from numpy.typing import NDArray

from sampled_matmul.errors import DegenerateDistribution, InvalidSampleCount

UniformSource = Callable[[], float]


def default_uniform(seed: Optional[int] = None) -> UniformSource:
    """Return the ``random`` method of a new ``numpy.random.Generator``."""

    return np.random.default_rng(seed).random


def sequence_uniform(values: Iterable[float]) -> UniformSource:
    """Replay a fixed sequence of uniform draws, for deterministic tests."""

    it = iter(list(values))

    def _next() -> float:
        try:
            return float(next(it))
        except StopIteration:
            raise ValueError("sequence_uniform exhausted") from None

    return _next


def validate_sample_count(s: object) -> int:
    """Return ``s`` as an ``int`` or raise ``InvalidSampleCount``."""

    if isinstance(s, (bool, np.bool_)) or not isinstance(s, (int, np.integer)):
        raise InvalidSampleCount(f"sample count must be an integer, got {s!r}")
    if s <= 0:
        raise InvalidSampleCount(f"sample count must be positive, got {s}")
    return int(s)


def draw_index(probabilities: NDArray[np.floating], uniform: UniformSource) -> int:
    """Draw one index from the discrete distribution ``probabilities``.

    A single value ``r`` is taken from ``uniform``; the result is the first
    index whose inclusive cumulative probability exceeds ``r``. When rounding
    leaves the total just below ``r`` the last index with non-zero
    probability is returned, so the result is always a valid, reachable
    index.

    Raises
    ------
    ValueError
        If ``uniform`` returns a value outside ``[0, 1)``.
    DegenerateDistribution
        If ``probabilities`` is empty or has no positive entry.
    """

    if probabilities.shape[0] == 0:
        raise DegenerateDistribution("cannot sample from an empty probability vector")
    r = float(uniform())
    if not 0.0 <= r < 1.0:
        raise ValueError(f"uniform source returned {r!r}, expected a value in [0, 1)")

    cumulative = np.cumsum(probabilities, dtype=np.float64)
    index = int(np.searchsorted(cumulative, r, side="right"))
    if index < probabilities.shape[0]:
        return index

    positive = np.flatnonzero(probabilities > 0.0)
    if positive.shape[0] == 0:
        raise DegenerateDistribution("probability vector has no positive entry")
    return int(positive[-1])


def draw_indices(
    probabilities: NDArray[np.floating],
    s: int,
    uniform: UniformSource,
) -> NDArray[np.int64]:
    """Draw ``s`` independent indices with replacement, in draw order."""

    s = validate_sample_count(s)
    indices = np.empty(s, dtype=np.int64)
    for i in range(s):
        indices[i] = draw_index(probabilities, uniform)
    return indices
