"""Configuration dataclasses for the estimator and its experiment sweeps.

Runners and plotting scripts share these typed containers so that CSV
columns and CLI flags stay consistent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Weighting(str, Enum):
    """How per-index sampling weights are derived from ``A`` and ``B``."""

    NORM = "norm"
    PAIRED_DOT = "paired_dot"
    UNIFORM = "uniform"


class MatrixFamily(str, Enum):
    """Synthetic matrix families used by the experiments."""

    GAUSSIAN = "gaussian"
    POSITIVE = "positive"
    LOW_RANK = "low_rank"
    SKEWED_COLUMNS = "skewed_columns"


@dataclass
class MatrixSize:
    """Matrix size triple (m, n, p) for products A(m×n) @ B(n×p)."""

    m: int
    n: int
    p: int


@dataclass
class SamplingConfig:
    """Parameters of a single sampled multiplication."""

    sample_count: int
    weighting: Weighting = Weighting.NORM
    seed: Optional[int] = None


# Sampling ratios s/n swept by default.
DEFAULT_SAMPLING_RATIOS = [0.01, 0.02, 0.05, 0.10, 0.20, 0.50]

DEFAULT_SIZES = [64, 128, 256, 512]

DEFAULT_NUM_TRIALS = 10

DEFAULT_SEED = 42


@dataclass
class ExperimentConfig:
    """Top-level configuration for an experiment suite."""

    sizes: List[MatrixSize]
    sampling_ratios: List[float]
    weightings: List[Weighting]
    families: List[MatrixFamily]
    num_trials: int
    seed: int
    error_size: MatrixSize = field(default_factory=lambda: MatrixSize(m=256, n=256, p=256))

    @classmethod
    def default(cls) -> "ExperimentConfig":
        """Build the configuration used when no CLI overrides are given."""

        return cls(
            sizes=[MatrixSize(m=n, n=n, p=n) for n in DEFAULT_SIZES],
            sampling_ratios=list(DEFAULT_SAMPLING_RATIOS),
            weightings=[Weighting.UNIFORM, Weighting.NORM, Weighting.PAIRED_DOT],
            families=list(MatrixFamily),
            num_trials=DEFAULT_NUM_TRIALS,
            seed=DEFAULT_SEED,
        )
