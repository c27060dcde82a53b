"""Approximate matrix products by importance-sampling outer products."""

from sampled_matmul.common.config import SamplingConfig, Weighting
from sampled_matmul.errors import (
    DegenerateDistribution,
    InvalidSampleCount,
    ReconstructionFailure,
    SampledMatmulError,
    ShapeMismatch,
)
from sampled_matmul.sampling.core import (
    SampledProductResult,
    mean_estimate,
    multiply,
    multiply_flat,
    multiply_with_details,
)

__all__ = [
    "DegenerateDistribution",
    "InvalidSampleCount",
    "ReconstructionFailure",
    "SampledMatmulError",
    "SampledProductResult",
    "SamplingConfig",
    "ShapeMismatch",
    "Weighting",
    "mean_estimate",
    "multiply",
    "multiply_flat",
    "multiply_with_details",
]
