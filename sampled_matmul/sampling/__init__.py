"""Sampled matrix multiplication package exports."""

from .builder import SampledFactors, build_sampled_factors
from .core import SampledProductResult, mean_estimate, multiply, multiply_flat, multiply_with_details
from .probabilities import build_probabilities
from .sampler import default_uniform, draw_index, draw_indices, sequence_uniform

__all__ = [
    "SampledFactors",
    "SampledProductResult",
    "build_probabilities",
    "build_sampled_factors",
    "default_uniform",
    "draw_index",
    "draw_indices",
    "mean_estimate",
    "multiply",
    "multiply_flat",
    "multiply_with_details",
    "sequence_uniform",
]
