"""Error kinds raised by the sampled matrix multiplication routines.

Every error derives from ``ValueError`` so callers that already guard
NumPy-style input validation keep working, while callers that care can
distinguish the individual failure modes.
"""

from __future__ import annotations


class SampledMatmulError(ValueError):
    """Base class for all sampled-multiplication failures."""


class ShapeMismatch(SampledMatmulError):
    """Inputs are not rectangular 2D matrices or cannot be paired/multiplied."""


class ReconstructionFailure(SampledMatmulError):
    """A flat buffer could not be partitioned into rows of the declared length."""


class DegenerateDistribution(SampledMatmulError):
    """Sampling weights cannot be normalised into a probability distribution."""


class InvalidSampleCount(SampledMatmulError):
    """The number of samples ``s`` is not a positive integer."""
