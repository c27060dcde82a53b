"""Dense matrix plumbing and flat-buffer conversion."""

from .codec import flatten, is_reconstruction_failure, reconstruct
from .dense import add, as_matrix, dot, exact_product, multiply_dense, transpose

__all__ = [
    "add",
    "as_matrix",
    "dot",
    "exact_product",
    "flatten",
    "is_reconstruction_failure",
    "multiply_dense",
    "reconstruct",
    "transpose",
]
