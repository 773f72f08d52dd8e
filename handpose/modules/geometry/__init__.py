"""Vector and quaternion primitives."""
from . import quaternion
from .vector_math import (
    basis_from_vectors,
    distance,
    is_degenerate,
    lerp,
    normalize,
)

__all__ = [
    "quaternion",
    "basis_from_vectors",
    "distance",
    "is_degenerate",
    "lerp",
    "normalize",
]
