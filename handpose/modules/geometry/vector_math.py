"""
Vector primitives for landmark geometry.

All functions are pure and operate on numpy float arrays. Degenerate
inputs never raise: normalization of a near-zero vector yields the zero
vector, and callers check with ``is_degenerate``.
"""

from typing import Optional

import numpy as np

# Below this length a direction is considered undefined
EPSILON = 1e-9


def as_vec(v) -> np.ndarray:
    return np.asarray(v, dtype=np.float64)


def length(v) -> float:
    return float(np.linalg.norm(v))


def distance(a, b) -> float:
    """Euclidean distance between two points of equal dimension."""
    return float(np.linalg.norm(as_vec(a) - as_vec(b)))


def is_degenerate(v) -> bool:
    """True for vectors too short (or non-finite) to carry a direction."""
    v = as_vec(v)
    if not np.all(np.isfinite(v)):
        return True
    return length(v) < EPSILON


def normalize(v) -> np.ndarray:
    """Unit vector along ``v``, or the zero vector when ``|v| ~ 0``."""
    v = as_vec(v)
    if is_degenerate(v):
        return np.zeros_like(v)
    return v / np.linalg.norm(v)


def lerp(v1, v2, t: float) -> np.ndarray:
    """Componentwise linear interpolation."""
    v1 = as_vec(v1)
    return v1 + (as_vec(v2) - v1) * t


def basis_from_vectors(forward, side) -> Optional[np.ndarray]:
    """Build the palm basis matrix with columns (side, up, forward).

    ``forward`` and ``side`` are normalized independently, not
    orthogonalized against each other; ``up`` is the negated normal
    ``-normalize(forward x side)``. Returns None when either input or the
    normal is degenerate (parallel or zero-length vectors).
    """
    f = normalize(forward)
    s = normalize(side)
    if is_degenerate(f) or is_degenerate(s):
        return None

    normal = normalize(np.cross(f, s))
    if is_degenerate(normal):
        return None

    return np.column_stack((s, -normal, f))
