"""
Quaternion primitives in [x, y, z, w] order.

Every entry point guards against NaN propagation: conversions that
cannot produce a valid rotation return None, and interpolation with a
non-finite operand returns the first operand unchanged.
"""

import math
from typing import Optional

import numpy as np

from handpose.core.types import IDENTITY_QUATERNION

# Norm tolerance for unit quaternions
UNIT_TOLERANCE = 1e-6

# Above this cosine the two rotations are treated as identical (nlerp)
_SLERP_LINEAR_THRESHOLD = 0.9995


def identity() -> np.ndarray:
    return IDENTITY_QUATERNION.copy()


def is_valid(q) -> bool:
    """Finite 4-vector with unit norm."""
    q = np.asarray(q, dtype=np.float64)
    if q.shape != (4,) or not np.all(np.isfinite(q)):
        return False
    return abs(float(np.linalg.norm(q)) - 1.0) <= UNIT_TOLERANCE


def normalize(q) -> Optional[np.ndarray]:
    q = np.asarray(q, dtype=np.float64)
    if not np.all(np.isfinite(q)):
        return None
    n = float(np.linalg.norm(q))
    if n < 1e-12:
        return None
    return q / n


def from_basis(basis) -> Optional[np.ndarray]:
    """Rotation matrix (basis vectors as columns) -> unit quaternion.

    Uses the trace when it is positive, otherwise branches on the largest
    diagonal element to stay numerically stable near 180 degree rotations.
    The result is renormalized, so slightly non-orthogonal or reflected
    bases still yield a unit quaternion.
    """
    if basis is None:
        return None
    m = np.asarray(basis, dtype=np.float64)
    if m.shape != (3, 3) or not np.all(np.isfinite(m)):
        return None

    m11, m12, m13 = m[0]
    m21, m22, m23 = m[1]
    m31, m32, m33 = m[2]
    trace = m11 + m22 + m33

    if trace > 0:
        s = 0.5 / math.sqrt(trace + 1.0)
        w = 0.25 / s
        x = (m32 - m23) * s
        y = (m13 - m31) * s
        z = (m21 - m12) * s
    elif m11 > m22 and m11 > m33:
        s = 2.0 * math.sqrt(1.0 + m11 - m22 - m33)
        w = (m32 - m23) / s
        x = 0.25 * s
        y = (m12 + m21) / s
        z = (m13 + m31) / s
    elif m22 > m33:
        s = 2.0 * math.sqrt(1.0 + m22 - m11 - m33)
        w = (m13 - m31) / s
        x = (m12 + m21) / s
        y = 0.25 * s
        z = (m23 + m32) / s
    else:
        s = 2.0 * math.sqrt(1.0 + m33 - m11 - m22)
        w = (m21 - m12) / s
        x = (m13 + m31) / s
        y = (m23 + m32) / s
        z = 0.25 * s

    return normalize(np.array([x, y, z, w]))


def multiply(a, b) -> np.ndarray:
    """Hamilton product ``a * b`` (apply ``b`` first, then ``a``)."""
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return np.array([
        ax * bw + aw * bx + ay * bz - az * by,
        ay * bw + aw * by + az * bx - ax * bz,
        az * bw + aw * bz + ax * by - ay * bx,
        aw * bw - ax * bx - ay * by - az * bz,
    ])


def from_euler(x: float, y: float, z: float = 0.0) -> np.ndarray:
    """Euler angles (radians, XYZ order) -> quaternion."""
    c1, c2, c3 = math.cos(x / 2), math.cos(y / 2), math.cos(z / 2)
    s1, s2, s3 = math.sin(x / 2), math.sin(y / 2), math.sin(z / 2)
    return np.array([
        s1 * c2 * c3 + c1 * s2 * s3,
        c1 * s2 * c3 - s1 * c2 * s3,
        c1 * c2 * s3 + s1 * s2 * c3,
        c1 * c2 * c3 - s1 * s2 * s3,
    ])


def rotate_vector(q, v) -> np.ndarray:
    """Rotate vec3 ``v`` by unit quaternion ``q``."""
    q = np.asarray(q, dtype=np.float64)
    u = q[:3]
    w = q[3]
    v = np.asarray(v, dtype=np.float64)
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def angle_between(q1, q2) -> float:
    """Smallest rotation angle (radians) taking ``q1`` to ``q2``."""
    d = abs(float(np.dot(q1, q2)))
    return 2.0 * math.acos(min(1.0, d))


def slerp(q1, q2, t: float) -> np.ndarray:
    """Shortest-path spherical interpolation, ``t`` clamped to [0, 1].

    ``q2`` is negated when needed so the path never takes the long way
    around the double cover.
    """
    q1 = np.asarray(q1, dtype=np.float64)
    q2 = np.asarray(q2, dtype=np.float64)
    if not (np.all(np.isfinite(q1)) and np.all(np.isfinite(q2))) or not math.isfinite(t):
        return q1.copy()

    t = min(max(t, 0.0), 1.0)
    if t == 0.0:
        return q1.copy()

    cos_half = float(np.dot(q1, q2))
    if cos_half < 0.0:
        q2 = -q2
        cos_half = -cos_half

    if cos_half > _SLERP_LINEAR_THRESHOLD:
        result = normalize(q1 + (q2 - q1) * t)
        return q1.copy() if result is None else result

    half_theta = math.acos(min(1.0, cos_half))
    sin_half = math.sin(half_theta)
    ratio_a = math.sin((1.0 - t) * half_theta) / sin_half
    ratio_b = math.sin(t * half_theta) / sin_half
    result = normalize(q1 * ratio_a + q2 * ratio_b)
    return q1.copy() if result is None else result
