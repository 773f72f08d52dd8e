"""
Single-hand orientation from three anatomical vectors.

The basis is an approximation: forward (wrist -> middle MCP) and side
(index MCP -> pinky MCP) are normalized independently and not
orthogonalized. No smoothing happens here; the estimate is the raw
per-frame measurement.
"""

import logging
from typing import Optional

import numpy as np

from handpose.core.types import LandmarkIndex
from handpose.modules.geometry import quaternion
from handpose.modules.geometry.vector_math import basis_from_vectors

logger = logging.getLogger(__name__)


def estimate_orientation(hand: np.ndarray) -> Optional[np.ndarray]:
    """Hand orientation in camera space as a unit quaternion.

    Returns:
        [x, y, z, w] quaternion, or None when the landmarks are degenerate
    """
    forward = hand[LandmarkIndex.MIDDLE_MCP] - hand[LandmarkIndex.WRIST]
    side = hand[LandmarkIndex.PINKY_MCP] - hand[LandmarkIndex.INDEX_MCP]
    return quaternion.from_basis(basis_from_vectors(forward, side))


class OrientationEstimator:
    """Wraps ``estimate_orientation`` and holds the last valid result.

    Coincident or collinear landmarks leave the previous orientation in
    place (identity before the first valid estimate).
    """

    def __init__(self):
        self._last_valid = quaternion.identity()
        self._degenerate_count = 0

    def estimate(self, hand: np.ndarray) -> np.ndarray:
        q = estimate_orientation(hand)
        if q is None:
            self._degenerate_count += 1
            logger.debug("Degenerate hand basis, holding previous orientation (%d total)",
                         self._degenerate_count)
            return self._last_valid.copy()
        self._last_valid = q
        return q.copy()

    @property
    def last_valid(self) -> np.ndarray:
        return self._last_valid.copy()

    @property
    def degenerate_count(self) -> int:
        return self._degenerate_count

    def reset(self):
        self._last_valid = quaternion.identity()
        self._degenerate_count = 0
