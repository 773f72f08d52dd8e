"""
Pinch gesture detection and hand centroid.

The pinch threshold is in normalized camera-space units, so it does not
adapt to hand size or distance from the camera.
"""

import logging

import numpy as np

from handpose.core.types import LandmarkIndex
from handpose.modules.geometry.vector_math import distance

logger = logging.getLogger(__name__)

DEFAULT_PINCH_THRESHOLD = 0.05

# Palm triangle: stable under finger flexion, unlike a 21-point mean
CENTROID_LANDMARKS = [int(LandmarkIndex.WRIST), int(LandmarkIndex.INDEX_MCP), int(LandmarkIndex.PINKY_MCP)]


def compute_centroid(hand: np.ndarray) -> np.ndarray:
    """Mean of wrist, index MCP and pinky MCP landmarks (x, y, z)."""
    return np.mean(hand[CENTROID_LANDMARKS], axis=0)


def pinch_distance(hand: np.ndarray) -> float:
    """Thumb tip to index tip distance in landmark space."""
    return distance(hand[LandmarkIndex.THUMB_TIP], hand[LandmarkIndex.INDEX_TIP])


class GestureDetector:
    """Classifies the pinch ("grab") gesture from a single hand sample."""

    def __init__(self, config: dict):
        threshold = config.get("pinch_threshold", DEFAULT_PINCH_THRESHOLD)
        if not isinstance(threshold, (int, float)) or threshold <= 0:
            logger.warning("Invalid pinch_threshold %r, using %.2f",
                           threshold, DEFAULT_PINCH_THRESHOLD)
            threshold = DEFAULT_PINCH_THRESHOLD
        self._pinch_threshold = float(threshold)

    def detect_pinch(self, hand: np.ndarray) -> bool:
        """True when thumb and index tips are strictly closer than the threshold."""
        return pinch_distance(hand) < self._pinch_threshold

    @staticmethod
    def centroid(hand: np.ndarray) -> np.ndarray:
        return compute_centroid(hand)

    @property
    def pinch_threshold(self) -> float:
        return self._pinch_threshold
