"""
Conversion of raw detector output into validated hand samples.

The detector is a black box; anything it hands over is checked here so
the rest of the pipeline only ever sees finite (21, 3) arrays. A sample
that fails the check is treated as "no hand", never as an error.
"""

import logging
from typing import List, Optional

import numpy as np

from handpose.core.types import HAND_SAMPLE_SHAPE, NUM_LANDMARKS

logger = logging.getLogger(__name__)

# Two hands at most: primary + secondary
MAX_HANDS = 2


def to_hand_sample(raw) -> Optional[np.ndarray]:
    """Convert one detected hand to a (21, 3) float array.

    Accepts a MediaPipe NormalizedLandmarkList (``.landmark`` sequence of
    objects with x/y/z), a sequence of 21 (x, y, z) triples, or an array.

    Returns:
        np.ndarray of shape (21, 3), or None if the sample is malformed
    """
    if raw is None:
        return None

    points = getattr(raw, "landmark", raw)
    try:
        if len(points) != NUM_LANDMARKS:
            logger.debug("Rejected hand sample with %d landmarks", len(points))
            return None
        if hasattr(points[0], "x"):
            sample = np.array([[p.x, p.y, p.z] for p in points], dtype=np.float64)
        else:
            sample = np.array(points, dtype=np.float64)
    except (TypeError, ValueError, AttributeError) as e:
        logger.debug("Rejected unreadable hand sample: %s", e)
        return None

    if sample.shape != HAND_SAMPLE_SHAPE:
        logger.debug("Rejected hand sample with shape %s", sample.shape)
        return None
    if not np.all(np.isfinite(sample)):
        logger.debug("Rejected hand sample with non-finite coordinates")
        return None

    return sample


def extract_hand_samples(results, max_hands: int = MAX_HANDS) -> List[Optional[np.ndarray]]:
    """Convert a MediaPipe results object into per-hand samples.

    Detector order is preserved: index 0 is the primary hand for this frame
    only. Malformed entries stay in place as None so the caller can tell a
    bad primary from a missing one.
    """
    if results is None:
        return []
    hands = getattr(results, "multi_hand_landmarks", None)
    if not hands:
        return []
    return [to_hand_sample(hand) for hand in list(hands)[:max_hands]]
