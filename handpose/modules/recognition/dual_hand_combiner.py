"""
Merges the primary hand's pose with the secondary hand's differential
signals into one HandFrame.

Primary hand:   world position (mirrored), orientation, pinch.
Secondary hand: pointer (index tip), extra rotation from the centroid
                offset between hands, zoom from the inter-hand distance.
"""

import logging
from typing import Optional

import numpy as np

from handpose.core.types import HandFrame, LandmarkIndex, WorldScaleContext
from handpose.modules.recognition.gesture_detector import GestureDetector, compute_centroid
from handpose.modules.recognition.orientation_estimator import OrientationEstimator
from handpose.modules.utils.config import numeric_option

logger = logging.getLogger(__name__)


def apply_deadzone(value: float, deadzone: float, gain: float = 2.0) -> float:
    """Zero inside ``|value| <= deadzone``, linear ramp from the edge outside."""
    if abs(value) > deadzone:
        return (abs(value) - deadzone) * float(np.sign(value)) * gain
    return 0.0


def compute_extra_scale(hand_distance: float, gain: float = 3.0,
                        min_scale: float = 0.5, max_scale: float = 2.5) -> float:
    """Inter-hand distance -> zoom factor, clamped to [min_scale, max_scale]."""
    return float(min(max(hand_distance * gain, min_scale), max_scale))


class DualHandCombiner:
    """Builds a HandFrame from a primary and an optional secondary hand.

    Hand order comes from the detector and is not tracked across frames;
    whichever hand is listed first is primary for that frame.
    """

    def __init__(self, config: dict,
                 gesture_detector: Optional[GestureDetector] = None,
                 orientation_estimator: Optional[OrientationEstimator] = None):
        self._deadzone = numeric_option(config, "deadzone", 0.2, minimum=0.0)
        self._differential_gain = numeric_option(config, "differential_gain", 2.0)
        self._rotation_gain = numeric_option(config, "rotation_gain", 2.0)
        self._zoom_gain = numeric_option(config, "zoom_gain", 3.0)
        self._min_scale = numeric_option(config, "min_extra_scale", 0.5)
        self._max_scale = numeric_option(config, "max_extra_scale", 2.5)

        if self._min_scale > self._max_scale:
            logger.warning("min_extra_scale %.2f > max_extra_scale %.2f, swapping",
                           self._min_scale, self._max_scale)
            self._min_scale, self._max_scale = self._max_scale, self._min_scale

        self._gestures = gesture_detector or GestureDetector(config)
        self._orientation = orientation_estimator or OrientationEstimator()

    def combine(self, primary: np.ndarray, secondary: Optional[np.ndarray],
                world_scale: WorldScaleContext) -> HandFrame:
        """Build the HandFrame for one detector frame.

        Args:
            primary: (21, 3) landmarks of the primary hand
            secondary: (21, 3) landmarks of the second hand, or None
            world_scale: current normalized -> world mapping

        Returns:
            HandFrame with z = 0 positions
        """
        c1 = compute_centroid(primary)
        position = world_scale.to_world(c1[0], c1[1])
        rotation = self._orientation.estimate(primary)
        is_pinched = self._gestures.detect_pinch(primary)

        if secondary is None:
            return HandFrame(
                position=position,
                rotation=rotation,
                is_pinched=is_pinched,
                extra_rotation=np.zeros(2),
                extra_scale=1.0,
                secondary_pointer=None,
            )

        c2 = compute_centroid(secondary)
        tip = secondary[LandmarkIndex.INDEX_TIP]
        pointer = world_scale.to_world(tip[0], tip[1])

        dx, dy = (c2[:2] - c1[:2]) * self._differential_gain
        # Horizontal offset spins about Y, vertical offset tilts about X
        extra_rotation = np.array([
            apply_deadzone(dy, self._deadzone, self._rotation_gain),
            apply_deadzone(dx, self._deadzone, self._rotation_gain),
        ])

        hand_distance = float(np.linalg.norm(c2[:2] - c1[:2]))
        extra_scale = compute_extra_scale(
            hand_distance, self._zoom_gain, self._min_scale, self._max_scale
        )

        return HandFrame(
            position=position,
            rotation=rotation,
            is_pinched=is_pinched,
            extra_rotation=extra_rotation,
            extra_scale=extra_scale,
            secondary_pointer=pointer,
        )

    @property
    def deadzone(self) -> float:
        return self._deadzone

    @property
    def orientation_estimator(self) -> OrientationEstimator:
        return self._orientation

    @property
    def gesture_detector(self) -> GestureDetector:
        return self._gestures
