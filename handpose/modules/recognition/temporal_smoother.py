"""
Per-tick temporal smoothing of the object pose.

Advances one persistent SmoothedPose toward the latest HandFrame:
    - scale eases exponentially toward base * zoom (or 0 when hidden)
    - position follows only while pinched, with distance-adaptive gain
    - rotation composes hand * (manual + auto offset) and slerps at fixed gain

HandFrames must arrive in frame order; the adaptive gain depends on the
distance from the previous state.
"""

import math
import logging
from typing import Optional

from handpose.core.types import HandFrame, SmoothedPose
from handpose.modules.geometry import quaternion
from handpose.modules.geometry.vector_math import distance, lerp
from handpose.modules.utils.config import coerce_number, numeric_option

logger = logging.getLogger(__name__)

DEFAULT_BASE_OBJECT_SCALE = 1.0


class TemporalSmoother:
    """Stateful pose filter with a single update entry point.

    The pose is created once and mutated in place; it is only replaced by
    ``reset()`` (session restart).
    """

    def __init__(self, config: dict, base_object_scale: float = DEFAULT_BASE_OBJECT_SCALE):
        self._scale_rate = numeric_option(config, "scale_rate", 5.0, minimum=0.0)
        self._slerp_factor = numeric_option(config, "rotation_slerp_factor", 0.1, minimum=0.0, maximum=1.0)
        self._manual_rate = numeric_option(config, "manual_rotation_rate", 2.0)
        self._auto_factor = numeric_option(config, "auto_rotate_factor", 0.02)

        gains = config.get("position_gains", {})
        self._gain_far = numeric_option(gains, "far", 0.4, minimum=0.0, maximum=1.0)
        self._gain_mid = numeric_option(gains, "mid", 0.2, minimum=0.0, maximum=1.0)
        self._gain_near = numeric_option(gains, "near", 0.05, minimum=0.0, maximum=1.0)

        thresholds = config.get("position_thresholds", {})
        self._far_distance = numeric_option(thresholds, "far", 0.5, minimum=0.0)
        self._mid_distance = numeric_option(thresholds, "mid", 0.1, minimum=0.0)

        self._base_object_scale = DEFAULT_BASE_OBJECT_SCALE
        self.base_object_scale = base_object_scale
        self._pose = SmoothedPose()
        self._tick_count = 0

    def position_gain(self, dist: float) -> float:
        """Three-tier lerp gain: fast when far, gentle near rest."""
        if dist > self._far_distance:
            return self._gain_far
        if dist > self._mid_distance:
            return self._gain_mid
        return self._gain_near

    def update(self, target: Optional[HandFrame], is_visible: bool, elapsed: float,
               auto_rotate_enabled: bool = False,
               auto_rotate_speed_percent: float = 0.0) -> SmoothedPose:
        """Advance the pose by one render tick.

        Args:
            target: latest HandFrame, or None when no primary hand is present
            is_visible: whether the object should be shown
            elapsed: seconds since the previous tick
            auto_rotate_enabled: accumulate continuous Y rotation
            auto_rotate_speed_percent: autorotate speed, 0-100

        Returns:
            The live SmoothedPose (mutated in place)
        """
        if not math.isfinite(elapsed) or elapsed < 0:
            logger.debug("Ignoring invalid elapsed time %r", elapsed)
            elapsed = 0.0

        self._tick_count += 1
        pose = self._pose

        # --- Scale: eases toward zero when hidden, never overshoots ---
        zoom = target.extra_scale if target is not None else 1.0
        target_scale = self._base_object_scale * zoom if is_visible else 0.0
        step = min(elapsed * self._scale_rate, 1.0)
        pose.scale += (target_scale - pose.scale) * step

        if target is None:
            return pose

        # --- Position: follows only while grabbed ---
        if target.is_pinched and is_visible:
            gain = self.position_gain(distance(pose.position, target.position))
            pose.position = lerp(pose.position, target.position, gain)

        # --- Rotation ---
        if is_visible:
            if target.extra_rotation is not None:
                pose.manual_rotation = (
                    pose.manual_rotation + target.extra_rotation * elapsed * self._manual_rate
                )
            if auto_rotate_enabled:
                pose.auto_rotation_y += elapsed * auto_rotate_speed_percent * self._auto_factor

            offset = quaternion.from_euler(
                pose.manual_rotation[0],
                pose.manual_rotation[1] + pose.auto_rotation_y,
                0.0,
            )
            # Hand first, then the accumulated offset in the hand's frame
            final_target = quaternion.normalize(quaternion.multiply(target.rotation, offset))
            if final_target is None:
                logger.debug("Non-finite rotation target, holding rotation")
            else:
                pose.rotation = quaternion.slerp(pose.rotation, final_target, self._slerp_factor)

        return pose

    @property
    def pose(self) -> SmoothedPose:
        return self._pose

    @property
    def base_object_scale(self) -> float:
        return self._base_object_scale

    @base_object_scale.setter
    def base_object_scale(self, value: float):
        """Non-numeric values keep the current scale; negatives become 0."""
        self._base_object_scale = coerce_number(
            "base_object_scale", value, self._base_object_scale, minimum=0.0)

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def reset(self):
        """Start a new session: identity rotation, zero position and scale."""
        self._pose = SmoothedPose()
        self._tick_count = 0
