"""
Debug overlay that draws the smoothed object pose on the camera frame:
projected object axes, scale ring, secondary pointer and a status bar.

Draws on the unmirrored camera image so it lines up with the detector's
landmarks; mirror the finished frame for display if desired.
"""

import logging
import cv2
import numpy as np

from handpose.core.types import SmoothedPose, WorldScaleContext
from handpose.modules.geometry import quaternion

logger = logging.getLogger(__name__)

_AXES = (
    (np.array([1.0, 0.0, 0.0]), (0, 0, 255)),   # x red
    (np.array([0.0, 1.0, 0.0]), (0, 255, 0)),   # y green
    (np.array([0.0, 0.0, 1.0]), (255, 0, 0)),   # z blue
)


def world_to_pixel(point, world_scale: WorldScaleContext, width: int, height: int) -> tuple:
    """Inverse of the pipeline's normalized -> world mapping (z ignored)."""
    nx = 0.5 - point[0] / world_scale.scale_x
    ny = 0.5 - point[1] / world_scale.scale_y
    return int(round(nx * width)), int(round(ny * height))


class PoseOverlay:
    """Renders the pose overlay and status bar."""

    def __init__(self, config: dict):
        self._show_axes = config.get("show_axes", True)
        self._show_pointer = config.get("show_pointer", True)
        self._show_status = config.get("show_status", True)
        self._axis_length = config.get("axis_length", 1.0)
        self._bar_height = config.get("status_bar_height", 36)
        self._bar_opacity = config.get("status_bar_opacity", 0.6)

        colors = config.get("colors", {})
        self._color_text = tuple(colors.get("text", [255, 255, 255]))
        self._color_pinched = tuple(colors.get("pinched", [0, 200, 255]))
        self._color_released = tuple(colors.get("released", [200, 200, 200]))
        self._color_pointer = tuple(colors.get("pointer", [255, 0, 255]))

    def render(self, frame: np.ndarray, pose: SmoothedPose,
               world_scale: WorldScaleContext, state: dict) -> np.ndarray:
        """Draw the overlay in place and return the frame."""
        h, w = frame.shape[:2]
        center = world_to_pixel(pose.position, world_scale, w, h)

        if pose.scale > 1e-3:
            px_per_unit = w / world_scale.scale_x
            ring_color = self._color_pinched if state.get("pinched") else self._color_released
            radius = max(int(pose.scale * px_per_unit * 0.5), 2)
            cv2.circle(frame, center, radius, ring_color, 2)

            if self._show_axes:
                self._draw_axes(frame, pose, world_scale, center)

        pointer = state.get("secondary_pointer")
        if self._show_pointer and pointer is not None:
            cv2.circle(frame, world_to_pixel(pointer, world_scale, w, h), 8,
                       self._color_pointer, -1)

        if self._show_status:
            self._draw_status(frame, w, pose, state)

        return frame

    def _draw_axes(self, frame, pose, world_scale, center):
        h, w = frame.shape[:2]
        for axis, color in _AXES:
            tip = pose.position + quaternion.rotate_vector(pose.rotation, axis) \
                * self._axis_length * pose.scale
            cv2.line(frame, center, world_to_pixel(tip, world_scale, w, h), color, 3)

    def _draw_status(self, frame, w, pose, state):
        overlay = frame.copy()
        cv2.rectangle(overlay, (0, 0), (w, self._bar_height), (20, 20, 20), -1)
        cv2.addWeighted(overlay, self._bar_opacity, frame, 1 - self._bar_opacity, 0, frame)

        if state.get("paused"):
            text = "SLEEP  (press s to resume)"
        else:
            text = (
                f"FPS {state.get('fps', 0):.0f}  "
                f"hands {state.get('hand_count', 0)}  "
                f"{'PINCH' if state.get('pinched') else 'open'}  "
                f"zoom {state.get('extra_scale', 1.0):.2f}  "
                f"scale {pose.scale:.2f}  "
                f"auto {'on' if state.get('auto_rotate') else 'off'}"
                f"({state.get('auto_rotate_speed', 0)}%)"
            )
        cv2.putText(frame, text, (10, self._bar_height - 12),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.55, self._color_text, 1, cv2.LINE_AA)
