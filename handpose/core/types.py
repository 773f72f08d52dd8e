"""
Shared domain types for the hand pose pipeline.

Centralizes landmark indices and the data containers passed between the
recognition stages, the smoother and the renderer, so modules do not
import each other just for their types.
"""

import math
from enum import IntEnum
from typing import Optional

import numpy as np


# =============================================================================
# Landmarks
# =============================================================================

NUM_LANDMARKS = 21


class LandmarkIndex(IntEnum):
    """Hand landmark indices following MediaPipe convention."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


# A HandSample is a (21, 3) float array of normalized (x, y, z) landmarks.
# Produced fresh by the detector every frame; never mutated by the pipeline.
HAND_SAMPLE_SHAPE = (NUM_LANDMARKS, 3)

IDENTITY_QUATERNION = np.array([0.0, 0.0, 0.0, 1.0])


# =============================================================================
# Viewport mapping
# =============================================================================

class WorldScaleContext:
    """Maps normalized camera coordinates to world units.

    Supplied by the viewport collaborator and replaced on resize.
    """

    __slots__ = ("scale_x", "scale_y")

    def __init__(self, scale_x: float = 1.0, scale_y: float = 1.0):
        self.scale_x = float(scale_x)
        self.scale_y = float(scale_y)

    @classmethod
    def from_viewport(cls, width: float, height: float,
                      camera_z: float = 10.0, fov_deg: float = 50.0) -> 'WorldScaleContext':
        """Visible world extent at z=0 for a perspective camera at ``camera_z``."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Viewport must be positive, got {width}x{height}")
        world_height = 2.0 * camera_z * math.tan(math.radians(fov_deg) / 2.0)
        return cls(scale_x=world_height * (width / height), scale_y=world_height)

    def to_world(self, x: float, y: float) -> np.ndarray:
        """Normalized (x, y) -> world (x, y, 0), mirrored for a selfie feed."""
        return np.array([(0.5 - x) * self.scale_x, (0.5 - y) * self.scale_y, 0.0])

    def __eq__(self, other):
        if not isinstance(other, WorldScaleContext):
            return NotImplemented
        return self.scale_x == other.scale_x and self.scale_y == other.scale_y

    def __repr__(self):
        return f"WorldScaleContext(x={self.scale_x:.3f}, y={self.scale_y:.3f})"


# =============================================================================
# Per-frame measurement
# =============================================================================

class HandFrame:
    """Instantaneous hand measurement for one detector frame.

    Recomputed every frame, no identity across frames. ``rotation`` is a
    unit quaternion [x, y, z, w]; ``extra_scale`` stays within the
    combiner's clamp range.
    """

    __slots__ = (
        "position", "rotation", "is_pinched",
        "extra_rotation", "extra_scale", "secondary_pointer",
    )

    def __init__(self, position: np.ndarray, rotation: np.ndarray,
                 is_pinched: bool = False,
                 extra_rotation: Optional[np.ndarray] = None,
                 extra_scale: float = 1.0,
                 secondary_pointer: Optional[np.ndarray] = None):
        self.position = np.asarray(position, dtype=np.float64)
        self.rotation = np.asarray(rotation, dtype=np.float64)
        self.is_pinched = bool(is_pinched)
        self.extra_rotation = (
            None if extra_rotation is None else np.asarray(extra_rotation, dtype=np.float64)
        )
        self.extra_scale = float(extra_scale)
        self.secondary_pointer = (
            None if secondary_pointer is None else np.asarray(secondary_pointer, dtype=np.float64)
        )

    @property
    def has_secondary(self) -> bool:
        return self.secondary_pointer is not None

    def __repr__(self):
        return (
            f"HandFrame(pos={np.round(self.position, 3).tolist()}, "
            f"pinched={self.is_pinched}, scale={self.extra_scale:.2f}, "
            f"secondary={self.has_secondary})"
        )


# =============================================================================
# Persistent filtered state
# =============================================================================

class SmoothedPose:
    """Filtered object pose owned by the temporal smoother.

    Initialized to identity/zero at session start and mutated in place
    once per render tick.
    """

    __slots__ = (
        "position", "rotation", "scale",
        "manual_rotation", "auto_rotation_y",
    )

    def __init__(self):
        self.position = np.zeros(3)
        self.rotation = IDENTITY_QUATERNION.copy()
        self.scale = 0.0
        self.manual_rotation = np.zeros(2)   # accumulated (x, y) radians
        self.auto_rotation_y = 0.0

    def copy(self) -> 'SmoothedPose':
        """Independent snapshot for readers outside the smoother."""
        snapshot = SmoothedPose()
        snapshot.position = self.position.copy()
        snapshot.rotation = self.rotation.copy()
        snapshot.scale = self.scale
        snapshot.manual_rotation = self.manual_rotation.copy()
        snapshot.auto_rotation_y = self.auto_rotation_y
        return snapshot

    def to_dict(self) -> dict:
        return {
            "position": self.position.tolist(),
            "rotation": self.rotation.tolist(),
            "scale": self.scale,
            "manual_rotation": self.manual_rotation.tolist(),
            "auto_rotation_y": self.auto_rotation_y,
        }

    def __repr__(self):
        return (
            f"SmoothedPose(pos={np.round(self.position, 3).tolist()}, "
            f"rot={np.round(self.rotation, 3).tolist()}, scale={self.scale:.3f})"
        )
