"""Pose recognition stages: gesture, orientation, two-hand combination, smoothing."""
from .gesture_detector import GestureDetector, compute_centroid
from .orientation_estimator import OrientationEstimator, estimate_orientation
from .dual_hand_combiner import DualHandCombiner
from .temporal_smoother import TemporalSmoother

__all__ = [
    "GestureDetector",
    "compute_centroid",
    "OrientationEstimator",
    "estimate_orientation",
    "DualHandCombiner",
    "TemporalSmoother",
]
