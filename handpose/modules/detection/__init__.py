"""Hand detection module.

HandDetector (MediaPipe) lives in ``hand_detector`` and is imported
explicitly by the application so the pipeline runs without mediapipe.
"""
from .landmark_extractor import extract_hand_samples, to_hand_sample

__all__ = ["extract_hand_samples", "to_hand_sample"]
