"""
MediaPipe Hands adapter feeding landmark batches into the pose pipeline.

Only this module imports mediapipe; everything downstream works on the
``(21, 3)`` arrays produced by ``landmark_extractor``.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np
import mediapipe as mp

from handpose.modules.detection.landmark_extractor import MAX_HANDS, extract_hand_samples

logger = logging.getLogger(__name__)


class HandDetector:
    """Two-hand MediaPipe tracker, created lazily on first use."""

    def __init__(self, config: dict):
        self._options = {
            "static_image_mode": False,
            "model_complexity": config.get("model_complexity", 1),
            "max_num_hands": min(config.get("max_num_hands", MAX_HANDS), MAX_HANDS),
            "min_detection_confidence": config.get("min_detection_confidence", 0.5),
            "min_tracking_confidence": config.get("min_tracking_confidence", 0.5),
        }
        self._solution = mp.solutions.hands
        self._drawing = mp.solutions.drawing_utils
        self._styles = mp.solutions.drawing_styles
        self._model = None

    @property
    def max_hands(self) -> int:
        return self._options["max_num_hands"]

    @property
    def is_ready(self) -> bool:
        return self._model is not None

    def initialize(self):
        if self._model is not None:
            return
        self._model = self._solution.Hands(**self._options)
        logger.info(
            "MediaPipe Hands ready (complexity=%d, max_hands=%d, detect_conf=%.2f, track_conf=%.2f)",
            self._options["model_complexity"], self._options["max_num_hands"],
            self._options["min_detection_confidence"], self._options["min_tracking_confidence"],
        )

    def detect(self, rgb_frame: np.ndarray):
        """Run the tracker on an RGB frame and return the raw results object."""
        self.initialize()
        # Read-only input lets MediaPipe skip a copy
        rgb_frame.flags.writeable = False
        try:
            return self._model.process(rgb_frame)
        finally:
            rgb_frame.flags.writeable = True

    def detect_samples(self, rgb_frame: np.ndarray) -> Tuple[object, List[Optional[np.ndarray]]]:
        """Returns (results, samples); samples keep detector order, index 0 = primary."""
        results = self.detect(rgb_frame)
        return results, extract_hand_samples(results, self.max_hands)

    def draw_landmarks(self, frame: np.ndarray, results) -> np.ndarray:
        """Overlay the detected hand skeletons on a BGR frame."""
        hands = getattr(results, "multi_hand_landmarks", None)
        if not hands:
            return frame
        landmark_style = self._styles.get_default_hand_landmarks_style()
        connection_style = self._styles.get_default_hand_connections_style()
        for hand_landmarks in hands:
            self._drawing.draw_landmarks(frame, hand_landmarks, self._solution.HAND_CONNECTIONS,
                                         landmark_style, connection_style)
        return frame

    def close(self):
        if self._model is None:
            return
        self._model.close()
        self._model = None
        logger.info("MediaPipe Hands closed")

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, *args):
        self.close()
