"""
Camera capture for the demo application.

Frames are delivered unmirrored by default: the pipeline's world mapping
already mirrors x for a front-facing camera, so flipping here as well
would cancel it out. Every delivered frame carries an increasing id that
the orchestrator uses to drop stale detector results.
"""

import time
import logging
import threading
from collections import namedtuple
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)

CameraFrame = namedtuple("CameraFrame", ["frame_id", "image"])

NO_FRAME = CameraFrame(None, None)


class CameraManager:
    """OpenCV capture, either polled (``read_sync``) or fed by a
    background thread that keeps only the newest frame (``read``)."""

    def __init__(self, config: dict):
        self._device_id = config.get("device_id", 0)
        self._requested = (config.get("width", 1280), config.get("height", 720))
        self._resolution = self._requested
        self._fps = config.get("fps", 30)
        self._mirror = config.get("flip_horizontal", False)

        self._cap = None
        self._next_id = 0
        self._latest = NO_FRAME
        self._lock = threading.Lock()
        self._worker: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    def open(self) -> bool:
        """Open the device and request resolution/fps; False if unavailable."""
        cap = cv2.VideoCapture(self._device_id)
        if not cap.isOpened():
            logger.error("Failed to open camera %d", self._device_id)
            return False

        width, height = self._requested
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        cap.set(cv2.CAP_PROP_FPS, self._fps)

        # Drivers may fall back to another mode
        self._resolution = (
            int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)) or width,
            int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) or height,
        )
        self._cap = cap
        logger.info("Camera %d opened at %dx%d (requested %dx%d)",
                    self._device_id, *self._resolution, width, height)
        return True

    def _grab(self) -> CameraFrame:
        ok, image = self._cap.read()
        if not ok or image is None:
            return NO_FRAME
        if self._mirror:
            image = cv2.flip(image, 1)
        self._next_id += 1
        return CameraFrame(self._next_id, image)

    def start_async(self):
        """Capture on a daemon thread; ``read`` then returns the newest frame."""
        if self._cap is None or (self._worker and self._worker.is_alive()):
            return
        self._stop_event.clear()
        self._worker = threading.Thread(target=self._capture_loop, name="camera-capture", daemon=True)
        self._worker.start()
        logger.info("Async capture started")

    def _capture_loop(self):
        while not self._stop_event.is_set():
            frame = self._grab()
            if frame.image is None:
                time.sleep(0.001)
                continue
            with self._lock:
                self._latest = frame

    def read(self) -> CameraFrame:
        """Newest frame from the capture thread, never blocks.

        Returns:
            CameraFrame(frame_id, image copy), or (None, None) before the first frame
        """
        with self._lock:
            frame = self._latest
        if frame.image is None:
            return NO_FRAME
        return CameraFrame(frame.frame_id, frame.image.copy())

    def read_sync(self) -> CameraFrame:
        """Blocking read on the calling thread."""
        if self._cap is None:
            return NO_FRAME
        return self._grab()

    @staticmethod
    def to_rgb(image: np.ndarray) -> np.ndarray:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

    @property
    def resolution(self) -> tuple:
        """(width, height) actually delivered by the device."""
        return self._resolution

    @property
    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def stop(self):
        """Join the capture thread and release the device."""
        self._stop_event.set()
        if self._worker and self._worker.is_alive():
            self._worker.join(timeout=2.0)
        self._worker = None
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("Camera stopped")

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *args):
        self.stop()
