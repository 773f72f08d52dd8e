"""
Frame orchestrator for the hand pose pipeline.

Two event sources drive it:
    detector callback -> on_results(): landmarks -> HandFrame (latest wins)
    render tick       -> tick():       HandFrame -> TemporalSmoother -> SmoothedPose

Both may run on different threads; a single lock serializes the
latest-frame handoff and every smoother update. Hand order is taken
from the detector each frame, there is no cross-frame re-identification.
"""

import time
import logging
import threading
from typing import Iterable, List, Optional

import numpy as np

from handpose.core.events import EventBus, Events
from handpose.core.types import HandFrame, SmoothedPose, WorldScaleContext
from handpose.modules.detection.landmark_extractor import extract_hand_samples, to_hand_sample
from handpose.modules.geometry.vector_math import distance
from handpose.modules.recognition.dual_hand_combiner import DualHandCombiner
from handpose.modules.recognition.gesture_detector import GestureDetector
from handpose.modules.recognition.orientation_estimator import OrientationEstimator
from handpose.modules.recognition.temporal_smoother import TemporalSmoother
from handpose.modules.utils.config import coerce_number, numeric_option
from handpose.modules.utils.logger import log_timing
from handpose.modules.utils.performance_monitor import PerformanceMonitor

logger = logging.getLogger(__name__)

DEFAULT_LABEL_RADIUS = 1.5
DEFAULT_AUTO_ROTATE_SPEED = 20


def _clamp_speed(speed) -> int:
    """Autorotate speed is a percentage in [0, 100]."""
    return coerce_number("auto_rotate_speed", speed, DEFAULT_AUTO_ROTATE_SPEED,
                         minimum=0, maximum=100, integer=True)


def _section(config: dict, name: str) -> dict:
    section = config.get(name, {})
    if not isinstance(section, dict):
        logger.warning("Config section '%s' should be a dict, got %r; using defaults", name, section)
        return {}
    return section


class FrameOrchestrator:
    """Glue between the detector, the recognition stages and the renderer.

    Outputs to the renderer are the smoothed pose (``tick``/``pose``) and
    the pointer proximity helpers.
    """

    def __init__(self, config: Optional[dict] = None,
                 world_scale: Optional[WorldScaleContext] = None,
                 event_bus: Optional[EventBus] = None,
                 performance_monitor: Optional[PerformanceMonitor] = None):
        config = config or {}
        tracking_cfg = _section(config, "tracking")
        smoothing_cfg = _section(config, "smoothing")
        interaction_cfg = _section(config, "interaction")

        self._bus = event_bus or EventBus()
        self._perf = performance_monitor or PerformanceMonitor()
        self._lock = threading.Lock()

        # Stages
        self._estimator = OrientationEstimator()
        self._combiner = DualHandCombiner(
            tracking_cfg,
            gesture_detector=GestureDetector(tracking_cfg),
            orientation_estimator=self._estimator,
        )
        self._smoother = TemporalSmoother(
            smoothing_cfg,
            base_object_scale=interaction_cfg.get("base_object_scale", 1.0),
        )

        # Runtime options
        self._world_scale = world_scale or WorldScaleContext()
        self._auto_rotate = bool(interaction_cfg.get("auto_rotate", False))
        self._auto_rotate_speed = _clamp_speed(
            interaction_cfg.get("auto_rotate_speed", DEFAULT_AUTO_ROTATE_SPEED))
        self._label_radius = numeric_option(interaction_cfg, "label_radius", DEFAULT_LABEL_RADIUS, minimum=0.0)

        # Per-session state
        self._latest_frame: Optional[HandFrame] = None
        self._last_frame_id = None
        self._last_tick_time = None
        self._paused = False
        self._ever_detected = False
        self._dropped_frames = 0

        logger.info(
            "FrameOrchestrator initialized (world=%r, auto_rotate=%s@%d%%)",
            self._world_scale, self._auto_rotate, self._auto_rotate_speed,
        )

    # =========================================================================
    # Detector side
    # =========================================================================

    def on_results(self, hands: Iterable, frame_id: Optional[int] = None) -> Optional[HandFrame]:
        """Consume one detector batch of zero, one or two hands.

        Args:
            hands: raw hand samples in detector order (index 0 = primary)
            frame_id: optional monotonically increasing frame number; frames
                not newer than the last accepted one are dropped

        Returns:
            The HandFrame now considered latest, or None when no hand
        """
        with self._lock:
            if self._paused:
                return None

            if frame_id is not None and self._last_frame_id is not None \
                    and frame_id <= self._last_frame_id:
                self._dropped_frames += 1
                logger.debug("Dropped out-of-order frame %d (last %d)",
                             frame_id, self._last_frame_id)
                return self._latest_frame
            if frame_id is not None:
                self._last_frame_id = frame_id

            with self._perf.measure("frame_build"):
                frame = self._build_frame([] if hands is None else list(hands))

            previous = self._latest_frame
            self._latest_frame = frame
            first = frame is not None and not self._ever_detected
            if frame is not None:
                self._ever_detected = True

        self._emit_transitions(previous, frame, first)
        return frame

    def on_detector_results(self, results, frame_id: Optional[int] = None) -> Optional[HandFrame]:
        """Convenience entry for a MediaPipe results object."""
        return self.on_results(extract_hand_samples(results), frame_id=frame_id)

    @log_timing
    def _build_frame(self, hands: List) -> Optional[HandFrame]:
        if not hands:
            return None

        primary = to_hand_sample(hands[0])
        if primary is None:
            logger.debug("Primary hand sample malformed, treating as no hand")
            return None

        secondary = to_hand_sample(hands[1]) if len(hands) > 1 else None
        return self._combiner.combine(primary, secondary, self._world_scale)

    def _emit_transitions(self, previous: Optional[HandFrame],
                          current: Optional[HandFrame], first: bool):
        if previous is None and current is not None:
            self._bus.emit(Events.HAND_DETECTED, first=first,
                           hand_count=2 if current.has_secondary else 1)
        elif previous is not None and current is None:
            self._bus.emit(Events.HAND_LOST)

        had_second = previous is not None and previous.has_secondary
        has_second = current is not None and current.has_secondary
        if has_second and not had_second:
            self._bus.emit(Events.SECOND_HAND_DETECTED)
        elif had_second and not has_second:
            self._bus.emit(Events.SECOND_HAND_LOST)

        was_pinched = previous is not None and previous.is_pinched
        is_pinched = current is not None and current.is_pinched
        if is_pinched and not was_pinched:
            self._bus.emit(Events.PINCH_STARTED, position=tuple(current.position.tolist()))
        elif was_pinched and not is_pinched:
            self._bus.emit(Events.PINCH_RELEASED)

    # =========================================================================
    # Render side
    # =========================================================================

    def tick(self, elapsed: Optional[float] = None) -> SmoothedPose:
        """Advance the smoother by one render tick.

        Args:
            elapsed: seconds since the previous tick; measured with a
                monotonic clock when omitted (0 on the first tick)

        Returns:
            Snapshot of the smoothed pose
        """
        with self._lock:
            now = time.perf_counter()
            if self._paused:
                return self._smoother.pose.copy()

            if elapsed is None:
                elapsed = 0.0 if self._last_tick_time is None else now - self._last_tick_time
            self._last_tick_time = now

            frame = self._latest_frame
            with self._perf.measure("smoothing"):
                self._smoother.update(
                    frame,
                    is_visible=frame is not None,
                    elapsed=elapsed,
                    auto_rotate_enabled=self._auto_rotate,
                    auto_rotate_speed_percent=self._auto_rotate_speed,
                )
            self._perf.tick()
            return self._smoother.pose.copy()

    @property
    def pose(self) -> SmoothedPose:
        with self._lock:
            return self._smoother.pose.copy()

    # =========================================================================
    # Pointer proximity (label visibility)
    # =========================================================================

    def pointer_distance(self, point) -> Optional[float]:
        """Distance from a world point to the secondary pointer, if any."""
        frame = self._latest_frame
        if frame is None or frame.secondary_pointer is None:
            return None
        return distance(point, frame.secondary_pointer)

    def proximity_query(self, point, radius: float) -> bool:
        """True when the secondary pointer is within ``radius`` of ``point``."""
        d = self.pointer_distance(point)
        return d is not None and d < radius

    def object_to_world(self, local_point) -> np.ndarray:
        """Object-local point -> world, using smoothed position and scale."""
        pose = self.pose
        return pose.position + np.asarray(local_point, dtype=np.float64) * pose.scale

    def label_visibility(self, local_points, radius: Optional[float] = None) -> List[bool]:
        """Per sub-part flag: is the pointer close enough to show its label."""
        radius = self._label_radius if radius is None else radius
        return [self.proximity_query(self.object_to_world(p), radius) for p in local_points]

    # =========================================================================
    # Session control
    # =========================================================================

    def pause(self):
        """Sleep mode: stop feeding the smoother, keep its state."""
        with self._lock:
            if self._paused:
                return
            self._paused = True
        logger.info("Hand tracking paused")
        self._bus.emit(Events.TRACKING_PAUSED)

    def resume(self):
        """Leave sleep mode without an elapsed-time jump."""
        with self._lock:
            if not self._paused:
                return
            self._paused = False
            self._last_tick_time = None
            self._last_frame_id = None
        logger.info("Hand tracking resumed")
        self._bus.emit(Events.TRACKING_RESUMED)

    def reset(self):
        """Session restart: identity pose, no hand, fresh clocks."""
        with self._lock:
            self._smoother.reset()
            self._estimator.reset()
            self._latest_frame = None
            self._last_frame_id = None
            self._last_tick_time = None
            self._ever_detected = False
        logger.info("Hand tracking session reset")

    def set_world_scale(self, world_scale: WorldScaleContext):
        with self._lock:
            self._world_scale = world_scale
        logger.debug("World scale set to %r", world_scale)
        self._bus.emit(Events.WORLD_SCALE_CHANGED,
                       scale_x=world_scale.scale_x, scale_y=world_scale.scale_y)

    def set_auto_rotate(self, enabled: bool, speed_percent: Optional[int] = None):
        with self._lock:
            self._auto_rotate = bool(enabled)
            if speed_percent is not None:
                self._auto_rotate_speed = _clamp_speed(speed_percent)
        logger.info("Autorotate %s (speed %d%%)",
                    "on" if self._auto_rotate else "off", self._auto_rotate_speed)

    def set_base_object_scale(self, scale: float):
        with self._lock:
            self._smoother.base_object_scale = scale

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def latest_frame(self) -> Optional[HandFrame]:
        return self._latest_frame

    @property
    def hand_visible(self) -> bool:
        return self._latest_frame is not None

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def world_scale(self) -> WorldScaleContext:
        return self._world_scale

    @property
    def auto_rotate(self) -> bool:
        return self._auto_rotate

    @property
    def auto_rotate_speed(self) -> int:
        return self._auto_rotate_speed

    @property
    def dropped_frames(self) -> int:
        return self._dropped_frames

    @property
    def performance(self) -> PerformanceMonitor:
        return self._perf

    def build_state(self) -> dict:
        """State dict for the debug overlay."""
        frame = self._latest_frame
        return {
            "fps": self._perf.fps,
            "latency_ms": self._perf.get_stage_latency("smoothing")
            + self._perf.get_stage_latency("frame_build"),
            "hand_detected": frame is not None,
            "hand_count": 0 if frame is None else (2 if frame.has_secondary else 1),
            "pinched": frame is not None and frame.is_pinched,
            "extra_scale": 1.0 if frame is None else frame.extra_scale,
            "secondary_pointer": None if frame is None else frame.secondary_pointer,
            "auto_rotate": self._auto_rotate,
            "auto_rotate_speed": self._auto_rotate_speed,
            "paused": self._paused,
        }
