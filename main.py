#!/usr/bin/env python3
"""
Hand Pose AR - demo application.

Camera -> MediaPipe Hands -> FrameOrchestrator -> PoseOverlay.
The primary hand grabs (pinch) and orients the object; a second hand
adds rotation, zoom and a label pointer.

Usage:
    python main.py                    # Default camera and config
    python main.py --camera 1         # Another camera device
    python main.py --auto-rotate 40   # Start with autorotate at 40%

Keys:
    q  quit            a  toggle autorotate      +/-  autorotate speed
    s  sleep / wake    p  performance report
"""

import os
import sys
import signal
import argparse
import logging

import cv2

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from handpose.core.events import EventBus
from handpose.core.pipeline import FrameOrchestrator
from handpose.core.types import WorldScaleContext
from handpose.modules.capture.camera_manager import CameraManager
from handpose.modules.detection.hand_detector import HandDetector
from handpose.modules.utils.config import Config
from handpose.modules.utils.logger import setup_logging, InteractionLogger
from handpose.modules.utils.performance_monitor import PerformanceMonitor
from handpose.modules.visualization.pose_overlay import PoseOverlay

logger = logging.getLogger(__name__)


class HandPoseApp:
    """Wires capture, detection, the pose pipeline and the overlay."""

    def __init__(self, config: Config):
        self._config = config
        self._running = False

        self._bus = EventBus()
        self._interaction_log = InteractionLogger()
        self._interaction_log.attach(self._bus)

        self._camera = CameraManager(config.camera)
        self._detector = HandDetector(config.mediapipe)
        self._perf = PerformanceMonitor(
            window_size=config.get("performance.metrics_window", 100),
            frame_budget_ms=config.get("performance.frame_budget_ms", 1.0),
        )
        self._orchestrator = FrameOrchestrator(
            config={
                "tracking": config.tracking,
                "smoothing": config.smoothing,
                "interaction": config.interaction,
            },
            event_bus=self._bus,
            performance_monitor=self._perf,
        )
        self._overlay = PoseOverlay(config.visualization)

    def _update_world_scale(self):
        width, height = self._camera.resolution
        viewport = self._config.viewport
        self._orchestrator.set_world_scale(WorldScaleContext.from_viewport(
            width, height,
            camera_z=viewport.get("camera_z", 10.0),
            fov_deg=viewport.get("fov_deg", 50.0),
        ))

    def start(self) -> bool:
        if not self._camera.open():
            logger.error("Failed to open camera. Check connection and permissions.")
            return False

        threaded = self._config.get("performance.enable_threading", True)
        if threaded:
            self._camera.start_async()

        self._detector.initialize()
        self._update_world_scale()

        self._running = True
        try:
            self._run_loop(threaded)
        finally:
            self._shutdown()
        return True

    def _run_loop(self, threaded: bool):
        window_name = self._config.get("visualization.window_name", "Hand Pose AR")
        show = self._config.get("visualization.enabled", True)
        mirror = self._config.get("visualization.mirror_display", True)
        last_frame_id = None

        while self._running:
            frame_id, frame = self._camera.read() if threaded else self._camera.read_sync()
            if frame is None:
                cv2.waitKey(1)
                continue

            if not self._orchestrator.is_paused and frame_id != last_frame_id:
                results, samples = self._detector.detect_samples(self._camera.to_rgb(frame))
                self._orchestrator.on_results(samples, frame_id=frame_id)
                if self._config.get("visualization.show_landmarks", True):
                    self._detector.draw_landmarks(frame, results)
                last_frame_id = frame_id

            pose = self._orchestrator.tick()

            if show:
                self._overlay.render(frame, pose, self._orchestrator.world_scale,
                                     self._orchestrator.build_state())
                cv2.imshow(window_name, cv2.flip(frame, 1) if mirror else frame)

            self._handle_key(cv2.waitKey(1) & 0xFF)

    def _handle_key(self, key: int):
        if key == ord("q"):
            self._running = False
        elif key == ord("a"):
            self._orchestrator.set_auto_rotate(not self._orchestrator.auto_rotate)
        elif key in (ord("+"), ord("=")):
            self._orchestrator.set_auto_rotate(
                self._orchestrator.auto_rotate, min(self._orchestrator.auto_rotate_speed + 10, 100))
        elif key == ord("-"):
            self._orchestrator.set_auto_rotate(
                self._orchestrator.auto_rotate, max(self._orchestrator.auto_rotate_speed - 10, 0))
        elif key == ord("s"):
            if self._orchestrator.is_paused:
                self._orchestrator.resume()
            else:
                self._orchestrator.pause()
        elif key == ord("p"):
            self._perf.print_report()

    def _shutdown(self):
        logger.info("Shutting down...")
        self._running = False
        self._camera.stop()
        self._detector.close()
        cv2.destroyAllWindows()
        self._perf.print_report()
        logger.info("Interaction events recorded: %d", self._interaction_log.total_events)

    def handle_signal(self, signum, frame):
        """Handle SIGINT/SIGTERM for graceful shutdown."""
        logger.info("Signal %d received, shutting down...", signum)
        self._running = False


def parse_args():
    parser = argparse.ArgumentParser(description="Hand Pose AR - hand-driven 6-DoF object demo")
    parser.add_argument("--config", type=str, default=None, help="Path to config.yaml")
    parser.add_argument("--camera", type=int, default=None, help="Camera device ID")
    parser.add_argument("--auto-rotate", type=int, default=None, metavar="SPEED",
                        help="Enable autorotate at SPEED percent (0-100)")
    parser.add_argument("--scale", type=float, default=None, help="Base object scale")
    return parser.parse_args()


def main():
    args = parse_args()

    config = Config()
    overrides = {}
    if args.camera is not None:
        overrides.setdefault("camera", {})["device_id"] = args.camera
    if args.auto_rotate is not None:
        overrides.setdefault("interaction", {}).update(
            auto_rotate=True, auto_rotate_speed=args.auto_rotate)
    if args.scale is not None:
        overrides.setdefault("interaction", {})["base_object_scale"] = args.scale
    config.load(config_path=args.config, overrides=overrides)

    log_cfg = config.get_section("logging")
    setup_logging(
        level=log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    logger.info("=" * 60)
    logger.info("  HAND POSE AR")
    logger.info("  Version: %s", config.get("system.version", "1.0.0"))
    logger.info("=" * 60)

    app = HandPoseApp(config)
    signal.signal(signal.SIGINT, app.handle_signal)
    signal.signal(signal.SIGTERM, app.handle_signal)

    if not app.start():
        sys.exit(1)


if __name__ == "__main__":
    main()
