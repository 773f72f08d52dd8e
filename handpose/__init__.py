"""
Hand Pose AR
============

Turns per-frame 3D hand landmarks (up to two hands) into a smoothed
6-DoF object pose plus a small interaction vector (pinch, extra
rotation, zoom, pointer) for driving a rendered object in real time.

Packages:
    - core: shared types, event bus, frame orchestrator
    - modules.geometry: vector and quaternion primitives
    - modules.detection: MediaPipe adapter and landmark validation
    - modules.recognition: gesture, orientation, two-hand and smoothing stages
    - modules.capture / modules.visualization: demo camera and overlay
    - modules.utils: config, logging, performance monitoring
"""

__version__ = "1.0.0"
__author__ = "Hand Pose AR Team"
