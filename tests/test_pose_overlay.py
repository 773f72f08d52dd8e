"""
Tests for Pose Overlay
=======================
"""

import numpy as np
import pytest

from handpose.core.types import SmoothedPose, WorldScaleContext
from handpose.modules.visualization.pose_overlay import PoseOverlay, world_to_pixel


@pytest.fixture
def world():
    return WorldScaleContext(10.0, 10.0)


class TestWorldToPixel:
    """Test suite for the inverse viewport mapping."""

    def test_origin_is_image_center(self, world):
        assert world_to_pixel([0.0, 0.0, 0.0], world, 640, 480) == (320, 240)

    def test_inverts_world_mapping(self, world):
        point = world.to_world(0.25, 0.75)
        assert world_to_pixel(point, world, 640, 480) == (160, 360)


class TestPoseOverlay:
    """Test suite for overlay rendering."""

    @pytest.fixture
    def frame(self):
        return np.zeros((240, 320, 3), dtype=np.uint8)

    def test_hidden_object_draws_status_only(self, frame, world):
        overlay = PoseOverlay({"show_status": False})
        result = overlay.render(frame, SmoothedPose(), world, {})
        assert result is frame
        assert not frame.any()

    def test_visible_object_is_drawn(self, frame, world):
        pose = SmoothedPose()
        pose.scale = 1.0
        PoseOverlay({"show_status": False}).render(frame, pose, world, {"pinched": True})
        assert frame[:, :, :].any()

    def test_pointer_is_drawn(self, frame, world):
        state = {"secondary_pointer": np.array([2.0, 2.0, 0.0])}
        PoseOverlay({"show_status": False}).render(frame, SmoothedPose(), world, state)
        x, y = world_to_pixel(state["secondary_pointer"], world, 320, 240)
        assert frame[y, x].any()

    @pytest.mark.parametrize("paused", [False, True])
    def test_status_bar(self, frame, world, paused):
        state = {"fps": 60.0, "hand_count": 1, "pinched": False, "paused": paused}
        PoseOverlay({}).render(frame, SmoothedPose(), world, state)
        assert frame[:36].any()
        assert not frame[100:].any()
