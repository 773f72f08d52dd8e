"""
Tests for Shared Types
=======================
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from handpose.core.types import HandFrame, LandmarkIndex, SmoothedPose, WorldScaleContext


class TestWorldScaleContext:
    """Test suite for the normalized -> world mapping."""

    def test_center_maps_to_origin(self):
        assert_allclose(WorldScaleContext(10.0, 6.0).to_world(0.5, 0.5), [0.0, 0.0, 0.0])

    def test_mirrored_axes(self):
        ctx = WorldScaleContext(10.0, 6.0)
        assert_allclose(ctx.to_world(0.0, 0.0), [5.0, 3.0, 0.0])
        assert_allclose(ctx.to_world(1.0, 1.0), [-5.0, -3.0, 0.0])

    def test_from_viewport(self):
        ctx = WorldScaleContext.from_viewport(1280, 720)
        # 2 * 10 * tan(25 deg)
        assert ctx.scale_y == pytest.approx(9.326, abs=1e-3)
        assert ctx.scale_x == pytest.approx(ctx.scale_y * 1280 / 720)

    @pytest.mark.parametrize("width, height", [(0, 720), (1280, 0), (-1, 10)])
    def test_from_viewport_rejects_empty(self, width, height):
        with pytest.raises(ValueError):
            WorldScaleContext.from_viewport(width, height)

    def test_equality(self):
        assert WorldScaleContext(2, 3) == WorldScaleContext(2.0, 3.0)
        assert WorldScaleContext(2, 3) != WorldScaleContext(3, 2)


class TestHandFrame:
    """Test suite for the per-frame measurement."""

    def test_single_hand_defaults(self):
        frame = HandFrame(position=[1, 2, 0], rotation=[0, 0, 0, 1])
        assert not frame.is_pinched
        assert frame.extra_scale == 1.0
        assert frame.extra_rotation is None
        assert not frame.has_secondary
        assert frame.position.dtype == np.float64

    def test_secondary(self):
        frame = HandFrame([0, 0, 0], [0, 0, 0, 1], secondary_pointer=[1, 1, 0])
        assert frame.has_secondary


class TestSmoothedPose:
    """Test suite for the persistent filter state."""

    def test_initial_state(self):
        pose = SmoothedPose()
        assert_allclose(pose.position, [0, 0, 0])
        assert_allclose(pose.rotation, [0, 0, 0, 1])
        assert pose.scale == 0.0
        assert_allclose(pose.manual_rotation, [0, 0])
        assert pose.auto_rotation_y == 0.0

    def test_copy_is_independent(self):
        pose = SmoothedPose()
        snapshot = pose.copy()
        pose.position[0] = 5.0
        pose.rotation[3] = 0.0
        pose.scale = 2.0
        assert snapshot.position[0] == 0.0
        assert snapshot.rotation[3] == 1.0
        assert snapshot.scale == 0.0

    def test_instances_do_not_share_identity(self):
        a, b = SmoothedPose(), SmoothedPose()
        a.rotation[0] = 1.0
        assert b.rotation[0] == 0.0

    def test_to_dict(self):
        data = SmoothedPose().to_dict()
        assert data["rotation"] == [0.0, 0.0, 0.0, 1.0]
        assert set(data) == {"position", "rotation", "scale", "manual_rotation", "auto_rotation_y"}


def test_landmark_indices():
    assert LandmarkIndex.WRIST == 0
    assert LandmarkIndex.THUMB_TIP == 4
    assert LandmarkIndex.INDEX_MCP == 5
    assert LandmarkIndex.INDEX_TIP == 8
    assert LandmarkIndex.MIDDLE_MCP == 9
    assert LandmarkIndex.PINKY_MCP == 17
    assert len(LandmarkIndex) == 21
