"""
Shared fixtures for the hand pose test suite.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from handpose.core.events import EventBus
from handpose.core.types import LandmarkIndex
from handpose.modules.utils.config import Config


def make_hand(cx: float = 0.5, cy: float = 0.5, pinch: float = 0.02, z: float = 0.0) -> np.ndarray:
    """
    Create a synthetic (21, 3) hand sample.

    The palm triangle (wrist, index MCP, pinky MCP) is centered on
    (cx, cy), the palm basis gives forward=(0,1,0) and side=(1,0,0), and
    the thumb tip sits ``pinch`` to the right of the index tip.
    """
    hand = np.zeros((21, 3))
    hand[:, 2] = z

    hand[LandmarkIndex.WRIST] = [cx, cy - 0.1, z]
    hand[LandmarkIndex.INDEX_MCP] = [cx - 0.05, cy + 0.05, z]
    hand[LandmarkIndex.MIDDLE_MCP] = [cx, cy + 0.1, z]
    hand[LandmarkIndex.RING_MCP] = [cx + 0.025, cy + 0.075, z]
    hand[LandmarkIndex.PINKY_MCP] = [cx + 0.05, cy + 0.05, z]

    # Finger joints stacked along +y from each MCP
    for mcp, joints in (
        (LandmarkIndex.INDEX_MCP, (6, 7, 8)),
        (LandmarkIndex.MIDDLE_MCP, (10, 11, 12)),
        (LandmarkIndex.RING_MCP, (14, 15, 16)),
        (LandmarkIndex.PINKY_MCP, (18, 19, 20)),
    ):
        for step, idx in enumerate(joints, start=1):
            hand[idx] = hand[mcp] + [0.0, 0.05 * step, 0.0]

    hand[LandmarkIndex.THUMB_CMC] = [cx - 0.06, cy - 0.05, z]
    hand[LandmarkIndex.THUMB_MCP] = [cx - 0.08, cy, z]
    hand[LandmarkIndex.THUMB_IP] = [cx - 0.08, cy + 0.08, z]
    hand[LandmarkIndex.THUMB_TIP] = hand[LandmarkIndex.INDEX_TIP] + [pinch, 0.0, 0.0]
    return hand


@pytest.fixture
def hand_factory():
    return make_hand


@pytest.fixture(autouse=True)
def clean_singletons():
    """Fresh event bus and config for every test."""
    bus = EventBus()
    bus.reset()
    Config.reset()
    yield
    bus.reset()
    Config.reset()
