"""
Tests for Landmark Extraction
==============================
"""

from types import SimpleNamespace

import numpy as np
import pytest
from numpy.testing import assert_allclose

from conftest import make_hand
from handpose.modules.detection.landmark_extractor import extract_hand_samples, to_hand_sample


def _landmark_list(hand):
    """Mimic a MediaPipe NormalizedLandmarkList."""
    return SimpleNamespace(landmark=[SimpleNamespace(x=p[0], y=p[1], z=p[2]) for p in hand])


class TestToHandSample:
    """Test suite for single-hand validation."""

    def test_array_input(self):
        hand = make_hand()
        assert_allclose(to_hand_sample(hand), hand)

    def test_nested_list_input(self):
        hand = make_hand()
        assert_allclose(to_hand_sample(hand.tolist()), hand)

    def test_landmark_list_input(self):
        hand = make_hand(0.3, 0.6)
        assert_allclose(to_hand_sample(_landmark_list(hand)), hand)

    @pytest.mark.parametrize("raw", [
        None,
        [],
        np.zeros((20, 3)),
        np.zeros((21, 2)),
        np.zeros((22, 3)),
        [[0.0, 0.0, 0.0]] * 20 + [[0.0, 0.0]],
        42,
    ])
    def test_malformed_rejected(self, raw):
        assert to_hand_sample(raw) is None

    @pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
    def test_non_finite_rejected(self, bad):
        hand = make_hand()
        hand[4, 0] = bad
        assert to_hand_sample(hand) is None

    def test_input_not_mutated(self):
        hand = make_hand()
        original = hand.copy()
        sample = to_hand_sample(hand)
        sample += 1.0
        assert_allclose(hand, original)


class TestExtractHandSamples:
    """Test suite for MediaPipe results conversion."""

    def test_no_results(self):
        assert extract_hand_samples(None) == []
        assert extract_hand_samples(SimpleNamespace(multi_hand_landmarks=None)) == []

    def test_preserves_detector_order(self):
        first, second = make_hand(0.3, 0.5), make_hand(0.7, 0.5)
        results = SimpleNamespace(multi_hand_landmarks=[_landmark_list(first), _landmark_list(second)])
        samples = extract_hand_samples(results)
        assert len(samples) == 2
        assert_allclose(samples[0], first)
        assert_allclose(samples[1], second)

    def test_limits_hand_count(self):
        results = SimpleNamespace(multi_hand_landmarks=[_landmark_list(make_hand())] * 3)
        assert len(extract_hand_samples(results)) == 2
        assert len(extract_hand_samples(results, max_hands=1)) == 1

    def test_malformed_entry_kept_as_none(self):
        short = SimpleNamespace(landmark=[SimpleNamespace(x=0.0, y=0.0, z=0.0)] * 5)
        results = SimpleNamespace(multi_hand_landmarks=[short, _landmark_list(make_hand())])
        samples = extract_hand_samples(results)
        assert samples[0] is None
        assert samples[1] is not None
