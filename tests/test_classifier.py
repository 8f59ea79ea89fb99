"""Tests for swipe classification."""

import numpy as np
import pytest

from swipe_beat.cards import Direction
from swipe_beat.classifier import NO_SWIPE, GestureSample, SwipeClassifier


class TestThresholds:
    def test_distance_at_threshold_does_not_trigger(self):
        classifier = SwipeClassifier()
        assert classifier.classify(100, 0) == NO_SWIPE
        assert classifier.classify(0, -100) == NO_SWIPE

    def test_distance_just_over_threshold_triggers(self):
        classifier = SwipeClassifier()
        assert classifier.classify(101, 0).direction == Direction.RIGHT
        assert classifier.classify(-101, 0).direction == Direction.LEFT

    def test_vertical_directions_use_screen_coordinates(self):
        classifier = SwipeClassifier()
        assert classifier.classify(0, 101).direction == Direction.DOWN
        assert classifier.classify(0, -101).direction == Direction.UP

    def test_velocity_at_threshold_does_not_trigger(self):
        classifier = SwipeClassifier()
        assert not classifier.classify(10, 10, 500, -500).swiped

    def test_velocity_alone_triggers(self):
        classifier = SwipeClassifier()
        # Short drag, fast flick
        assert classifier.classify(10, 50, 0, 600).direction == Direction.DOWN
        assert classifier.classify(-20, 5, -501, 0).direction == Direction.LEFT

    def test_custom_thresholds(self):
        classifier = SwipeClassifier(swipe_threshold=50, velocity_threshold=100)
        assert classifier.classify(60, 0).direction == Direction.RIGHT
        assert classifier.classify(0, -10, 0, -150).direction == Direction.UP
        assert not classifier.classify(40, 0, 90, 0).swiped


class TestDominantAxis:
    def test_tie_favors_horizontal(self):
        classifier = SwipeClassifier()
        assert classifier.classify(150, 150).direction == Direction.RIGHT
        assert classifier.classify(-150, 150).direction == Direction.LEFT

    def test_tie_at_threshold_with_velocity(self):
        classifier = SwipeClassifier()
        assert classifier.classify(100, 100, 600, 0).direction == Direction.RIGHT

    def test_vertical_dominant(self):
        classifier = SwipeClassifier()
        assert classifier.classify(120, -130).direction == Direction.UP

    def test_deterministic(self):
        classifier = SwipeClassifier()
        rng = np.random.default_rng(7)
        for dx, dy, vx, vy in rng.uniform(-800, 800, size=(200, 4)):
            assert classifier.classify(dx, dy, vx, vy) == classifier.classify(dx, dy, vx, vy)

    def test_classify_sample(self):
        classifier = SwipeClassifier()
        sample = GestureSample(dx=-200, dy=30, vx=-900, vy=0)
        assert classifier.classify_sample(sample).direction == Direction.LEFT


class TestPathClassification:
    def test_terminal_sample_from_path(self):
        points = [[0, 0], [50, 0], [150, 10]]
        times = [0.0, 0.05, 0.1]
        sample = SwipeClassifier.terminal_sample(points, times)
        assert sample.dx == pytest.approx(150)
        assert sample.dy == pytest.approx(10)
        assert sample.vx == pytest.approx(2000)
        assert sample.vy == pytest.approx(200)

    def test_classify_path(self):
        classifier = SwipeClassifier()
        points = np.array([[0, 0], [0, -40], [5, -120]], dtype=np.float32)
        result = classifier.classify_path(points, [0.0, 0.1, 0.2])
        assert result.direction == Direction.UP

    def test_slow_short_path_is_no_swipe(self):
        classifier = SwipeClassifier()
        points = [[0, 0], [10, 0], [20, 0]]
        assert classifier.classify_path(points, [0.0, 0.5, 1.0]) == NO_SWIPE

    def test_single_point_path(self):
        classifier = SwipeClassifier()
        assert SwipeClassifier.terminal_sample([[3, 4]], [0.0]) is None
        assert classifier.classify_path([[3, 4]], [0.0]) == NO_SWIPE

    def test_mismatched_lengths(self):
        assert SwipeClassifier.terminal_sample([[0, 0], [200, 0]], [0.0]) is None


class TestDragFeedback:
    def test_at_rest(self):
        fb = SwipeClassifier().drag_feedback(0, 0)
        assert fb.scale == pytest.approx(1.0)
        assert fb.opacity == pytest.approx(1.0)
        assert fb.rotation_degrees == pytest.approx(0.0)

    def test_mid_drag(self):
        fb = SwipeClassifier(screen_width=400).drag_feedback(150, 0)
        assert fb.scale == pytest.approx(0.95)
        assert fb.opacity == pytest.approx(0.775)
        assert fb.rotation_degrees == pytest.approx(11.25)

    def test_clamped(self):
        fb = SwipeClassifier(screen_width=400).drag_feedback(-1000, 0)
        assert fb.scale == pytest.approx(0.95)
        assert fb.opacity == pytest.approx(0.7)
        assert fb.rotation_degrees == pytest.approx(-15.0)
